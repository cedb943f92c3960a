from app.models.user import User, UserStatus, UserRoleAssignment, RoleName, ApiToken, TokenType
from app.models.profile import Profile
from app.models.tax_record import TaxRecord, TaxStatus, TaxType
from app.models.complaint import Complaint, ComplaintStatus, ComplaintType

__all__ = [
    "User",
    "UserStatus",
    "UserRoleAssignment",
    "RoleName",
    "ApiToken",
    "TokenType",
    "Profile",
    "TaxRecord",
    "TaxStatus",
    "TaxType",
    "Complaint",
    "ComplaintStatus",
    "ComplaintType",
]

# Pydantic schemas
from app.schemas.auth import (
    UserCreate, UserLogin, UserResponse, SessionResponse, ProfileResponse,
    TokenResponse, RefreshTokenRequest
)
from app.schemas.profile import ProfileUpdate, CitizenProfileResponse
from app.schemas.tax import (
    TaxRecordCreate, TaxRecordUpdate, TaxRecordResponse,
    AdminTaxRecordResponse, DuesSummaryResponse
)
from app.schemas.complaint import (
    ComplaintCreate, ComplaintResponse, TrackedComplaintResponse, ComplaintSubmittedResponse
)

__all__ = [
    "UserCreate", "UserLogin", "UserResponse", "SessionResponse", "ProfileResponse",
    "TokenResponse", "RefreshTokenRequest",
    "ProfileUpdate", "CitizenProfileResponse",
    "TaxRecordCreate", "TaxRecordUpdate", "TaxRecordResponse",
    "AdminTaxRecordResponse", "DuesSummaryResponse",
    "ComplaintCreate", "ComplaintResponse", "TrackedComplaintResponse", "ComplaintSubmittedResponse",
]

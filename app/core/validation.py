"""
Field rules shared by sign-up, profile edits, the eligible-user
predicate and the tax-record create/edit paths.
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Any

from app.core.exceptions import ValidationError

PHONE_PATTERN = re.compile(r"^\d{10}$", re.ASCII)
NATIONAL_ID_PATTERN = re.compile(r"^\d{12}$", re.ASCII)

# Numeric(12, 2) column
MAX_AMOUNT = Decimal("10000000000")


def is_valid_phone(phone: Optional[str]) -> bool:
    return bool(phone) and PHONE_PATTERN.fullmatch(phone) is not None


def is_valid_national_id(national_id: Optional[str]) -> bool:
    return bool(national_id) and NATIONAL_ID_PATTERN.fullmatch(national_id) is not None


def is_non_blank(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def is_eligible(full_name: Optional[str], phone: Optional[str], national_id: Optional[str], address: Optional[str]) -> bool:
    """A profile may receive tax records only when every identity field is complete and well formed."""
    return (
        is_non_blank(full_name)
        and is_valid_phone(phone)
        and is_valid_national_id(national_id)
        and is_non_blank(address)
    )


def normalize_phone(value: Any) -> str:
    phone = str(value or "").strip()
    if not is_valid_phone(phone):
        raise ValueError("Phone number must be exactly 10 digits")
    return phone


def normalize_national_id(value: Any) -> str:
    # Aadhar numbers are often written in groups of four
    national_id = str(value or "").replace(" ", "").replace("-", "")
    if not is_valid_national_id(national_id):
        raise ValueError("Aadhar number must be exactly 12 digits")
    return national_id


def normalize_required_text(value: Any, field_name: str) -> str:
    text = str(value or "").strip()
    if not text:
        raise ValueError(f"{field_name} must not be empty")
    return text


def require_positive_amount(amount: Any) -> Decimal:
    """Return the amount as a 2-place Decimal, raising ValidationError unless it is > 0"""
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError("Amount must be a number")
    if not value.is_finite():
        raise ValidationError("Amount must be greater than zero")
    if value >= MAX_AMOUNT:
        raise ValidationError("Amount is too large")
    # 9999999999.995 rounds up to the limit
    value = value.quantize(Decimal("0.01"))
    if value <= 0:
        raise ValidationError("Amount must be greater than zero")
    if value >= MAX_AMOUNT:
        raise ValidationError("Amount is too large")
    return value

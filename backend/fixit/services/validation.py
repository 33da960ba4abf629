"""Field-keyed validation for the sign-in, sign-up and create-job forms.

Every validator returns a dict with one message per offending field (empty
when valid) so the caller can highlight each field on its own.
"""

import re
from datetime import date, datetime, timezone
from typing import Dict, Optional, Union

from fixit.config import MAX_JOB_PHOTOS, MIN_PASSWORD_LENGTH
from fixit.errors import MarketplaceValidationError
from fixit.models import AuthSignUpRequest, JobDraft, ServiceCategory, User

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")

SERVICE_CATEGORY_VALUES = {category.value for category in ServiceCategory}


def ensure_valid(errors: Dict[str, str]) -> None:
    if errors:
        raise MarketplaceValidationError(errors)


def _check_email(email: str, errors: Dict[str, str]) -> None:
    if not (email or "").strip():
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.search(email):
        errors["email"] = "Email is invalid"


def _check_password(password: str, errors: Dict[str, str]) -> None:
    if not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"


def parse_preferred_date(value: Union[date, str, None]) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raw = (value or "").strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw).date()
    except ValueError:
        return None


def is_valid_user(user: User) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    _check_email(user.email, errors)
    if not user.name.strip():
        errors["name"] = "Name is required"
    return errors


def is_valid_job_draft(draft: JobDraft, today: Optional[date] = None) -> Dict[str, str]:
    today = today or datetime.now(timezone.utc).date()
    errors: Dict[str, str] = {}
    if not draft.description.strip():
        errors["description"] = "Description is required"
    if not draft.address.strip():
        errors["address"] = "Address is required"

    if draft.preferred_date in ("", None):
        errors["preferred_date"] = "Preferred date is required"
    else:
        preferred = parse_preferred_date(draft.preferred_date)
        if preferred is None:
            errors["preferred_date"] = "Preferred date is invalid; expected YYYY-MM-DD"
        elif preferred < today:
            errors["preferred_date"] = "Preferred date cannot be in the past"

    if len(draft.photos) > MAX_JOB_PHOTOS:
        errors["photos"] = f"You can only upload up to {MAX_JOB_PHOTOS} photos"
    if draft.service_category not in SERVICE_CATEGORY_VALUES:
        errors["service_category"] = "Please select a service category"
    return errors


def validate_sign_in(email: str, password: str) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    _check_email(email, errors)
    _check_password(password, errors)
    return errors


def validate_sign_up(form: AuthSignUpRequest) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not form.name.strip():
        errors["name"] = "Name is required"
    _check_email(form.email, errors)
    _check_password(form.password, errors)
    if form.password != form.confirm_password:
        errors["confirm_password"] = "Passwords do not match"

    if form.user_type == "customer":
        if not form.address.strip():
            errors["address"] = "Address is required"
    else:
        if not form.business_name.strip():
            errors["business_name"] = "Business name is required"
        if not form.license_number.strip():
            errors["license_number"] = "License number is required"
        if not form.insurance_number.strip():
            errors["insurance_number"] = "Insurance number is required"
        if not form.service_categories:
            errors["service_categories"] = "Please select at least one service category"
        elif any(category not in SERVICE_CATEGORY_VALUES for category in form.service_categories):
            errors["service_categories"] = "Unknown service category"
    return errors

"""
Input validation for sign-up, sign-in and report submission.

Each check runs in a fixed order and raises ValidationError naming the first
field that fails, mirroring the prompts the report and login forms show.
"""
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError
from ..models import (
    Category,
    Coordinates,
    LocationMode,
    Priority,
    ReportDraft,
    MAX_DESCRIPTION_LENGTH,
    MIN_PASSWORD_LENGTH,
    MOBILE_NUMBER_LENGTH,
)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def validate_mobile_number(mobile_number: Optional[str]) -> str:
    if _blank(mobile_number):
        raise ValidationError("mobile_number", "Please enter your mobile number")
    # str.isdigit accepts other scripts' digits; only ASCII 0-9 count here
    if len(mobile_number) != MOBILE_NUMBER_LENGTH or not (
        mobile_number.isascii() and mobile_number.isdigit()
    ):
        raise ValidationError(
            "mobile_number",
            f"Please enter a valid {MOBILE_NUMBER_LENGTH}-digit mobile number",
        )
    return mobile_number


def validate_registration(
    full_name: Optional[str],
    mobile_number: Optional[str],
    password: Optional[str],
    confirm_password: Optional[str],
) -> None:
    if _blank(full_name):
        raise ValidationError("full_name", "Please enter your full name")

    validate_mobile_number(mobile_number)

    if _blank(password):
        raise ValidationError("password", "Please enter your password")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            "password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    if _blank(confirm_password):
        raise ValidationError("confirm_password", "Please confirm your password")
    if confirm_password != password:
        raise ValidationError("confirm_password", "Passwords do not match")


def validate_login(mobile_number: Optional[str], password: Optional[str]) -> None:
    """Sign-in only checks presence of the password, never its length."""
    validate_mobile_number(mobile_number)
    if _blank(password):
        raise ValidationError("password", "Please enter your password")


def validate_report_draft(draft: ReportDraft) -> dict:
    """
    Check a draft and return the normalized fields for a Report.

    Order: image -> location (per mode) -> description -> category -> priority.
    """
    if _blank(draft.image_ref):
        raise ValidationError("image_ref", "Please attach a photo of the issue")

    try:
        mode = LocationMode(draft.location_mode)
    except ValueError:
        raise ValidationError("location", f"Unknown location mode: {draft.location_mode}")

    coordinates: Optional[Coordinates] = None
    manual_text: Optional[str] = None
    if mode == LocationMode.AUTO:
        if draft.coordinates is None:
            raise ValidationError("location", "Please detect your current location")
        coordinates = draft.coordinates
    else:
        if _blank(draft.manual_location_text):
            raise ValidationError("location", "Please enter the location")
        manual_text = draft.manual_location_text.strip()

    if _blank(draft.description):
        raise ValidationError("description", "Please describe the issue")
    description = draft.description.strip()
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            "description",
            f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters",
        )

    if _blank(draft.category):
        raise ValidationError("category", "Please select a category")
    try:
        category = Category(draft.category)
    except ValueError:
        raise ValidationError("category", f"Unknown category: {draft.category}")

    try:
        priority = Priority(draft.priority)
    except ValueError:
        raise ValidationError("priority", f"Unknown priority: {draft.priority}")

    return {
        "image_ref": draft.image_ref,
        "location_mode": mode,
        "coordinates": coordinates,
        "manual_location_text": manual_text,
        "description": description,
        "category": category,
        "priority": priority,
    }


# Draft attribute -> form field reported to the user, in form order
_DRAFT_FIELDS = {
    "image_ref": "image_ref",
    "location_mode": "location",
    "coordinates": "location",
    "manual_location_text": "location",
    "description": "description",
    "category": "category",
    "priority": "priority",
}
_FORM_ORDER = ["image_ref", "location", "description", "category", "priority"]


def build_report_draft(**fields) -> ReportDraft:
    """
    Build a ReportDraft from raw form input.

    Malformed values (wrong types, coordinates out of range) raise
    ValidationError naming the earliest failing form field.
    """
    try:
        return ReportDraft(**fields)
    except PydanticValidationError as e:
        failing = {
            _DRAFT_FIELDS.get(str(error["loc"][0]) if error["loc"] else "", "location")
            for error in e.errors()
        }
        field = min(failing, key=_FORM_ORDER.index)
        raise ValidationError(field) from e

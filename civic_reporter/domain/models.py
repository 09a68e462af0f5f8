from pydantic import BaseModel, Field, ConfigDict, TypeAdapter, field_validator, model_validator
from typing import Optional, List
from datetime import datetime, timezone
from enum import Enum

MOBILE_NUMBER_LENGTH = 10
MIN_PASSWORD_LENGTH = 6
MAX_DESCRIPTION_LENGTH = 500
ANONYMOUS_REPORTER = "Anonymous"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# ENUMS
# ============================================================================

class LocationMode(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


class Category(str, Enum):
    ROAD = "road"
    WATER = "water"
    ELECTRICITY = "electricity"
    WASTE = "waste"
    SAFETY = "safety"
    OTHER = "other"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS = {
    Category.ROAD: "Road & Transport",
    Category.WATER: "Water & Drainage",
    Category.ELECTRICITY: "Electricity",
    Category.WASTE: "Waste Management",
    Category.SAFETY: "Safety & Security",
    Category.OTHER: "Other",
}


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class ReportStatus(str, Enum):
    SUBMITTED = "Submitted"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    REJECTED = "Rejected"


# ============================================================================
# ACCOUNT / SESSION
# ============================================================================

class Account(BaseModel):
    """Registered user. Stored under user_credentials_<mobile>."""
    full_name: str = Field(..., alias="fullName")
    mobile_number: str = Field(..., alias="mobile", pattern=r"^[0-9]{10}$")
    password: str  # cleartext, kept as the device client stored it
    id: str

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("full name must not be blank")
        return v


class Session(BaseModel):
    """The authenticated identity. Holds a copy of the account, not a reference."""
    token: str = Field(..., min_length=1)
    account: Account

    model_config = ConfigDict(frozen=True)


# ============================================================================
# REPORTS
# ============================================================================

class Coordinates(BaseModel):
    """Degrees as supplied by the location collaborator. Extra keys are dropped."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    model_config = ConfigDict(extra="ignore")


class ReportDraft(BaseModel):
    """
    Raw submission input as the report form collects it.

    Fields are loosely typed on purpose; ReportService validates them in a
    fixed order and reports the first failing field.
    """
    image_ref: Optional[str] = None
    location_mode: str = LocationMode.AUTO.value
    coordinates: Optional[Coordinates] = None
    manual_location_text: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    priority: str = Priority.MEDIUM.value


class Report(BaseModel):
    """Civic issue report. Immutable after creation apart from deletion."""
    id: str
    image_ref: str = Field(..., alias="image", min_length=1)
    location_mode: LocationMode = Field(..., alias="locationMode")
    coordinates: Optional[Coordinates] = Field(None, alias="location")
    manual_location_text: Optional[str] = Field(None, alias="manualLocation")
    description: str = Field(..., min_length=1, max_length=MAX_DESCRIPTION_LENGTH)
    category: Category
    priority: Priority = Priority.MEDIUM
    status: ReportStatus = ReportStatus.SUBMITTED
    created_at: datetime = Field(default_factory=utcnow, alias="timestamp")
    reported_by_name: str = Field(ANONYMOUS_REPORTER, alias="reportedBy")
    reported_by_mobile: Optional[str] = Field(None, alias="userMobile")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @model_validator(mode="after")
    def check_location_matches_mode(self) -> "Report":
        if self.location_mode == LocationMode.AUTO:
            if self.coordinates is None or self.manual_location_text is not None:
                raise ValueError("auto location requires coordinates and no manual text")
        else:
            if not (self.manual_location_text or "").strip() or self.coordinates is not None:
                raise ValueError("manual location requires text and no coordinates")
        return self

    @property
    def location_label(self) -> str:
        if self.location_mode == LocationMode.MANUAL:
            return self.manual_location_text
        return f"{self.coordinates.latitude:.4f}, {self.coordinates.longitude:.4f}"


# ============================================================================
# SERIALIZATION
# ============================================================================

_report_list = TypeAdapter(List[Report])


def encode_account(account: Account) -> str:
    return account.model_dump_json(by_alias=True)


def decode_account(raw: str) -> Account:
    return Account.model_validate_json(raw)


def encode_reports(reports: List[Report]) -> str:
    """Serialize a collection, newest-first, using the on-device key names."""
    return _report_list.dump_json(reports, by_alias=True).decode("utf-8")


def decode_reports(raw: str) -> List[Report]:
    return _report_list.validate_json(raw)

from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ServiceCategory(str, Enum):
    HVAC = "HVAC"
    GUTTER_CLEANING = "Gutter Cleaning"
    PLUMBING = "Plumbing"
    ELECTRICAL = "Electrical"
    GENERAL_HANDYMAN = "General Handyman"


class JobStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


# ── Users ───────────────────────────────────────────────────────────────


class CustomerProfile(FrozenModel):
    user_type: Literal["customer"] = "customer"
    address: str = ""
    job_ids: tuple[str, ...] = ()


class ProfessionalProfile(FrozenModel):
    user_type: Literal["professional"] = "professional"
    business_name: str = Field(min_length=1)
    license_number: str = Field(min_length=1)
    insurance_number: str = Field(min_length=1)
    service_categories: tuple[ServiceCategory, ...] = Field(min_length=1)
    # Not enforced unless REQUIRE_PROFESSIONAL_APPROVAL is set.
    is_approved: bool = False
    rating: float = Field(default=0.0, ge=0, le=5)
    total_reviews: int = Field(default=0, ge=0)
    completed_job_ids: tuple[str, ...] = ()
    earnings: float = Field(default=0.0, ge=0)

    @field_validator("service_categories")
    @classmethod
    def _dedupe_categories(cls, value: tuple[ServiceCategory, ...]) -> tuple[ServiceCategory, ...]:
        return tuple(dict.fromkeys(value))


class AdminProfile(FrozenModel):
    user_type: Literal["admin"] = "admin"


UserProfile = Annotated[
    Union[CustomerProfile, ProfessionalProfile, AdminProfile],
    Field(discriminator="user_type"),
]


class User(FrozenModel):
    id: str
    email: str
    phone: Optional[str] = None
    name: str
    profile: UserProfile
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @computed_field  # type: ignore[misc]
    @property
    def user_type(self) -> str:
        return self.profile.user_type


# ── Jobs ────────────────────────────────────────────────────────────────


class Job(FrozenModel):
    id: str
    customer_id: str
    professional_id: Optional[str] = None
    service_category: ServiceCategory
    description: str = Field(min_length=1)
    photos: tuple[str, ...] = ()
    address: str
    preferred_date: date
    status: JobStatus = JobStatus.PENDING
    final_price: Optional[float] = Field(default=None, ge=0)
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    review: Optional[str] = None


class JobDraft(BaseModel):
    """Unvalidated job request as captured by the create-job form."""

    description: str = ""
    address: str = ""
    preferred_date: Union[date, str] = ""
    photos: list[str] = Field(default_factory=list)
    service_category: Optional[str] = None


# ── Messaging, payments, notifications ──────────────────────────────────


class Message(FrozenModel):
    id: str
    job_id: str
    sender_id: str
    sender_type: Literal["customer", "professional"]
    content: str
    timestamp: datetime = Field(default_factory=utcnow)


class Payment(FrozenModel):
    id: str
    job_id: str
    amount: float = Field(gt=0)
    status: Literal["pending", "completed", "failed"] = "pending"
    external_reference: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None


class NotificationRecord(FrozenModel):
    id: str
    user_id: str
    title: str
    body: str
    type: Literal["job_accepted", "job_completed", "payment_received", "new_message"]
    data: Optional[Dict[str, Any]] = None
    is_read: bool = False
    created_at: datetime = Field(default_factory=utcnow)


# ── Application state ───────────────────────────────────────────────────


class AuthState(FrozenModel):
    user: Optional[User] = None
    is_authenticated: bool = False
    is_loading: bool = False
    error: Optional[str] = None

    @model_validator(mode="after")
    def _authenticated_iff_user(self) -> "AuthState":
        if self.is_authenticated != (self.user is not None):
            raise ValueError("is_authenticated must be true exactly when a user is set")
        return self


class JobsState(FrozenModel):
    jobs: tuple[Job, ...] = ()
    current_job: Optional[Job] = None
    is_loading: bool = False
    error: Optional[str] = None


class ChatState(FrozenModel):
    messages: tuple[Message, ...] = ()
    is_loading: bool = False
    error: Optional[str] = None


class AppState(FrozenModel):
    auth: AuthState = Field(default_factory=AuthState)
    jobs: JobsState = Field(default_factory=JobsState)
    chat: ChatState = Field(default_factory=ChatState)
    version: int = 0


# ── HTTP payloads ───────────────────────────────────────────────────────


class AuthLoginRequest(BaseModel):
    email: str = ""
    password: str = ""
    user_type: Literal["customer", "professional"] = "customer"


class AuthSignUpRequest(BaseModel):
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    password: str = ""
    confirm_password: str = ""
    user_type: Literal["customer", "professional"] = "customer"
    address: str = ""
    business_name: str = ""
    license_number: str = ""
    insurance_number: str = ""
    service_categories: list[str] = Field(default_factory=list)


class AuthLoginResponse(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    user: User
    expires_at: str
    route: str


class SessionRouteResponse(BaseModel):
    route: str
    reachable: list[str]


class JobFeedItem(BaseModel):
    job: Job
    distance: str
    posted: str
    status_label: str


class JobCompleteRequest(BaseModel):
    final_price: float = Field(ge=0)


class JobRateRequest(BaseModel):
    rating: int = Field(ge=1, le=5)
    review: str = ""


class MessageCreateRequest(BaseModel):
    content: str

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SignupRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None


class SignupResponse(BaseModel):
    success: bool
    userId: str
    message: str


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserProfile(BaseModel):
    id: str
    email: str
    name: str
    role: str
    createdAt: Optional[str] = None


class LoginResponse(BaseModel):
    accessToken: str
    tokenType: str = "bearer"
    expiresIn: int
    user: UserProfile


class BookingCreate(BaseModel):
    """Booking submission, stored as sent; nothing is checked or coerced."""

    flightId: Any = None
    fareClass: Any = None
    passenger: Any = None
    addOns: Any = None
    selectedSeat: Any = None
    totalPrice: Any = None
    userId: Any = None


class BookingCreated(BaseModel):
    bookingId: str
    confirmationCode: str


class AlertCreate(BaseModel):
    """Price alert body; unknown keys are stored as sent."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    from_: Any = Field(default=None, alias="from")
    to: Any = None
    targetPrice: Any = None
    dateRange: Any = None
    emailEnabled: Any = None
    pushEnabled: Any = None


class ChatRequest(BaseModel):
    message: Optional[str] = None
    conversationHistory: List[Any] = Field(
        default_factory=list,
        validation_alias=AliasChoices("conversationHistory", "history"),
    )


class ChatResponse(BaseModel):
    response: str
    suggestions: List[str] = Field(default_factory=list)


class SeatInfo(BaseModel):
    seat_number: str
    row: int
    cabin_class: str
    status: str


class SeatMapResponse(BaseModel):
    flightId: str
    fareClass: str
    seats: List[SeatInfo] = Field(default_factory=list)

import random
import string
import time
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

import auth
import kv_store as kv
from auth import AuthError
from config import ACCESS_TOKEN_TTL, ANON_KEY, API_PREFIX, SERVER_NAME, SERVER_VERSION
from database import Base, engine, get_db
from flight_data import (
    ADD_ON_PRICES,
    FIXED_SEARCH_RESULTS,
    FLIGHT_DATABASE,
    generate_seat_layout,
    get_flight,
    search_catalog,
)
from logging_config import logger
from models import User
from schemas import (
    AlertCreate,
    BookingCreate,
    BookingCreated,
    ChatRequest,
    ChatResponse,
    LoginRequest,
    LoginResponse,
    SeatInfo,
    SeatMapResponse,
    SignupRequest,
    SignupResponse,
    UserProfile,
)

BASE36 = string.digits + string.ascii_lowercase
DEFAULT_BAGGAGE = "1 x 23kg checked bag"

CHAT_RESPONSES = [
    "I can help you find the best flights! What's your destination and travel dates?",
    "Great choice! I found several options. Would you like me to show you the cheapest or the fastest flights?",
    "Based on historical data, prices for this route are currently 15% below average. I'd recommend booking soon!",
    "I can set up a price alert for you. What's your target price?",
    "The best time to book flights to that destination is typically 6-8 weeks in advance.",
]
CHAT_SUGGESTIONS = ["Search flights", "Set price alert", "View trending routes"]

AVAILABLE_ENDPOINTS = [
    f"{API_PREFIX}{path}"
    for path in (
        "/health",
        "/db-test",
        "/signup",
        "/login",
        "/user",
        "/bookings",
        "/alerts",
        "/chat",
        "/flights",
        "/flights/search",
        "/admin/stats",
    )
]

Base.metadata.create_all(bind=engine)

app = FastAPI(title="SkySmart - Flight Booking Server", version=SERVER_VERSION)
router = APIRouter(prefix=API_PREFIX)


def utc_now_iso() -> str:
    return datetime.utcnow().isoformat(timespec="milliseconds") + "Z"


def now_millis() -> int:
    return int(time.time() * 1000)


def generate_record_id(kind: str) -> str:
    return f"{kind}_{now_millis()}_{''.join(random.choices(BASE36, k=9))}"


def generate_confirmation_code() -> str:
    # Display only; collisions are not checked.
    alphabet = string.ascii_uppercase + string.digits
    return "SKY-" + "".join(random.choices(alphabet, k=6))


def generate_seat() -> str:
    return f"{random.randint(1, 30)}{random.choice('ABCDEF')}"


def append_to_index(db: Session, index_key: str, record_id: str) -> None:
    # Read, push, write back. Concurrent appends can drop an entry.
    existing = kv.get(db, index_key) or []
    kv.set(db, index_key, [*existing, record_id])


def load_indexed(db: Session, index_key: str, record_prefix: str) -> List[dict]:
    ids = kv.get(db, index_key) or []
    records = kv.mget(db, [f"{record_prefix}{record_id}" for record_id in ids])
    return [record for record in records if record]


def public_profile(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


#
# Error handling
#

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # No endpoint in scope means the router found nothing for this path, and a
    # 405 means the path exists under another method only.
    unmatched = exc.status_code == status.HTTP_404_NOT_FOUND and request.scope.get("endpoint") is None
    if unmatched or exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        logger.info("404 - Route not found: %s %s", request.method, request.url)
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "error": "Route not found",
                "path": str(request.url),
                "availableEndpoints": AVAILABLE_ENDPOINTS,
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


def server_error_response(exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "message": str(exc),
            "timestamp": utc_now_iso(),
        },
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Logs every request and answers uncaught errors with the 500 JSON body."""
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as exc:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        response = server_error_response(exc)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed_ms
    )
    return response


# Added after log_requests so it wraps it, error responses included.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["Content-Length"],
    max_age=600,
)


@app.on_event("startup")
async def seed_demo_accounts():
    auth.create_initial_users()


#
# Health and diagnostics
#

@router.get("/health")
def health():
    logger.info("Health check requested")
    return {
        "status": "ok",
        "timestamp": utc_now_iso(),
        "server": SERVER_NAME,
        "version": SERVER_VERSION,
    }


@router.get("/db-test")
def db_test(db: Session = Depends(get_db)):
    logger.info("=== DATABASE CONNECTION TEST ===")
    test_key = f"test:{now_millis()}"
    test_value = {"message": "Database connection test", "timestamp": utc_now_iso()}

    try:
        kv.set(db, test_key, test_value)
        retrieved = kv.get(db, test_key)
        kv.delete(db, test_key)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Key-value store test failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Database test failed", "message": str(exc)},
        )
    if retrieved != test_value:
        logger.error("Key-value store returned %r for %s", retrieved, test_key)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Database test failed", "message": "Read back a different value"},
        )

    try:
        users = auth.list_users(db)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Auth connection test failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Auth connection failed",
                "details": str(exc),
                "kvStoreWorking": True,
            },
        )

    logger.info("Database test passed, %d users", len(users))
    return {
        "status": "success",
        "message": "Database fully connected and operational!",
        "tests": {"kvStore": "passed", "auth": "passed"},
        "userCount": len(users),
        "timestamp": utc_now_iso(),
    }


#
# Accounts
#

@router.post("/signup", response_model=SignupResponse)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    logger.info("Signup request received for email: %s", payload.email)
    if not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    role = payload.role or "user"
    try:
        user = auth.create_user(
            db,
            payload.email,
            payload.password,
            user_metadata={"name": payload.name, "role": role},
            email_confirm=True,
        )
    except AuthError as exc:
        logger.warning("Signup refused for %s: %s", payload.email, exc)
        raise HTTPException(status_code=400, detail=str(exc))

    kv.set(
        db,
        f"user:{user.id}",
        {
            "id": user.id,
            "email": user.email,
            "name": payload.name,
            "role": role,
            "createdAt": utc_now_iso(),
        },
    )
    logger.info("User created: %s", user.id)
    return SignupResponse(success=True, userId=user.id, message="Account created successfully")


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    if not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="Email and password are required")
    try:
        token, user = auth.sign_in_with_password(db, payload.email, payload.password)
    except AuthError as exc:
        logger.warning("Login failed for %s", payload.email)
        raise HTTPException(status_code=400, detail=str(exc))
    return LoginResponse(
        accessToken=token,
        expiresIn=ACCESS_TOKEN_TTL,
        user=UserProfile(**public_profile(user)),
    )


@router.get("/user")
def read_current_user(
    current_user: User = Depends(auth.require_user),
    db: Session = Depends(get_db),
):
    profile = kv.get(db, f"user:{current_user.id}")
    return {"user": profile or public_profile(current_user)}


#
# Bookings
#

def resolve_booking_user(request: Request, payload: BookingCreate, db: Session) -> Optional[str]:
    """A real access token wins; otherwise the body's userId is taken as is."""
    token = auth.bearer_token(request)
    if token and token != ANON_KEY:
        try:
            return auth.get_user(db, token).id
        except AuthError as exc:
            logger.warning("Booking rejected, bad access token: %s", exc)
            raise HTTPException(status_code=401, detail="Unauthorized")
    return payload.userId


@router.post("/bookings", response_model=BookingCreated)
def create_booking(payload: BookingCreate, request: Request, db: Session = Depends(get_db)):
    user_id = resolve_booking_user(request, payload, db)

    booking_id = generate_record_id("booking")
    booking = {
        "id": booking_id,
        "userId": user_id,
        "flightId": payload.flightId,
        "fareClass": payload.fareClass,
        "passenger": payload.passenger,
        "addOns": payload.addOns,
        "totalPrice": payload.totalPrice,
        "status": "confirmed",
        "confirmationCode": generate_confirmation_code(),
        "seat": payload.selectedSeat or generate_seat(),
        "baggage": DEFAULT_BAGGAGE,
        "date": datetime.utcnow().date().isoformat(),
        "createdAt": utc_now_iso(),
    }

    kv.set(db, f"booking:{booking_id}", booking)
    if user_id:
        append_to_index(db, f"user_bookings:{user_id}", booking_id)

    logger.info(
        "Booking %s created for user %s on flight %s seat %s",
        booking_id,
        user_id,
        payload.flightId,
        booking["seat"],
    )
    return BookingCreated(bookingId=booking_id, confirmationCode=booking["confirmationCode"])


@router.get("/bookings/{booking_id}")
def booking_detail(booking_id: str, db: Session = Depends(get_db)):
    booking = kv.get(db, f"booking:{booking_id}")
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return {"booking": booking}


@router.get("/user/bookings")
def list_user_bookings(
    current_user: User = Depends(auth.require_user),
    db: Session = Depends(get_db),
):
    return {"bookings": load_indexed(db, f"user_bookings:{current_user.id}", "booking:")}


#
# Price alerts
#

@router.post("/alerts")
def create_alert(
    payload: AlertCreate,
    current_user: User = Depends(auth.require_user),
    db: Session = Depends(get_db),
):
    alert_id = generate_record_id("alert")
    alert = {
        "id": alert_id,
        "userId": current_user.id,
        **payload.model_dump(by_alias=True, exclude_unset=True),
        "active": True,
        "createdAt": utc_now_iso(),
    }

    kv.set(db, f"alert:{alert_id}", alert)
    append_to_index(db, f"user_alerts:{current_user.id}", alert_id)

    logger.info("Alert %s created for user %s", alert_id, current_user.id)
    return {"alertId": alert_id, "alert": alert}


@router.get("/user/alerts")
def list_user_alerts(
    current_user: User = Depends(auth.require_user),
    db: Session = Depends(get_db),
):
    return {"alerts": load_indexed(db, f"user_alerts:{current_user.id}", "alert:")}


@router.delete("/alerts/{alert_id}")
def delete_alert(
    alert_id: str,
    current_user: User = Depends(auth.require_user),
    db: Session = Depends(get_db),
):
    # Any signed-in user may delete any alert; the owner is not compared.
    kv.delete(db, f"alert:{alert_id}")
    logger.info("Alert %s deleted by user %s", alert_id, current_user.id)
    return {"success": True}


#
# Chat
#

@router.post("/chat", response_model=ChatResponse)
def chat(payload: ChatRequest):
    logger.info(
        "Chat message received (%d prior turns)", len(payload.conversationHistory)
    )
    return ChatResponse(response=random.choice(CHAT_RESPONSES), suggestions=CHAT_SUGGESTIONS)


#
# Flights
#

@router.get("/flights/search")
def search_flights(
    origin: Optional[str] = Query(None, alias="from"),
    destination: Optional[str] = Query(None, alias="to"),
    date: Optional[str] = Query(None, description="Ignored"),
):
    logger.info("Flight search %s -> %s on %s", origin, destination, date)
    return {"flights": FIXED_SEARCH_RESULTS}


@router.get("/flights")
def list_flights(
    origin: Optional[str] = Query(None, alias="from"),
    destination: Optional[str] = Query(None, alias="to"),
):
    return {"flights": search_catalog(origin, destination)}


@router.get("/flights/{flight_id}")
def flight_detail(flight_id: str):
    flight = get_flight(flight_id)
    if not flight:
        raise HTTPException(status_code=404, detail="Flight not found")
    return {"flight": flight, "addOnPrices": ADD_ON_PRICES}


@router.get("/flights/{flight_id}/seats", response_model=SeatMapResponse)
def seat_map(flight_id: str, fare_class: str = Query("Economy", alias="fareClass")):
    if not get_flight(flight_id):
        raise HTTPException(status_code=404, detail="Flight not found")
    seats = [SeatInfo(**seat) for seat in generate_seat_layout(fare_class)]
    return SeatMapResponse(flightId=flight_id, fareClass=seats[0].cabin_class, seats=seats)


#
# Admin
#

@router.get("/admin/stats")
def admin_stats(
    admin: User = Depends(auth.require_admin),
    db: Session = Depends(get_db),
):
    logger.info("Admin stats request from: %s", admin.email)
    users = auth.list_users(db)
    bookings = kv.get_by_prefix(db, "booking:")
    alerts = kv.get_by_prefix(db, "alert:")

    users_data = [
        {
            "id": u.id,
            "email": u.email,
            "name": u.name,
            "role": u.role,
            "created_at": u.created_at.isoformat() if u.created_at else None,
        }
        for u in users
    ]
    return {
        "stats": {
            "totalUsers": len(users),
            "totalBookings": len(bookings),
            "totalAlerts": len(alerts),
            "totalFlights": len(FLIGHT_DATABASE),
        },
        "users": users_data,
        "bookings": bookings,
        "alerts": alerts,
    }


def clear_prefix(db: Session, prefix: str, label: str, admin: User) -> dict:
    logger.info("Admin clearing all %s, requested by: %s", label, admin.email)
    keys = kv.keys_by_prefix(db, prefix)
    count = kv.mdel(db, keys)
    logger.info("Cleared %d %s", count, label)
    return {"success": True, "message": f"Cleared {count} {label}", "count": count}


@router.delete("/admin/clear-bookings")
def clear_bookings(
    admin: User = Depends(auth.deny_unless_admin),
    db: Session = Depends(get_db),
):
    return clear_prefix(db, "booking:", "bookings", admin)


@router.delete("/admin/clear-alerts")
def clear_alerts(
    admin: User = Depends(auth.deny_unless_admin),
    db: Session = Depends(get_db),
):
    return clear_prefix(db, "alert:", "alerts", admin)


app.include_router(router)

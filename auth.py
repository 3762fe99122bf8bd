"""
auth.py

Authentication delegate: owns user accounts, password checks and access
tokens. Request handlers only ever see the resolved User.
"""

import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import Depends, HTTPException, Request, status
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from passlib.context import CryptContext
from sqlalchemy.orm import Session

import kv_store as kv
from config import ACCESS_TOKEN_TTL, DEMO_ADMIN_EMAIL, DEMO_ADMIN_PASSWORD, SECRET_KEY
from database import SessionLocal, get_db
from logging_config import logger
from models import User

serializer = URLSafeTimedSerializer(SECRET_KEY, salt="skysmart-access-token")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
MIN_PASSWORD_LENGTH = 6


class AuthError(Exception):
    """Raised by the delegate; the message is safe to return to clients."""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, stored: str) -> bool:
    return pwd_context.verify(password, stored)


def create_user(
    db: Session,
    email: str,
    password: str,
    user_metadata: Optional[dict] = None,
    email_confirm: bool = False,
) -> User:
    email = (email or "").strip().lower()
    if "@" not in email:
        raise AuthError("Unable to validate email address: invalid format")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise AuthError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters")
    if db.query(User).filter(User.email == email).first():
        raise AuthError("A user with this email address has already been registered")

    user = User(
        id=str(uuid.uuid4()),
        email=email,
        password_hash=hash_password(password),
        user_metadata=dict(user_metadata or {}),
        email_confirmed_at=datetime.utcnow() if email_confirm else None,
        created_at=datetime.utcnow(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_access_token(user: User) -> str:
    return serializer.dumps({"sub": user.id})


def sign_in_with_password(db: Session, email: str, password: str) -> Tuple[str, User]:
    email = (email or "").strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password or "", user.password_hash):
        raise AuthError("Invalid login credentials")
    return create_access_token(user), user


def get_user(db: Session, access_token: str) -> User:
    """Resolve an access token to its user or raise AuthError."""
    try:
        payload = serializer.loads(access_token, max_age=ACCESS_TOKEN_TTL)
    except SignatureExpired:
        raise AuthError("Token has expired")
    except BadSignature:
        raise AuthError("Invalid token")

    user_id = payload.get("sub") if isinstance(payload, dict) else None
    user = db.get(User, user_id) if user_id else None
    if not user:
        raise AuthError("User not found")
    return user


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.created_at).all()


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization")
    if not header:
        return None
    parts = header.split(" ")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


#
# FastAPI dependencies
#

def require_user(request: Request, db: Session = Depends(get_db)) -> User:
    token = bearer_token(request)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    try:
        return get_user(db, token)
    except AuthError as exc:
        logger.warning("Rejected access token on %s: %s", request.url.path, exc)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def require_admin(request: Request, db: Session = Depends(get_db)) -> User:
    user = require_user(request, db)
    if user.role != "admin":
        logger.warning("Non-admin user attempted to access %s: %s", request.url.path, user.email)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin role required.",
        )
    return user


def deny_unless_admin(request: Request, db: Session = Depends(get_db)) -> User:
    """Like require_admin, but a bad token is answered with 403 as well."""
    token = bearer_token(request)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    try:
        user = get_user(db, token)
    except AuthError as exc:
        logger.warning("Rejected access token on %s: %s", request.url.path, exc)
        user = None
    if user is None or user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin role required.",
        )
    return user


def create_initial_users():
    """Creates the demo admin account when configured and no users exist."""
    if not (DEMO_ADMIN_EMAIL and DEMO_ADMIN_PASSWORD):
        return
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            return
        logger.info("Creating demo admin account %s", DEMO_ADMIN_EMAIL)
        admin = create_user(
            db,
            DEMO_ADMIN_EMAIL,
            DEMO_ADMIN_PASSWORD,
            user_metadata={"name": "Admin User", "role": "admin"},
            email_confirm=True,
        )
        kv.set(
            db,
            f"user:{admin.id}",
            {
                "id": admin.id,
                "email": admin.email,
                "name": admin.name,
                "role": "admin",
                "createdAt": admin.created_at.isoformat(),
            },
        )
    finally:
        db.close()

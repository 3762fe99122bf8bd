from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, String

from database import Base


class KVStore(Base):
    """Single key-value table; every record is an opaque JSON blob."""

    __tablename__ = "kv_store"

    key = Column(String, primary_key=True)
    value = Column(JSON, nullable=False)


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    user_metadata = Column(JSON, default=dict)  # {"name": ..., "role": "user" | "admin"}
    email_confirmed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def role(self) -> str:
        return (self.user_metadata or {}).get("role") or "user"

    @property
    def name(self) -> str:
        return (self.user_metadata or {}).get("name") or self.email.split("@")[0]

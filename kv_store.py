"""
kv_store.py

Generic key-value access over the kv_store table. Keys are strings, values
are arbitrary JSON. Nothing here locks: callers that read, modify and write
back a value can lose updates under concurrent requests.
"""

from typing import Any, List, Optional, Sequence

from sqlalchemy.orm import Session

from models import KVStore


def set(db: Session, key: str, value: Any) -> None:
    row = db.get(KVStore, key)
    if row is None:
        db.add(KVStore(key=key, value=value))
    else:
        row.value = value
    db.commit()


def get(db: Session, key: str) -> Optional[Any]:
    row = db.get(KVStore, key)
    return row.value if row is not None else None


def delete(db: Session, key: str) -> None:
    row = db.get(KVStore, key)
    if row is not None:
        db.delete(row)
        db.commit()


def mset(db: Session, keys: Sequence[str], values: Sequence[Any]) -> None:
    if len(keys) != len(values):
        raise ValueError("mset needs as many values as keys")
    for key, value in zip(keys, values):
        row = db.get(KVStore, key)
        if row is None:
            db.add(KVStore(key=key, value=value))
        else:
            row.value = value
    db.commit()


def mget(db: Session, keys: Sequence[str]) -> List[Optional[Any]]:
    """Values in the order of `keys`; None where a key is missing."""
    if not keys:
        return []
    rows = db.query(KVStore).filter(KVStore.key.in_(list(keys))).all()
    by_key = {row.key: row.value for row in rows}
    return [by_key.get(key) for key in keys]


def mdel(db: Session, keys: Sequence[str]) -> int:
    if not keys:
        return 0
    deleted = (
        db.query(KVStore)
        .filter(KVStore.key.in_(list(keys)))
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


def _prefix_query(db: Session, prefix: str):
    return (
        db.query(KVStore)
        .filter(KVStore.key.startswith(prefix, autoescape=True))
        .order_by(KVStore.key)
    )


def get_by_prefix(db: Session, prefix: str) -> List[Any]:
    return [row.value for row in _prefix_query(db, prefix).all()]


def keys_by_prefix(db: Session, prefix: str) -> List[str]:
    return [row.key for row in _prefix_query(db, prefix).all()]

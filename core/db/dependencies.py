from typing import Iterator

from sqlalchemy.orm import Session

from core.db.session import SessionLocal


def get_db() -> Iterator[Session]:
    """One session per request. Repositories commit their own writes; this only closes it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

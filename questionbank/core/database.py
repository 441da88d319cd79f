from contextlib import contextmanager
from typing import Iterator
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from questionbank.core.config import settings
from questionbank.core.errors import PartialWriteFailure, QuestionBankError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def make_engine(url: str):
    """Create an engine, passing pool settings only to pooled backends."""
    if url.startswith("sqlite"):
        return create_engine(url, echo=settings.DATABASE_ECHO, future=True)
    return create_engine(
        url,
        echo=settings.DATABASE_ECHO,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT,
        pool_pre_ping=True,
        future=True,
    )


engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Create tables if they don't exist. In production, use migrations instead."""
    # models must be imported so that their tables are registered on the metadata
    from questionbank.models import orm  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


# session.info key counting the atomic() scopes open on a session
ATOMIC_DEPTH = "atomic_depth"


@contextmanager
def atomic(session: Session, operation: str = "operation") -> Iterator[Session]:
    """All-or-nothing boundary for one top-level write operation.

    Commits on success and rolls back on any failure. Inside another
    ``atomic`` block it runs as a SAVEPOINT instead, leaving the commit to the
    outer block. A transaction the session began on its own for earlier reads
    is committed first, so the new writes never ride on it. Domain errors
    propagate unchanged; anything else surfaces as PartialWriteFailure without
    partial identifiers.
    """
    depth = session.info.get(ATOMIC_DEPTH, 0)
    if depth:
        scope = session.begin_nested()
    else:
        if session.in_transaction():
            session.commit()
        scope = session.begin()
    session.info[ATOMIC_DEPTH] = depth + 1
    try:
        with scope:
            yield session
    except QuestionBankError:
        raise
    except Exception as exc:
        logger.error(f"{operation} rolled back: {exc}", exc_info=True)
        raise PartialWriteFailure(operation) from exc
    finally:
        session.info[ATOMIC_DEPTH] = depth

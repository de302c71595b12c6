"""
GiveFi donation ledger: SQLAlchemy-backed donations and users.

Uses DATABASE_URL (PostgreSQL in production); falls back to SQLite at
givefi.db. Amounts are integer lamports. A donation's amount and recipient are
fixed at creation; enabled, metadata, last_donated and user_id can be patched.
Stats count and sum only enabled donations.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import JSON, BigInteger, Boolean, Column, ForeignKey, Integer, String, create_engine, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from backend_givefi.config.env import env_str
from backend_givefi.config.settings import Settings
from backend_givefi.core.exceptions import ValidationError
from backend_givefi.givefi_logging import get_logger
from backend_givefi.utils.wallet_utils import parse_wallet, short_wallet

logger = get_logger(__name__)

Base = declarative_base()

MUTABLE_FIELDS = frozenset({"user_id", "enabled", "last_donated", "metadata"})
IMMUTABLE_FIELDS = frozenset({"id", "amount", "recipient_address"})
# amount is a signed 64-bit column
MAX_AMOUNT_LAMPORTS = 2**63 - 1

# -----------------------------------------------------------------------------
# SQLAlchemy models
# -----------------------------------------------------------------------------


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(128), unique=True, nullable=False)
    password = Column(String(256), nullable=False)

    def to_dict(self) -> dict[str, Any]:
        # password is never exposed
        return {"id": self.id, "username": self.username}


class Donation(Base):
    """
    One recorded donation. amount is lamports; metadata holds optional
    label, description and transactionIds.
    """

    __tablename__ = "donations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    recipient_address = Column(String(64), nullable=False)
    amount = Column(BigInteger, nullable=False)
    enabled = Column(Boolean, nullable=False, default=False, index=True)
    last_donated = Column(String(64), nullable=True)  # ISO date string
    # "metadata" is reserved on declarative classes
    metadata_ = Column("metadata", JSON, nullable=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "recipient_address": self.recipient_address,
            "amount": self.amount,
            "enabled": bool(self.enabled),
            "last_donated": self.last_donated,
            "metadata": self.metadata_,
        }


# -----------------------------------------------------------------------------
# Engine and session
# -----------------------------------------------------------------------------

_engine = None
_SessionLocal: sessionmaker | None = None


def _get_database_url() -> str:
    """GIVEFI_DB_PATH as SQLite if set, else DATABASE_URL from the environment or .env."""
    path = env_str("GIVEFI_DB_PATH")
    if path:
        return f"sqlite:///{path}"
    # fresh Settings so reset_engine() picks up a changed DATABASE_URL
    return Settings().database_url


def _redact_url(url: str) -> str:
    return url.split("?")[0].split("@")[-1].split("//")[-1]


def _get_engine():
    """Create or return cached engine."""
    global _engine
    if _engine is None:
        url = _get_database_url()
        connect_args = {}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        _engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
        logger.info("ledger_engine", url=_redact_url(url))
    return _engine


def _get_session_factory() -> sessionmaker:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=_get_engine())
    return _SessionLocal


@contextmanager
def _session_scope() -> Iterator[Session]:
    """Context manager for a single session. Commits on success, rolls back on error."""
    session = _get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    """Create ledger tables if they do not exist. Safe to call on every startup."""
    try:
        Base.metadata.create_all(bind=_get_engine())
        logger.info("ledger_init_db", url=_redact_url(_get_database_url()))
    except Exception as e:
        logger.exception("ledger_init_db_failed", error=str(e))
        raise


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------


def _validate_amount(amount: Any) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError("amount must be an integer number of lamports")
    if amount <= 0:
        raise ValidationError("amount must be positive")
    if amount > MAX_AMOUNT_LAMPORTS:
        raise ValidationError(f"amount must not exceed {MAX_AMOUNT_LAMPORTS} lamports")
    return amount


def _validate_metadata(metadata: Any) -> dict[str, Any] | None:
    if metadata is None:
        return None
    if not isinstance(metadata, dict):
        raise ValidationError("metadata must be an object")
    return metadata


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------


def create_user(username: str, password: str) -> dict[str, Any]:
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError("username and password are required")
    try:
        with _session_scope() as session:
            row = User(username=username, password=password)
            session.add(row)
            session.flush()
            out = row.to_dict()
    except IntegrityError as e:
        raise ValidationError(f"username already exists: {username}") from e
    logger.info("user_created", user_id=out["id"])
    return out


def get_user(user_id: int) -> dict[str, Any] | None:
    with _session_scope() as session:
        row = session.get(User, user_id)
        return row.to_dict() if row else None


def get_user_by_username(username: str) -> dict[str, Any] | None:
    with _session_scope() as session:
        row = session.query(User).filter(User.username == (username or "").strip()).first()
        return row.to_dict() if row else None


# -----------------------------------------------------------------------------
# Donations
# -----------------------------------------------------------------------------


def create_donation(
    recipient_address: str,
    amount: int,
    enabled: bool = False,
    metadata: dict[str, Any] | None = None,
    user_id: int | None = None,
) -> dict[str, Any]:
    """Insert a donation and return it with its generated id."""
    parse_wallet(recipient_address, "recipient address")
    amount = _validate_amount(amount)
    metadata = _validate_metadata(metadata)
    try:
        with _session_scope() as session:
            row = Donation(
                user_id=user_id,
                recipient_address=recipient_address.strip(),
                amount=amount,
                enabled=bool(enabled),
                metadata_=metadata,
            )
            session.add(row)
            session.flush()
            out = row.to_dict()
    except IntegrityError as e:
        raise ValidationError(f"Unknown user id: {user_id}") from e
    logger.info(
        "donation_created",
        donation_id=out["id"],
        amount=amount,
        enabled=out["enabled"],
        recipient=short_wallet(out["recipient_address"]),
    )
    return out


def get_donation(donation_id: int) -> dict[str, Any] | None:
    with _session_scope() as session:
        row = session.get(Donation, donation_id)
        return row.to_dict() if row else None


def get_donations_by_user(user_id: int) -> list[dict[str, Any]]:
    with _session_scope() as session:
        rows = session.query(Donation).filter(Donation.user_id == user_id).order_by(Donation.id).all()
        return [r.to_dict() for r in rows]


def update_donation(donation_id: int, changes: dict[str, Any]) -> dict[str, Any] | None:
    """
    Patch mutable fields (user_id, enabled, last_donated, metadata).
    Returns the updated record, None if missing. An empty patch returns the record as is.
    Raises ValidationError on attempts to change amount or recipient_address.
    """
    blocked = sorted(set(changes) & IMMUTABLE_FIELDS)
    if blocked:
        raise ValidationError(f"Immutable fields cannot be patched: {', '.join(blocked)}")
    unknown = sorted(set(changes) - MUTABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(unknown)}")
    if "enabled" in changes and not isinstance(changes["enabled"], bool):
        raise ValidationError("enabled must be true or false")
    if "metadata" in changes:
        _validate_metadata(changes["metadata"])
    try:
        with _session_scope() as session:
            row = session.get(Donation, donation_id)
            if row is None:
                return None
            for key, value in changes.items():
                if key == "metadata":
                    row.metadata_ = value
                elif key == "enabled":
                    row.enabled = value
                else:
                    setattr(row, key, value)
            session.flush()
            out = row.to_dict()
    except IntegrityError as e:
        raise ValidationError(f"Unknown user id: {changes.get('user_id')}") from e
    if changes:
        logger.info("donation_updated", donation_id=donation_id, fields=sorted(changes))
    return out


def get_stats() -> dict[str, int]:
    """Count and lamport sum of enabled donations."""
    with _session_scope() as session:
        count, total = (
            session.query(func.count(Donation.id), func.coalesce(func.sum(Donation.amount), 0))
            .filter(Donation.enabled.is_(True))
            .one()
        )
    return {"total_donations": int(count or 0), "total_amount": int(total or 0)}


def reset_engine() -> None:
    """Dispose and clear the cached engine so the next call reads DATABASE_URL / GIVEFI_DB_PATH again."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None

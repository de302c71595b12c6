"""
Donation ledger storage: SQLAlchemy models and CRUD over donations and users.

DATABASE_URL selects the backend (PostgreSQL in production); SQLite otherwise.
"""

from backend_givefi.database.donations import (
    MAX_AMOUNT_LAMPORTS,
    Donation,
    User,
    create_donation,
    create_user,
    get_donation,
    get_donations_by_user,
    get_stats,
    get_user,
    get_user_by_username,
    init_db,
    reset_engine,
    update_donation,
)

__all__ = [
    "MAX_AMOUNT_LAMPORTS",
    "Donation",
    "User",
    "create_donation",
    "create_user",
    "get_donation",
    "get_donations_by_user",
    "get_stats",
    "get_user",
    "get_user_by_username",
    "init_db",
    "reset_engine",
    "update_donation",
]

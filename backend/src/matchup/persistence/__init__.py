"""Persistence layer - per-entity stores over SQLAlchemy Core."""

from matchup.persistence.adapter import Store
from matchup.persistence.auth import AuthStore
from matchup.persistence.config import DatabaseConfig, create_db_engine
from matchup.persistence.match import MatchStore
from matchup.persistence.user import PictureStore, UserStore

__all__ = [
    "AuthStore",
    "DatabaseConfig",
    "MatchStore",
    "PictureStore",
    "Store",
    "UserStore",
    "create_db_engine",
]

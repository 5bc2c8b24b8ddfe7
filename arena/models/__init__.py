"""Database models."""
from arena.models.base import Base, get_async_session, init_db
from arena.models.alliance import AllianceTeam
from arena.models.match import Match

__all__ = [
    "Base",
    "AllianceTeam",
    "Match",
    "get_async_session",
    "init_db",
]

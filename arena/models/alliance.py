"""Alliance model - teams picked into an elimination alliance."""
from __future__ import annotations

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column

from arena.models.base import Base


class AllianceTeam(Base):
    """One team's place in an alliance. pick_position 0 is the captain."""

    __tablename__ = "alliance_teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    alliance_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)  # Seed number, 1 = top seed
    pick_position: Mapped[int] = mapped_column(Integer, nullable=False)
    team_id: Mapped[int] = mapped_column(Integer, nullable=False)

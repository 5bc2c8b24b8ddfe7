"""Match model."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from arena.models.base import Base

MATCH_TYPE_ELIMINATION = "elimination"

STATUS_SCHEDULED = "scheduled"
STATUS_COMPLETE = "complete"

WINNER_RED = "R"
WINNER_BLUE = "B"
WINNER_TIE = "T"
WINNERS = (WINNER_RED, WINNER_BLUE, WINNER_TIE)


class Match(Base):
    """Single scheduled match between a red and a blue alliance."""

    __tablename__ = "matches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(16), nullable=False, index=True)  # elimination
    display_name: Mapped[str] = mapped_column(String(16), nullable=False)  # e.g. F-1, SF2-3
    time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    elim_round: Mapped[int] = mapped_column(Integer, default=0)  # 1 = final, 2 = semifinal, ...
    elim_group: Mapped[int] = mapped_column(Integer, default=0)
    elim_instance: Mapped[int] = mapped_column(Integer, default=0)
    # Team slots; None until the side's alliance is known
    red1: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    red2: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    red3: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    blue1: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    blue2: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    blue3: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(16), default=STATUS_SCHEDULED)  # scheduled, complete
    winner: Mapped[Optional[str]] = mapped_column(String(1), nullable=True)  # R, B, T

    @property
    def is_complete(self) -> bool:
        return self.status == STATUS_COMPLETE

    @property
    def red_teams(self) -> tuple[Optional[int], Optional[int], Optional[int]]:
        return (self.red1, self.red2, self.red3)

    @red_teams.setter
    def red_teams(self, teams) -> None:
        self.red1, self.red2, self.red3 = teams

    @property
    def blue_teams(self) -> tuple[Optional[int], Optional[int], Optional[int]]:
        return (self.blue1, self.blue2, self.blue3)

    @blue_teams.setter
    def blue_teams(self, teams) -> None:
        self.blue1, self.blue2, self.blue3 = teams

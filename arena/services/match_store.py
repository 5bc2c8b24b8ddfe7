"""Match persistence for the elimination bracket."""
from __future__ import annotations

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from arena.errors import InvalidWinnerMarker, PersistenceError
from arena.models import Match
from arena.models.match import MATCH_TYPE_ELIMINATION, STATUS_COMPLETE, WINNERS

logger = logging.getLogger("arena")


class MatchStore:
    """
    Match queries and writes over one session.
    Every write commits straight away so progress already made survives a later failure.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def matches_by_type(self, match_type: str = MATCH_TYPE_ELIMINATION) -> List[Match]:
        """Matches of a type in play order: earliest round first, then instance, then group."""
        try:
            result = await self._session.execute(
                select(Match)
                .where(Match.type == match_type)
                .order_by(Match.elim_round.desc(), Match.elim_instance, Match.elim_group, Match.id)
            )
        except SQLAlchemyError as e:
            logger.exception("Failed to load %s matches", match_type)
            raise PersistenceError(f"Could not load {match_type} matches: {e}") from e
        return list(result.scalars().all())

    async def matches_by_node(self, round_num: int, group: int) -> List[Match]:
        """Elimination matches for one bracket node, ordered by instance."""
        try:
            result = await self._session.execute(
                select(Match)
                .where(
                    Match.type == MATCH_TYPE_ELIMINATION,
                    Match.elim_round == round_num,
                    Match.elim_group == group,
                )
                .order_by(Match.elim_instance, Match.id)
            )
        except SQLAlchemyError as e:
            logger.exception("Failed to load matches for round %d group %d", round_num, group)
            raise PersistenceError(f"Could not load matches for round {round_num} group {group}: {e}") from e
        return list(result.scalars().all())

    async def create(self, match: Match) -> int:
        """Insert a match and return its id."""
        try:
            self._session.add(match)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.exception("Failed to create match %s", match.display_name)
            raise PersistenceError(f"Could not create match {match.display_name}: {e}") from e
        return match.id

    async def save(self, match: Match) -> None:
        try:
            self._session.add(match)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.exception("Failed to save match %s", match.id)
            raise PersistenceError(f"Could not save match {match.id}: {e}") from e

    async def delete(self, match: Match) -> None:
        try:
            await self._session.delete(match)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.exception("Failed to delete match %s", match.id)
            raise PersistenceError(f"Could not delete match {match.id}: {e}") from e

    async def record_result(self, match: Match, winner: str) -> None:
        """Mark a match complete. winner is R, B or T (tie)."""
        if winner not in WINNERS:
            raise InvalidWinnerMarker(f"Match {match.id} cannot have winner '{winner}'")
        match.winner = winner
        match.status = STATUS_COMPLETE
        await self.save(match)
        logger.info("Recorded result for %s: %s", match.display_name, winner)

"""Alliance seed source backed by the alliance_teams table."""
from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from pydantic import BaseModel
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from arena.errors import AllianceNotFound, PersistenceError
from arena.models import AllianceTeam

logger = logging.getLogger("arena")


class AllianceRoster(BaseModel):
    """Seeded alliance and its team ids in pick order."""

    alliance_id: int
    team_ids: List[int]

    @property
    def team_set(self) -> frozenset[int]:
        return frozenset(self.team_ids)


def _group_rows(rows: Iterable[AllianceTeam]) -> List[AllianceRoster]:
    """Fold ordered alliance_teams rows into rosters, one per alliance."""
    rosters: dict[int, AllianceRoster] = {}
    for row in rows:
        roster = rosters.get(row.alliance_id)
        if roster is None:
            roster = rosters[row.alliance_id] = AllianceRoster(alliance_id=row.alliance_id, team_ids=[])
        roster.team_ids.append(row.team_id)
    return list(rosters.values())


class SeedSource:
    """Reads the seeded alliance list produced by alliance selection."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_alliances(self) -> List[AllianceRoster]:
        """All alliances ordered by seed. Empty list if alliance selection hasn't run."""
        try:
            result = await self._session.execute(
                select(AllianceTeam).order_by(AllianceTeam.alliance_id, AllianceTeam.pick_position)
            )
        except SQLAlchemyError as e:
            logger.exception("Failed to load alliances")
            raise PersistenceError(f"Could not load alliances: {e}") from e
        return _group_rows(result.scalars().all())

    async def teams_of(self, alliance_id: int) -> AllianceRoster:
        """Roster for one alliance. Raises AllianceNotFound for an unknown alliance number."""
        try:
            result = await self._session.execute(
                select(AllianceTeam)
                .where(AllianceTeam.alliance_id == alliance_id)
                .order_by(AllianceTeam.pick_position)
            )
        except SQLAlchemyError as e:
            logger.exception("Failed to load alliance %d", alliance_id)
            raise PersistenceError(f"Could not load alliance {alliance_id}: {e}") from e
        rosters = _group_rows(result.scalars().all())
        if not rosters:
            raise AllianceNotFound(f"Alliance {alliance_id} does not exist")
        return rosters[0]

    async def replace_alliances(self, team_ids_by_seed: Sequence[Sequence[int]]) -> List[AllianceRoster]:
        """
        Overwrite the alliance table. team_ids_by_seed[0] becomes alliance 1, captain first.
        Used when loading alliance selection results.
        """
        try:
            await self._session.execute(delete(AllianceTeam))
            for seed, team_ids in enumerate(team_ids_by_seed, start=1):
                for pick, team_id in enumerate(team_ids):
                    self._session.add(AllianceTeam(alliance_id=seed, pick_position=pick, team_id=team_id))
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.exception("Failed to save alliances")
            raise PersistenceError(f"Could not save alliances: {e}") from e
        logger.info("Saved %d alliance(s)", len(team_ids_by_seed))
        return [
            AllianceRoster(alliance_id=seed, team_ids=list(team_ids))
            for seed, team_ids in enumerate(team_ids_by_seed, start=1)
        ]

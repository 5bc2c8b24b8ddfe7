"""Creating and updating the elimination match schedule."""
from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from arena.errors import (
    InsufficientRoster,
    InvalidBracket,
    InvalidRoster,
    InvalidWinnerMarker,
    UnsupportedDepth,
)
from arena.models import Match
from arena.models.match import (
    MATCH_TYPE_ELIMINATION,
    STATUS_SCHEDULED,
    WINNER_BLUE,
    WINNER_RED,
    WINNER_TIE,
)
from arena.services.match_store import MatchStore
from arena.services.seeding import AllianceRoster, SeedSource
import config

logger = logging.getLogger("arena")

# Standard pairing for a 16-alliance bracket, read two seeds at a time per eighthfinal
SEED_ORDER = [1, 16, 8, 9, 4, 13, 5, 12, 2, 15, 7, 10, 3, 14, 6, 11]
ROUND_NAMES = {1: "F", 2: "SF", 4: "QF", 8: "EF"}
PRIMARY_INSTANCES = (1, 2, 3)
WINS_NEEDED = 2
ALLIANCE_SIZE = 3

EMPTY_SLOTS = (None, None, None)


def round_name(round_num: int, group: int) -> str:
    """Short node name: F for the final, otherwise the round prefix plus group (SF1, QF4, ...)."""
    name = ROUND_NAMES.get(round_num)
    if name is None:
        raise UnsupportedDepth(f"Round of depth {round_num * 2} is not supported")
    if round_num != 1:
        name += str(group)
    return name


def seed_candidates(round_num: int, group: int) -> Tuple[int, int]:
    """(red, blue) seed numbers that would meet at this node in a full 16-alliance bracket."""
    factor = len(SEED_ORDER) // round_num
    red = SEED_ORDER[(group - 1) * factor]
    blue = SEED_ORDER[(group - 1) * factor + factor // 2]
    return red, blue


def check_roster(roster: AllianceRoster) -> None:
    if len(roster.team_ids) < ALLIANCE_SIZE:
        raise InsufficientRoster(
            f"Alliance {roster.alliance_id} has {len(roster.team_ids)} teams; alliances must consist of at least 3 teams"
        )
    if len(roster.team_ids) > ALLIANCE_SIZE:
        raise InvalidRoster(
            f"Alliance {roster.alliance_id} has {len(roster.team_ids)} teams; alliances must consist of exactly 3 teams"
        )


def _slot_set(slots: Sequence[Optional[int]]) -> frozenset:
    return frozenset(slots)


class EliminationScheduler:
    """
    Incrementally builds the elimination bracket.

    Each update walks the bracket from the final down to the nodes whose alliances come
    straight from seeding, then reconciles every node's matches on the way back up:
    fixing team slots, deleting matches that are no longer needed once a side has two
    wins, creating the best-of-3 set, and replaying ties.
    """

    def __init__(
        self,
        seeds: SeedSource,
        store: MatchStore,
        rng: Optional[random.Random] = None,
        spacing_sec: Optional[int] = None,
    ):
        self.seeds = seeds
        self.store = store
        self.rng = rng or random.Random(config.ELIM_SHUFFLE_SEED)
        self.spacing_sec = config.ELIM_MATCH_SPACING_SEC if spacing_sec is None else spacing_sec

    async def update(self, start_time: datetime) -> Optional[AllianceRoster]:
        """Create any matches that can be created and reschedule unplayed ones. Returns the winner once known."""
        alliances = await self.seeds.list_alliances()
        winner = await self.build_match_set(1, 1, len(alliances))
        await self.assign_times(start_time)
        if winner is not None:
            logger.info("Elimination bracket won by alliance %d", winner.alliance_id)
        return winner

    async def build_match_set(
        self, round_num: int, group: int, num_alliances: int
    ) -> Optional[AllianceRoster]:
        """Resolve one bracket node and everything below it. Returns the node's winner if known."""
        if num_alliances < 2:
            raise InvalidBracket("Must have at least 2 alliances")
        if round_num not in ROUND_NAMES:
            raise UnsupportedDepth(f"Round of depth {round_num * 2} is not supported")

        red: Optional[AllianceRoster] = None
        blue: Optional[AllianceRoster] = None
        if num_alliances < 4 * round_num:
            # First round for some or all alliances; seeds up to num_direct come from alliance selection
            # (byes, or a full bracket). The rest are decided one round down.
            red_seed, blue_seed = seed_candidates(round_num, group)
            num_direct = 4 * round_num - num_alliances
            if red_seed <= num_direct:
                red = await self.seeds.teams_of(red_seed)
            if blue_seed <= num_direct:
                blue = await self.seeds.teams_of(blue_seed)

        if red is None:
            red = await self.build_match_set(round_num * 2, group * 2 - 1, num_alliances)
        if blue is None:
            blue = await self.build_match_set(round_num * 2, group * 2, num_alliances)

        if red is None and blue is None:
            return None
        return await self.reconcile_node(round_num, group, red, blue)

    async def reconcile_node(
        self,
        round_num: int,
        group: int,
        red: Optional[AllianceRoster],
        blue: Optional[AllianceRoster],
    ) -> Optional[AllianceRoster]:
        """Bring one node's persisted matches in line with its alliances. Returns the winner if decided."""
        for roster in (red, blue):
            if roster is not None:
                check_roster(roster)
        name = round_name(round_num, group)

        matches = await self.store.matches_by_node(round_num, group)
        red_wins = blue_wins = 0
        ties: List[Match] = []
        unplayed: List[Match] = []
        for match in matches:
            # Sides are checked separately; a stale red side never reshuffles blue.
            changed = False
            if red is not None and _slot_set(match.red_teams) != red.team_set:
                match.red_teams = self._shuffled(red)
                changed = True
            if blue is not None and _slot_set(match.blue_teams) != blue.team_set:
                match.blue_teams = self._shuffled(blue)
                changed = True
            if changed:
                logger.debug("Reassigned teams in %s", match.display_name)
                await self.store.save(match)

            if not match.is_complete:
                unplayed.append(match)
                continue

            if match.winner == WINNER_RED:
                red_wins += 1
            elif match.winner == WINNER_BLUE:
                blue_wins += 1
            elif match.winner == WINNER_TIE:
                ties.append(match)
            else:
                logger.warning("Match %s (%s) has invalid winner %r", match.id, match.display_name, match.winner)
                raise InvalidWinnerMarker(f"Completed match {match.id} has invalid winner '{match.winner}'")

        if red_wins >= WINS_NEEDED or blue_wins >= WINS_NEEDED:
            for match in unplayed:
                await self.store.delete(match)
            if unplayed:
                logger.info("Deleted %d unneeded match(es) in %s", len(unplayed), name)
            return red if red_wins >= WINS_NEEDED else blue

        # Every match past the third replays an earlier tie, oldest first.
        num_replays = max(0, len(matches) - len(PRIMARY_INSTANCES))
        pending_ties = ties[num_replays:]

        # Initial set, or matches deleted earlier that a revised result needs again.
        if not matches or (not pending_ties and not unplayed):
            existing = {m.elim_instance for m in matches}
            for instance in PRIMARY_INSTANCES:
                if instance not in existing:
                    await self._create_match(name, round_num, group, instance, red, blue)

        # Keep the tied match's team positions so printed schedules stay valid for the replay.
        if not unplayed and pending_ties:
            next_instance = max(m.elim_instance for m in matches) + 1
            for offset, tie in enumerate(pending_ties):
                replay = _new_match(name, round_num, group, next_instance + offset)
                replay.red_teams = tie.red_teams
                replay.blue_teams = tie.blue_teams
                await self.store.create(replay)
                logger.info("Created %s to replay tied %s", replay.display_name, tie.display_name)

        return None

    async def assign_times(self, start_time: datetime, spacing_sec: Optional[int] = None) -> None:
        """Space all unplayed elimination matches evenly from start_time. Completed matches keep their time."""
        if spacing_sec is None:
            spacing_sec = self.spacing_sec
        matches = await self.store.matches_by_type(MATCH_TYPE_ELIMINATION)
        index = 0
        for match in matches:
            if match.is_complete:
                continue
            scheduled = start_time + timedelta(seconds=index * spacing_sec)
            if match.time != scheduled:
                match.time = scheduled
                await self.store.save(match)
            index += 1
        logger.debug("Scheduled %d unplayed elimination match(es) from %s", index, start_time)

    async def _create_match(
        self,
        name: str,
        round_num: int,
        group: int,
        instance: int,
        red: Optional[AllianceRoster],
        blue: Optional[AllianceRoster],
    ) -> Match:
        match = _new_match(name, round_num, group, instance)
        match.red_teams = self._shuffled(red) if red is not None else EMPTY_SLOTS
        match.blue_teams = self._shuffled(blue) if blue is not None else EMPTY_SLOTS
        await self.store.create(match)
        logger.info("Created match %s", match.display_name)
        return match

    def _shuffled(self, roster: AllianceRoster) -> Tuple[int, ...]:
        """Alliance teams in random slot order."""
        teams = list(roster.team_ids)
        self.rng.shuffle(teams)
        return tuple(teams)


def _new_match(name: str, round_num: int, group: int, instance: int) -> Match:
    return Match(
        type=MATCH_TYPE_ELIMINATION,
        display_name=f"{name}-{instance}",
        elim_round=round_num,
        elim_group=group,
        elim_instance=instance,
        status=STATUS_SCHEDULED,
    )


async def update_elimination_schedule(
    session: AsyncSession,
    start_time: datetime,
    rng: Optional[random.Random] = None,
) -> Optional[AllianceRoster]:
    """Update the elimination schedule after alliance selection or a match result. Returns the winner once known."""
    scheduler = EliminationScheduler(SeedSource(session), MatchStore(session), rng=rng)
    return await scheduler.update(start_time)

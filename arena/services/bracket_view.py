"""Read-only bracket summary built from the persisted elimination matches."""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from arena.models import Match
from arena.models.match import MATCH_TYPE_ELIMINATION, WINNER_BLUE, WINNER_RED, WINNER_TIE
from arena.services.elimination import WINS_NEEDED, round_name
from arena.services.match_store import MatchStore
from arena.services.seeding import SeedSource


def _alliance_for(slots, alliance_by_teams: Dict[frozenset, int]) -> Optional[int]:
    return alliance_by_teams.get(frozenset(slots))


def _node_summary(
    round_num: int, group: int, matches: List[Match], alliance_by_teams: Dict[frozenset, int]
) -> dict:
    red_wins = sum(1 for m in matches if m.is_complete and m.winner == WINNER_RED)
    blue_wins = sum(1 for m in matches if m.is_complete and m.winner == WINNER_BLUE)
    ties = sum(1 for m in matches if m.is_complete and m.winner == WINNER_TIE)
    # Latest match reflects the current alliances if slots were reassigned
    latest = matches[-1]
    red_alliance = _alliance_for(latest.red_teams, alliance_by_teams)
    blue_alliance = _alliance_for(latest.blue_teams, alliance_by_teams)
    winner = None
    if red_wins >= WINS_NEEDED:
        winner = red_alliance
    elif blue_wins >= WINS_NEEDED:
        winner = blue_alliance
    return {
        "round": round_num,
        "group": group,
        "name": round_name(round_num, group),
        "red_alliance": red_alliance,
        "blue_alliance": blue_alliance,
        "red_wins": red_wins,
        "blue_wins": blue_wins,
        "ties": ties,
        "winner": winner,
        "matches": [m.display_name for m in matches],
    }


async def describe_bracket(session: AsyncSession) -> dict:
    """
    Summarize every bracket node that has matches.
    Returns {"rounds": {"8": [...], "4": [...], ...}} with nodes in group order.
    Alliances are reported by seed number, or None while a side is undecided.
    """
    alliances = await SeedSource(session).list_alliances()
    alliance_by_teams = {a.team_set: a.alliance_id for a in alliances}
    matches = await MatchStore(session).matches_by_type(MATCH_TYPE_ELIMINATION)

    nodes: Dict[Tuple[int, int], List[Match]] = {}
    for m in matches:
        nodes.setdefault((m.elim_round, m.elim_group), []).append(m)

    rounds: Dict[int, List[dict]] = {}
    for (round_num, group) in sorted(nodes, key=lambda k: (-k[0], k[1])):
        node_matches = sorted(nodes[(round_num, group)], key=lambda m: m.elim_instance)
        rounds.setdefault(round_num, []).append(
            _node_summary(round_num, group, node_matches, alliance_by_teams)
        )
    return {"rounds": {str(k): v for k, v in rounds.items()}}

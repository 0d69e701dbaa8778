"""
Bracket construction.

A bracket is an indexed tuple of rounds. Round 1 is seeded positionally
from the input order: when the item count is not a power of two the first
seeds receive byes and the rest are paired in order (A vs B, C vs D, ...).
Each later round pairs the previous round's winners in match order, so the
same input always yields the same bracket.
"""

from collections.abc import Sequence

from ..models import Match, MatchState, Standing


def bracket_size(count: int) -> int:
    """Smallest power of two that holds ``count`` entries."""
    size = 1
    while size < count:
        size *= 2
    return size


def round_count(count: int) -> int:
    """Number of rounds needed to reduce ``count`` entries to one champion."""
    return bracket_size(count).bit_length() - 1


def match_id(round_no: int, index: int) -> str:
    return f"r{round_no}-m{index}"


def seed_first_round(list_id: str, seeds: Sequence[str]) -> tuple[Match, ...]:
    """Build round 1, giving byes to the top seeds."""
    byes = bracket_size(len(seeds)) - len(seeds)
    matches: list[Match] = []
    for seed in seeds[:byes]:
        matches.append(Match(
            id=match_id(1, len(matches)),
            list_id=list_id,
            round=1,
            item_a=seed,
            winner=seed,
            state=MatchState.RESOLVED,
        ))
    rest = seeds[byes:]
    for i in range(0, len(rest), 2):
        matches.append(Match(
            id=match_id(1, len(matches)),
            list_id=list_id,
            round=1,
            item_a=rest[i],
            item_b=rest[i + 1],
        ))
    return tuple(matches)


def next_round(list_id: str, previous: Sequence[Match], round_no: int) -> tuple[Match, ...]:
    """Pair the winners of a fully resolved round positionally."""
    winners = [m.winner for m in previous]
    if any(w is None for w in winners):
        raise ValueError(f"round {round_no - 1} has unresolved matches")
    return tuple(
        Match(
            id=match_id(round_no, i // 2),
            list_id=list_id,
            round=round_no,
            item_a=winners[i],  # type: ignore[arg-type]
            item_b=winners[i + 1],
        )
        for i in range(0, len(winners), 2)
    )


def compute_standings(seeds: Sequence[str], rounds: Sequence[Sequence[Match]]) -> tuple[Standing, ...]:
    """
    Final standings of a completed bracket.

    The champion ranks 1. Every item that lost in round r shares rank
    (number of matches in round r) + 1, i.e. one more than the number of
    items that survived that round. Order is by rank, then seed.
    """
    seed_index = {item_id: i for i, item_id in enumerate(seeds)}
    if not rounds:
        return tuple(Standing(item_id=s, rank=1, seed=0) for s in seeds[:1])

    standings: list[Standing] = []
    for round_no, matches in enumerate(rounds, start=1):
        for match in matches:
            loser = match.loser
            if loser is not None:
                standings.append(Standing(
                    item_id=loser,
                    rank=len(matches) + 1,
                    seed=seed_index[loser],
                    eliminated_in=round_no,
                ))
    champion = rounds[-1][0].winner
    assert champion is not None
    standings.append(Standing(item_id=champion, rank=1, seed=seed_index[champion]))
    standings.sort(key=lambda s: (s.rank, s.seed))
    return tuple(standings)

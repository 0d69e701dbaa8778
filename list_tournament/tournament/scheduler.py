"""
Tournament scheduler.

Drives a single-elimination bracket through IN_PROGRESS -> COMPLETE.
Every call takes the current Tournament and item snapshots and returns new
ones; nothing is retained between calls.
"""

import time
from collections.abc import Sequence
from dataclasses import dataclass, replace

from ..exceptions import AlreadyResolved, BracketSizeError, InvalidWinner, UnknownMatch, ValidationError
from ..interfaces import RatingEngine
from ..logging_config import get_logger
from ..models import HistoryPoint, Item, Match, MatchState, Tournament, TournamentState
from ..ratings.elo import EloRatingEngine
from .bracket import compute_standings, next_round, seed_first_round

logger = get_logger("tournament_scheduler")


@dataclass(frozen=True)
class MatchResult:
    """Outcome of submitting a match result."""

    tournament: Tournament
    items: tuple[Item, ...]
    history_points: tuple[HistoryPoint, ...] = ()
    changed: bool = True

    @property
    def completed(self) -> bool:
        return self.tournament.state == TournamentState.COMPLETE


def apply_standings(items: Sequence[Item], tournament: Tournament) -> tuple[Item, ...]:
    """Write final ranks to items; items outside the bracket lose any stale rank."""
    ranks = {s.item_id: s.rank for s in tournament.standings}
    return tuple(replace(item, rank=ranks.get(item.id)) for item in items)


def pending_matches(tournament: Tournament) -> list[Match]:
    """Matches of the current round still awaiting a result."""
    return [m for m in tournament.current_round if m.state == MatchState.PENDING]


def champion(tournament: Tournament) -> str | None:
    if tournament.state != TournamentState.COMPLETE or not tournament.standings:
        return None
    return tournament.standings[0].item_id


def find_match(tournament: Tournament, match_id: str) -> Match:
    """Look up a match in the current round."""
    for match in tournament.current_round:
        if match.id == match_id:
            return match
    raise UnknownMatch(match_id)


class TournamentScheduler:
    """
    Builds and advances elimination brackets.

    Each resolved (non-bye) match is rated with the injected rating engine
    and produces one HistoryPoint per participant.
    """

    def __init__(self, rating_engine: RatingEngine | None = None):
        """
        Initialize scheduler.

        Args:
            rating_engine: Engine used to rate resolved matches (Elo with K=32 by default)
        """
        self.rating_engine = rating_engine or EloRatingEngine()

    def start(self, list_id: str, items: Sequence[Item]) -> Tournament:
        """
        Seed a new tournament from items in their given order.

        Raises:
            BracketSizeError: no items were supplied
        """
        seeds = tuple(item.id for item in items)
        if not seeds:
            raise BracketSizeError(f"Cannot start a tournament for list {list_id} without items")
        if len(set(seeds)) != len(seeds):
            raise ValidationError(f"Duplicate item ids in tournament for list {list_id}")

        if len(seeds) == 1:
            tournament = Tournament(
                list_id=list_id,
                seeds=seeds,
                round=0,
                state=TournamentState.COMPLETE,
                standings=compute_standings(seeds, ()),
            )
            logger.info(f"Tournament for list {list_id} complete on start: single item {seeds[0]}")
            return tournament

        first = seed_first_round(list_id, seeds)
        byes = sum(1 for m in first if m.is_bye)
        logger.info(f"Started tournament for list {list_id}: {len(seeds)} items, {byes} byes")
        return self._advance(Tournament(list_id=list_id, seeds=seeds, rounds=(first,), round=1))

    def submit_result(
        self,
        tournament: Tournament,
        items: Sequence[Item],
        match_id: str,
        winner_id: str,
        timestamp: float | None = None,
    ) -> MatchResult:
        """
        Resolve a match of the current round.

        Args:
            tournament: Current tournament snapshot
            items: Current item snapshots (must contain both participants)
            match_id: Id of a match in the current round
            winner_id: One of the match's two participants
            timestamp: Time recorded on the emitted history points (now by default)

        Raises:
            UnknownMatch: match id is not part of the current round
            InvalidWinner: winner is not a participant of the match
            AlreadyResolved: match already has a different winner
        """
        match = find_match(tournament, match_id)
        if winner_id not in match.participants():
            raise InvalidWinner(match_id, winner_id)

        if match.state == MatchState.RESOLVED:
            if match.winner == winner_id:
                logger.debug(f"Ignoring duplicate result for {match_id}: {winner_id}")
                return MatchResult(tournament=tournament, items=tuple(items), changed=False)
            assert match.winner is not None
            raise AlreadyResolved(match_id, match.winner)

        by_id = {item.id: item for item in items}
        assert match.item_b is not None  # byes are resolved at seeding time
        try:
            item_a = by_id[match.item_a]
            item_b = by_id[match.item_b]
        except KeyError as e:
            raise ValidationError(f"Item {e.args[0]} of match {match_id} is missing from the list") from e

        outcome = 1.0 if winner_id == item_a.id else 0.0
        score_a, score_b = self.rating_engine.rate(item_a.score, item_b.score, outcome)
        a_won = outcome == 1.0
        by_id[item_a.id] = replace(
            item_a,
            score=score_a,
            wins=item_a.wins + int(a_won),
            losses=item_a.losses + int(not a_won),
        )
        by_id[item_b.id] = replace(
            item_b,
            score=score_b,
            wins=item_b.wins + int(not a_won),
            losses=item_b.losses + int(a_won),
        )

        when = time.time() if timestamp is None else timestamp
        points = (
            HistoryPoint(item_id=item_a.id, score=score_a, timestamp=when),
            HistoryPoint(item_id=item_b.id, score=score_b, timestamp=when),
        )

        resolved = replace(match, winner=winner_id, state=MatchState.RESOLVED)
        current = tuple(resolved if m.id == match_id else m for m in tournament.current_round)
        rounds = tournament.rounds[:-1] + (current,)
        updated = self._advance(replace(tournament, rounds=rounds))

        new_items = tuple(by_id[item.id] for item in items)
        if updated.state == TournamentState.COMPLETE:
            new_items = apply_standings(new_items, updated)

        logger.info(f"Match {match_id} resolved: {winner_id} beat {resolved.loser}")
        logger.info(f"  {item_a.id}: {item_a.score:.2f}->{score_a:.2f}")
        logger.info(f"  {item_b.id}: {item_b.score:.2f}->{score_b:.2f}")
        return MatchResult(tournament=updated, items=new_items, history_points=points)

    def _advance(self, tournament: Tournament) -> Tournament:
        """Generate the next round or complete the tournament once the current round is resolved."""
        current = tournament.current_round
        if any(m.state == MatchState.PENDING for m in current):
            return tournament

        if len(current) == 1:
            standings = compute_standings(tournament.seeds, tournament.rounds)
            logger.info(
                f"Tournament for list {tournament.list_id} complete after {len(tournament.rounds)} rounds, "
                f"champion {standings[0].item_id}"
            )
            return replace(tournament, state=TournamentState.COMPLETE, standings=standings)

        round_no = tournament.round + 1
        matches = next_round(tournament.list_id, current, round_no)
        logger.debug(f"Generated round {round_no} for list {tournament.list_id}: {len(matches)} matches")
        return replace(tournament, rounds=tournament.rounds + (matches,), round=round_no)

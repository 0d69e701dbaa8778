"""
Exception classes for the list tournament engine.

Centralized location for all custom exceptions to avoid circular imports.
Every error raised by the engine derives from ListTournamentError so callers
can surface rejected actions without catching unrelated failures.
"""


class ListTournamentError(Exception):
    """Base exception for all engine errors."""
    pass


class ValidationError(ListTournamentError):
    """Base exception for validation-related errors."""
    pass


class ConfigurationError(ListTournamentError, ValueError):
    """Invalid engine configuration."""
    pass


class QueryError(ListTournamentError):
    """Base exception for query text that cannot be applied."""

    def __init__(self, reason: str, position: int = 0):
        super().__init__(f"{reason} (at position {position})")
        self.reason = reason
        self.position = position


class ParseError(QueryError):
    """Malformed query text."""
    pass


class UnknownField(QueryError):
    """Query references a field that no item in the list carries."""

    def __init__(self, field: str, position: int = 0):
        super().__init__(f"Unknown field: {field}", position)
        self.field = field


class TypeMismatch(QueryError):
    """Query compares a field against an incompatible literal or operator."""
    pass


class VersionConflict(ListTournamentError):
    """A write presented a version that no longer matches the stored one."""

    def __init__(self, list_id: str, expected: int, actual: int):
        super().__init__(
            f"Version conflict for list {list_id}: expected {expected}, found {actual}"
        )
        self.list_id = list_id
        self.expected = expected
        self.actual = actual


class ListNotFound(ListTournamentError):
    """The store holds no list with the requested id."""

    def __init__(self, list_id: str):
        super().__init__(f"List not found: {list_id}")
        self.list_id = list_id


class TournamentError(ListTournamentError):
    """Base exception for rejected tournament actions."""
    pass


class UnknownMatch(TournamentError):
    """Match id does not exist in the current round."""

    def __init__(self, match_id: str):
        super().__init__(f"Unknown match in current round: {match_id}")
        self.match_id = match_id


class AlreadyResolved(TournamentError):
    """Match was already resolved with a different winner."""

    def __init__(self, match_id: str, winner: str):
        super().__init__(f"Match {match_id} already resolved with winner {winner}")
        self.match_id = match_id
        self.winner = winner


class InvalidWinner(TournamentError):
    """Submitted winner is not one of the match's participants."""

    def __init__(self, match_id: str, winner_id: str):
        super().__init__(f"{winner_id} is not a participant of match {match_id}")
        self.match_id = match_id
        self.winner_id = winner_id


class BracketSizeError(TournamentError):
    """Tournament cannot start without items."""
    pass

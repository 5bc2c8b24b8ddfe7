"""Exceptions raised while building the elimination bracket."""


class BracketError(Exception):
    """Base exception for elimination bracket errors."""

    pass


class BracketValidationError(BracketError, ValueError):
    """Bracket inputs are invalid."""

    pass


class InvalidBracket(BracketValidationError):
    """Too few alliances to run an elimination bracket."""

    pass


class UnsupportedDepth(BracketValidationError):
    """Bracket node is deeper than the supported rounds."""

    pass


class InvalidRoster(BracketValidationError):
    """Alliance does not have exactly 3 teams."""

    pass


class InsufficientRoster(InvalidRoster):
    """Alliance has fewer than 3 teams."""

    pass


class DataInconsistency(BracketError):
    """Persisted match data contradicts itself."""

    pass


class InvalidWinnerMarker(DataInconsistency):
    """Completed match carries a winner other than R, B or T."""

    pass


class PersistenceError(BracketError):
    """Seed source or match store operation failed."""

    pass


class AllianceNotFound(PersistenceError):
    """Alliance number has no teams."""

    pass

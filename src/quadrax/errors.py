"""
QuadraX Error Hierarchy

All engine exceptions inherit from QuadraXError. Input problems subclass
ValueError so callers that already guard against bad arguments keep working.

Usage:
    from quadrax.errors import IllegalMoveError

    try:
        game.play(move)
    except IllegalMoveError as e:
        logger.warning(f"Rejected move: {e}")
"""

__all__ = [
    "QuadraXError",
    "InvalidBoardError",
    "IllegalMoveError",
    "NoLegalMovesError",
    "ConsistencyViolationError",
]


class QuadraXError(Exception):
    """Base exception for all QuadraX engine errors."""

    code: str = "QUADRAX_ERROR"

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            details = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({details})"
        return self.message


class InvalidBoardError(QuadraXError, ValueError):
    """Board snapshot is malformed: wrong length, bad values or piece counts."""

    code = "INVALID_BOARD"


class IllegalMoveError(QuadraXError, ValueError):
    """Move is not in the legal set for the current board and phase."""

    code = "ILLEGAL_MOVE"


class NoLegalMovesError(QuadraXError, RuntimeError):
    """No candidate moves exist. Cannot happen with well-formed boards."""

    code = "NO_LEGAL_MOVES"


class ConsistencyViolationError(QuadraXError, ValueError):
    """Both players occupy a winning pattern at once."""

    code = "CONSISTENCY_VIOLATION"

"""
Custom exceptions. Everything raised on purpose by the application derives from GameError,
so the transport layer only needs to catch one type and can show the message to the user.
"""


class GameError(Exception):
    """Top-level exception"""


# --- NOTATION ---
class ParseError(GameError):
    """The move text could not be turned into exactly one legal move."""


class UnrecognizedTokenError(ParseError):
    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(
            f"Cannot read {token!r} as a move. Try e4, e2e4, Nf3 or O-O."
        )


class AmbiguousMoveError(ParseError):
    def __init__(self, token: str, candidates: list[str]) -> None:
        self.token = token
        self.candidates = candidates
        super().__init__(
            f"Move {token!r} is ambiguous. Did you mean one of: {', '.join(candidates)}?"
        )


class NoMatchingMoveError(ParseError):
    def __init__(self, token: str, reason: str = "") -> None:
        self.token = token
        message = f"No legal move matches {token!r}."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class PromotionRequiredError(ParseError):
    def __init__(self, token: str, candidates: list[str]) -> None:
        self.token = token
        self.candidates = candidates
        super().__init__(
            f"Move {token!r} promotes a pawn. Add the piece to promote to: {', '.join(candidates)}."
        )


# --- RULES ENGINE ---
class IllegalMoveError(GameError):
    """The rules engine refused a move the parser had matched."""


class InvalidFENError(GameError):
    pass


# --- GAME STATE ---
class GameStateError(GameError):
    pass


class NotYourTurnError(GameStateError):
    pass


class NotAParticipantError(GameStateError):
    pass


class GameAlreadyEndedError(GameStateError):
    pass


class NoPendingDrawProposalError(GameStateError):
    pass


class DrawAlreadyProposedError(GameStateError):
    pass


class OwnDrawProposalError(GameStateError):
    pass


class ActiveGameExistsError(GameStateError):
    pass


class InconsistentHistoryError(GameStateError):
    """Stored move history does not replay into the stored position."""


# --- INFRASTRUCTURE ---
class RepositoryError(GameError):
    pass


class RenderError(GameError):
    pass


class InvalidRequestError(GameError):
    pass


class ConfigError(GameError):
    pass

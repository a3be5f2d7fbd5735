"""
Move notation: from whatever a user typed to exactly one legal move.

Three surface forms are understood and classified once, up front, into a MoveIntent:

* Coordinate (UCI): "e2e4", "e7e8q", also written "e2-e4".
* Algebraic (SAN-like): "e4", "Nf3", "Nbd2", "R1e2", "Qh4e1", "exd5", "e8=Q", "Qxf7+".
  Piece letters and squares are case-insensitive, check/mate markers are cosmetic.
* Castling: "O-O", "O-O-O", "0-0", "0-0-0" (and "OO"/"OOO"/"00"/"000" shorthands).

Matching is lenient: a move resolves as soon as exactly one legal candidate is left,
even when strict SAN would have demanded more disambiguation.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

import chess

from chatchess.core.exceptions import (
    AmbiguousMoveError,
    NoMatchingMoveError,
    PromotionRequiredError,
    UnrecognizedTokenError,
)

logger = logging.getLogger(__name__)

COORDINATE_PATTERN = re.compile(r"([a-h][1-8])-?([a-h][1-8])=?([qrbn])?")
ALGEBRAIC_PATTERN = re.compile(
    r"(?P<piece>[KQRBN])?"
    r"(?P<file>[a-h])?"
    r"(?P<rank>[1-8])?"
    r"(?P<capture>x)?"
    r"(?P<to>[a-h][1-8])"
    r"(?:=?(?P<promotion>[QRBNqrbn]))?"
)

KINGSIDE_TOKENS = {"O-O", "OO"}
QUEENSIDE_TOKENS = {"O-O-O", "OOO"}
ANNOTATION_CHARS = "+#!?"

PIECE_LETTERS: dict[str, chess.PieceType] = {
    "K": chess.KING,
    "Q": chess.QUEEN,
    "R": chess.ROOK,
    "B": chess.BISHOP,
    "N": chess.KNIGHT,
}
# Order in which promotion choices are offered to the user.
PROMOTION_ORDER: tuple[chess.PieceType, ...] = (
    chess.QUEEN,
    chess.ROOK,
    chess.BISHOP,
    chess.KNIGHT,
)

# Russian keyboard layouts produce look-alike letters that people type without noticing.
CYRILLIC_TO_LATIN = str.maketrans(
    {
        "а": "a",
        "б": "b",
        "с": "c",
        "д": "d",
        "е": "e",
        "ф": "f",
        "г": "g",
        "х": "h",
        "А": "A",
        "В": "B",
        "С": "C",
        "Д": "D",
        "Е": "E",
        "Ф": "F",
        "Г": "G",
        "Х": "H",
        "К": "K",
        "Н": "N",
        "Р": "R",
        "О": "O",
    }
)
MOVE_TOKEN_EDGES = re.compile(r"^[^\w\-+#=]+|[^\w\-+#=]+$")
MOVE_TOKEN_CHARS = re.compile(r"[A-Za-z0-9\-+#=]+")


class IntentKind(Enum):
    COORDINATE = auto()
    ALGEBRAIC = auto()
    CASTLING = auto()


@dataclass(frozen=True)
class MoveIntent:
    """
    What the user asked for, before looking at the board.
    ----

    Which fields are filled in depends on the kind:

    * COORDINATE: from_square, to_square, (promotion)
    * ALGEBRAIC: piece_type, to_square, (from_file, from_rank, promotion, is_capture)
    * CASTLING: kingside
    """

    kind: IntentKind
    token: str
    piece_type: chess.PieceType = chess.PAWN
    from_square: Optional[chess.Square] = None
    from_file: Optional[int] = None
    from_rank: Optional[int] = None
    to_square: Optional[chess.Square] = None
    promotion: Optional[chess.PieceType] = None
    is_capture: bool = False
    kingside: bool = True
    # "bc4" may be a bishop move or a b-pawn capturing on c4. Both readings are tried.
    maybe_b_pawn: bool = False

    @property
    def has_hint(self) -> bool:
        return self.from_file is not None or self.from_rank is not None


@dataclass(frozen=True)
class ResolvedMove:
    """A legal move together with its coordinate and algebraic renderings."""

    move: chess.Move
    uci: str
    san: str


# --- CLASSIFICATION ---
def parse_token(token: str) -> MoveIntent:
    """Classify a single token into a MoveIntent. Does not look at any position."""
    cleaned = token.strip().rstrip(ANNOTATION_CHARS)
    if not cleaned:
        raise UnrecognizedTokenError(token)

    castling = cleaned.upper().replace("0", "O")
    if castling in KINGSIDE_TOKENS or castling in QUEENSIDE_TOKENS:
        return MoveIntent(
            kind=IntentKind.CASTLING,
            token=token,
            kingside=castling in KINGSIDE_TOKENS,
        )

    coordinate = COORDINATE_PATTERN.fullmatch(cleaned.lower())
    if coordinate:
        from_name, to_name, promotion = coordinate.groups()
        return MoveIntent(
            kind=IntentKind.COORDINATE,
            token=token,
            from_square=chess.parse_square(from_name),
            to_square=chess.parse_square(to_name),
            promotion=PIECE_LETTERS[promotion.upper()] if promotion else None,
        )

    return _parse_algebraic(token, cleaned)


def _parse_algebraic(token: str, cleaned: str) -> MoveIntent:
    text, maybe_b_pawn = _normalise_case(cleaned)
    match = ALGEBRAIC_PATTERN.fullmatch(text)
    if match is None:
        raise UnrecognizedTokenError(token)

    piece = match.group("piece")
    file_hint = match.group("file")
    rank_hint = match.group("rank")
    promotion = match.group("promotion")
    return MoveIntent(
        kind=IntentKind.ALGEBRAIC,
        token=token,
        piece_type=PIECE_LETTERS[piece] if piece else chess.PAWN,
        from_file=chess.FILE_NAMES.index(file_hint) if file_hint else None,
        from_rank=int(rank_hint) - 1 if rank_hint else None,
        to_square=chess.parse_square(match.group("to")),
        promotion=PIECE_LETTERS[promotion.upper()] if promotion else None,
        is_capture=match.group("capture") is not None,
        maybe_b_pawn=maybe_b_pawn and file_hint is None and rank_hint is None,
    )


def _normalise_case(cleaned: str) -> tuple[str, bool]:
    """
    Piece letter upper case, everything after it lower case. Only the first character can name a piece.
    The flag is set when a lowercase "b" may also mean the b-pawn.
    """
    first, rest = cleaned[0], cleaned[1:].lower()
    if len(cleaned) > 2:
        if first == "b":
            if _is_piece_move(rest):
                return "B" + rest, True
        elif first.upper() in PIECE_LETTERS:
            return first.upper() + rest, False
    return first.lower() + rest, False


def _is_piece_move(rest: str) -> bool:
    """Would "B" + rest read as a piece move?"""
    return ALGEBRAIC_PATTERN.fullmatch("B" + rest) is not None


# --- RESOLUTION AGAINST A POSITION ---
def parse_move(token: str, board: chess.Board) -> ResolvedMove:
    """
    Resolve user input to exactly one legal move for the side to move on the board.
    ----

    Raises a ParseError subclass if there is no such move, or more than one.
    """
    intent = parse_token(token)
    move = select_move(intent, board)
    resolved = ResolvedMove(move=move, uci=move.uci(), san=board.san(move))
    logger.debug("Resolved %r to %s (%s)", token, resolved.uci, resolved.san)
    return resolved


def select_move(intent: MoveIntent, board: chess.Board) -> chess.Move:
    candidates = candidate_moves(intent, board)
    if not candidates:
        raise NoMatchingMoveError(intent.token, _no_match_reason(intent))

    if intent.promotion is not None:
        candidates = [move for move in candidates if move.promotion == intent.promotion]
        if not candidates:
            raise NoMatchingMoveError(
                intent.token, "That promotion is not available here."
            )
        names = sorted({move.uci() for move in candidates})
    else:
        names = sorted({_path(move) for move in candidates})

    if len(names) > 1:
        raise AmbiguousMoveError(intent.token, names)

    if intent.promotion is None and any(move.promotion for move in candidates):
        offered = {move.promotion for move in candidates}
        raise PromotionRequiredError(
            intent.token,
            [
                chess.piece_symbol(piece).upper()
                for piece in PROMOTION_ORDER
                if piece in offered
            ],
        )
    return candidates[0]


def candidate_moves(intent: MoveIntent, board: chess.Board) -> list[chess.Move]:
    """All legal moves consistent with the intent (promotion is not filtered here)."""
    legal_moves = list(board.legal_moves)

    if intent.kind is IntentKind.CASTLING:
        return [
            move
            for move in legal_moves
            if board.is_castling(move)
            and board.is_kingside_castling(move) == intent.kingside
        ]

    if intent.kind is IntentKind.COORDINATE:
        return [
            move
            for move in legal_moves
            if move.from_square == intent.from_square
            and move.to_square == intent.to_square
        ]

    candidates = [
        move
        for move in legal_moves
        if move.to_square == intent.to_square
        and board.piece_type_at(move.from_square) == intent.piece_type
        and _matches_hint(move, intent)
    ]
    if intent.maybe_b_pawn:
        candidates.extend(
            move
            for move in legal_moves
            if move.to_square == intent.to_square
            and board.piece_type_at(move.from_square) == chess.PAWN
            and chess.square_file(move.from_square) == chess.FILE_NAMES.index("b")
        )
    return candidates


def _matches_hint(move: chess.Move, intent: MoveIntent) -> bool:
    if intent.from_file is not None and chess.square_file(move.from_square) != intent.from_file:
        return False
    if intent.from_rank is not None and chess.square_rank(move.from_square) != intent.from_rank:
        return False
    return True


def _path(move: chess.Move) -> str:
    return chess.square_name(move.from_square) + chess.square_name(move.to_square)


def _no_match_reason(intent: MoveIntent) -> str:
    if intent.kind is IntentKind.CASTLING:
        return "Castling is not possible right now."
    if intent.kind is IntentKind.COORDINATE:
        return "Check the squares, or use algebraic notation like Nf3."
    piece = chess.piece_name(intent.piece_type)
    target = chess.square_name(intent.to_square) if intent.to_square is not None else "?"
    if intent.has_hint:
        return f"No {piece} matching that origin can move to {target}."
    return f"No {piece} can move to {target}."


# --- CHAT TEXT ---
def extract_move(text: str) -> Optional[str]:
    """
    Find the move in a chat message. The last token that looks like a move wins,
    so "/move e4" and "ok then... Nf3!" both work.
    """
    for raw_token in reversed(text.split()):
        token = MOVE_TOKEN_EDGES.sub("", raw_token).translate(CYRILLIC_TO_LATIN)
        if is_move_candidate(token):
            return token
    return None


def is_move_candidate(token: str) -> bool:
    """Cheap shape check, no position needed. Keeps words like 'draw' or 'resign' out."""
    if not 2 <= len(token) <= 7:
        return False

    castling = token.upper().replace("0", "O")
    if castling in KINGSIDE_TOKENS or castling in QUEENSIDE_TOKENS:
        return True

    if not MOVE_TOKEN_CHARS.fullmatch(token):
        return False

    # must name a rank somewhere
    if not any(character.isdigit() for character in token):
        return False

    first = token[0]
    return first.upper() in PIECE_LETTERS or first.lower() in chess.FILE_NAMES

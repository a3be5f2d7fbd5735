"""Unit tests for chatchess/render/board_renderer.py"""

from io import BytesIO

import chess
import pytest
from PIL import Image

from chatchess.core.exceptions import RenderError
from chatchess.render.board_renderer import (
    BORDER,
    BORDER_COLOR,
    DARK_SQUARE,
    LIGHT_SQUARE,
    board_size,
    board_square,
    render_board,
    render_board_png,
    square_size,
)
from chatchess.render.glyphs import FILE_GLYPHS, PIECE_GLYPHS, RANK_GLYPHS, bitmap

START = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
EMPTY = "8/8/8/8/8/8/8/8"


def tile(image: Image.Image, square: chess.Square, flipped: bool, scale: int = 3) -> bytes:
    """Pixels of the square's tile, wherever the orientation puts it."""
    file, rank = chess.square_file(square), chess.square_rank(square)
    col, row = (7 - file, rank) if flipped else (file, 7 - rank)
    side = square_size(scale)
    x0, y0 = BORDER + col * side, BORDER + row * side
    return image.crop((x0, y0, x0 + side, y0 + side)).tobytes()


def test_sizes() -> None:
    assert square_size(3) == 64
    assert board_size(3) == 552
    assert board_size(1) == 8 * 32 + 2 * BORDER


@pytest.mark.parametrize("scale", [1, 3, 5])
def test_image_dimensions(scale: int) -> None:
    image = render_board(START, scale=scale)
    assert image.size == (board_size(scale), board_size(scale))
    assert image.mode == "RGB"


def test_png_is_deterministic() -> None:
    first = render_board_png(START)
    second = render_board_png(START)
    assert first == second
    assert first.startswith(b"\x89PNG")

    decoded = Image.open(BytesIO(first))
    assert decoded.size == (552, 552)


def test_square_colors() -> None:
    image = render_board(EMPTY)
    side = square_size()
    # a1 (bottom left) is dark, h1 (bottom right) is light
    assert image.getpixel((BORDER + 1, BORDER + 7 * side + 1)) == DARK_SQUARE
    assert image.getpixel((BORDER + 7 * side + 1, BORDER + 7 * side + 1)) == LIGHT_SQUARE
    assert image.getpixel((0, 0)) == BORDER_COLOR


def test_empty_board_has_no_pieces() -> None:
    image = render_board(EMPTY)
    side = square_size()
    for square in chess.SQUARES:
        col, row = chess.square_file(square), 7 - chess.square_rank(square)
        x0, y0 = BORDER + col * side, BORDER + row * side
        colors = image.crop((x0, y0, x0 + side, y0 + side)).getcolors()
        assert colors is not None and len(colors) == 1


def test_pieces_are_drawn() -> None:
    empty = render_board(EMPTY)
    start = render_board(START)
    assert tile(start, chess.E1, False) != tile(empty, chess.E1, False)
    assert tile(start, chess.E4, False) == tile(empty, chess.E4, False)


def test_piece_colors_differ() -> None:
    white_king = render_board("8/8/8/8/8/8/8/4K3")
    black_king = render_board("8/8/8/8/8/8/8/4k3")
    assert tile(white_king, chess.E1, False) != tile(black_king, chess.E1, False)


@pytest.mark.parametrize("square", [chess.A1, chess.E1, chess.D8, chess.H7, chess.C2])
def test_flipped_moves_every_square(square: chess.Square) -> None:
    normal = render_board(START)
    flipped = render_board(START, flipped=True)
    assert tile(normal, square, False) == tile(flipped, square, True)


def test_flipped_orientation() -> None:
    assert board_square(0, 7, flipped=False) == chess.A1
    assert board_square(0, 0, flipped=True) == chess.H1
    assert board_square(7, 7, flipped=True) == chess.A8

    normal = render_board(START)
    flipped = render_board(START, flipped=True)
    assert normal.tobytes() != flipped.tobytes()


def test_invalid_input() -> None:
    with pytest.raises(RenderError):
        render_board("not a board")
    with pytest.raises(RenderError):
        render_board(START, scale=0)


def test_glyph_shapes() -> None:
    assert all(len(glyph) == 16 and len(glyph[0]) == 16 for glyph in PIECE_GLYPHS.values())
    assert sorted(FILE_GLYPHS) == list("abcdefgh")
    assert sorted(RANK_GLYPHS) == list(range(1, 9))
    with pytest.raises(ValueError):
        bitmap("##", "#")

"""
Board image rendering
-----

Pure function of (piece placement, orientation, scale): no I/O and no hidden state,
so the same input always gives the same pixels (and the same PNG bytes).

Layout (scale 3):

* 20 px border with file letters above/below and rank digits left/right of the board
* 8 x 8 squares of 64 px, each piece a 16 x 16 glyph drawn at 3 px per cell, centred with 8 px padding
* flipped = Black's view: squares and labels are both mirrored on both axes
"""

from io import BytesIO

import chess
from PIL import Image, ImageDraw

from chatchess.core.exceptions import RenderError
from chatchess.render.glyphs import (
    FILE_GLYPH_SIZE,
    FILE_GLYPHS,
    PIECE_GLYPH_SIZE,
    PIECE_GLYPHS,
    RANK_GLYPH_SIZE,
    RANK_GLYPHS,
    Bitmap,
    inked_cells,
    outline_cells,
)

RGB = tuple[int, int, int]

DEFAULT_SCALE = 3
LABEL_SCALE = 2
SQUARE_PADDING = 8
BORDER = 20

LIGHT_SQUARE: RGB = (240, 217, 181)
DARK_SQUARE: RGB = (181, 136, 99)
BORDER_COLOR: RGB = (101, 76, 59)
LABEL_COLOR: RGB = (220, 200, 180)

# fill, outline
PIECE_COLORS: dict[chess.Color, tuple[RGB, RGB]] = {
    chess.WHITE: ((255, 255, 255), (60, 60, 60)),
    chess.BLACK: ((40, 40, 40), (205, 205, 205)),
}


def square_size(scale: int = DEFAULT_SCALE) -> int:
    return PIECE_GLYPH_SIZE * scale + 2 * SQUARE_PADDING


def board_size(scale: int = DEFAULT_SCALE) -> int:
    """Width (= height) of the whole image in pixels."""
    return 8 * square_size(scale) + 2 * BORDER


def board_square(col: int, row: int, flipped: bool) -> chess.Square:
    """Which square is drawn at display column/row (0, 0 = top left)."""
    if flipped:
        return chess.square(7 - col, row)
    return chess.square(col, 7 - row)


def is_light(square: chess.Square) -> bool:
    # a1 is dark
    return (chess.square_file(square) + chess.square_rank(square)) % 2 == 1


def render_board(
    placement: str, flipped: bool = False, scale: int = DEFAULT_SCALE
) -> Image.Image:
    """Draw the board for the placement part of a FEN string."""
    if scale < 1:
        raise RenderError(f"Render scale must be a positive integer, got {scale}")
    try:
        board = chess.BaseBoard(placement)
    except ValueError as exc:
        raise RenderError(f"Cannot render placement {placement!r}") from exc

    size = board_size(scale)
    image = Image.new("RGB", (size, size), BORDER_COLOR)
    draw = ImageDraw.Draw(image)

    _draw_squares(draw, flipped, scale)
    _draw_labels(draw, flipped, scale)
    _draw_pieces(draw, board, flipped, scale)
    return image


def render_board_png(
    placement: str, flipped: bool = False, scale: int = DEFAULT_SCALE
) -> bytes:
    """Same as render_board, encoded as PNG."""
    image = render_board(placement, flipped, scale)
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


# --- DRAWING HELPERS ---
def _draw_squares(draw: ImageDraw.ImageDraw, flipped: bool, scale: int) -> None:
    side = square_size(scale)
    for row in range(8):
        for col in range(8):
            x0 = BORDER + col * side
            y0 = BORDER + row * side
            color = LIGHT_SQUARE if is_light(board_square(col, row, flipped)) else DARK_SQUARE
            draw.rectangle((x0, y0, x0 + side - 1, y0 + side - 1), fill=color)


def _draw_labels(draw: ImageDraw.ImageDraw, flipped: bool, scale: int) -> None:
    """File letters on top and bottom, rank digits on the left and right."""
    side = square_size(scale)
    far_edge = BORDER + 8 * side

    file_width = FILE_GLYPH_SIZE[0] * LABEL_SCALE
    file_height = FILE_GLYPH_SIZE[1] * LABEL_SCALE
    for col in range(8):
        file_index = chess.square_file(board_square(col, 0, flipped))
        glyph = FILE_GLYPHS[chess.FILE_NAMES[file_index]]
        x = BORDER + col * side + (side - file_width) // 2
        for y in ((BORDER - file_height) // 2, far_edge + (BORDER - file_height) // 2):
            _draw_cells(draw, inked_cells(glyph), x, y, LABEL_SCALE, LABEL_COLOR)

    rank_width = RANK_GLYPH_SIZE[0] * LABEL_SCALE
    rank_height = RANK_GLYPH_SIZE[1] * LABEL_SCALE
    for row in range(8):
        rank_index = chess.square_rank(board_square(0, row, flipped))
        glyph = RANK_GLYPHS[rank_index + 1]
        y = BORDER + row * side + (side - rank_height) // 2
        for x in ((BORDER - rank_width) // 2, far_edge + (BORDER - rank_width) // 2):
            _draw_cells(draw, inked_cells(glyph), x, y, LABEL_SCALE, LABEL_COLOR)


def _draw_pieces(
    draw: ImageDraw.ImageDraw, board: chess.BaseBoard, flipped: bool, scale: int
) -> None:
    side = square_size(scale)
    for row in range(8):
        for col in range(8):
            piece = board.piece_at(board_square(col, row, flipped))
            if piece is None:
                continue

            x = BORDER + col * side + SQUARE_PADDING
            y = BORDER + row * side + SQUARE_PADDING
            glyph = PIECE_GLYPHS[piece.piece_type]
            fill, outline = PIECE_COLORS[piece.color]
            _draw_glyph(draw, glyph, x, y, scale, fill, outline)


def _draw_glyph(
    draw: ImageDraw.ImageDraw,
    glyph: Bitmap,
    x: int,
    y: int,
    scale: int,
    fill: RGB,
    outline: RGB,
) -> None:
    # outline ring first, one cell wide, then the piece on top
    _draw_cells(draw, outline_cells(glyph), x, y, scale, outline)
    _draw_cells(draw, inked_cells(glyph), x, y, scale, fill)


def _draw_cells(
    draw: ImageDraw.ImageDraw,
    cells: list[tuple[int, int]],
    x: int,
    y: int,
    scale: int,
    color: RGB,
) -> None:
    for col, row in cells:
        px = x + col * scale
        py = y + row * scale
        draw.rectangle((px, py, px + scale - 1, py + scale - 1), fill=color)

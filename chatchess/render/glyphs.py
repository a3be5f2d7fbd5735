"""
Bitmap glyphs for the board image. No fonts or image files are used: every glyph is drawn here,
'#' is an inked cell and '.' an empty one. The renderer upscales each cell to a block of pixels.
"""

import chess

Bitmap = tuple[tuple[bool, ...], ...]

PIECE_GLYPH_SIZE = 16
FILE_GLYPH_SIZE = (5, 9)  # width, height
RANK_GLYPH_SIZE = (5, 7)


def bitmap(*rows: str) -> Bitmap:
    width = len(rows[0])
    if any(len(row) != width for row in rows):
        raise ValueError("All rows of a glyph must have the same width")
    return tuple(tuple(cell == "#" for cell in row) for row in rows)


# --- PIECES (16 x 16) ---
PIECE_GLYPHS: dict[chess.PieceType, Bitmap] = {
    chess.PAWN: bitmap(
        "................",
        "................",
        "................",
        "......####......",
        ".....######.....",
        ".....######.....",
        "......####......",
        ".....######.....",
        "......####......",
        "......####......",
        ".....######.....",
        "....########....",
        "...##########...",
        "...##########...",
        "................",
        "................",
    ),
    chess.KNIGHT: bitmap(
        "................",
        "................",
        ".......##.......",
        ".....#####......",
        "....#######.....",
        "...####.####....",
        "...#########....",
        "..##########....",
        "..###..#####....",
        ".......#####....",
        "......######....",
        ".....#######....",
        "....#########...",
        "...##########...",
        "...##########...",
        "................",
    ),
    chess.BISHOP: bitmap(
        "................",
        ".......##.......",
        "......####......",
        ".....###.##.....",
        ".....##.###.....",
        "....###.####....",
        "....########....",
        ".....######.....",
        "......####......",
        "......####......",
        ".....######.....",
        "....########....",
        "...##########...",
        "..############..",
        "..############..",
        "................",
    ),
    chess.ROOK: bitmap(
        "................",
        "................",
        "...##.####.##...",
        "...##.####.##...",
        "...##########...",
        "....########....",
        ".....######.....",
        ".....######.....",
        ".....######.....",
        ".....######.....",
        ".....######.....",
        "....########....",
        "...##########...",
        "..############..",
        "..############..",
        "................",
    ),
    chess.QUEEN: bitmap(
        "................",
        "..#...#..#...#..",
        "..##..#..#..##..",
        "..##.##..##.##..",
        "..############..",
        "...##########...",
        "...##########...",
        "....########....",
        ".....######.....",
        ".....######.....",
        "....########....",
        "...##########...",
        "..############..",
        "..############..",
        "................",
        "................",
    ),
    chess.KING: bitmap(
        "................",
        ".......##.......",
        "......####......",
        ".......##.......",
        "...##..##..##...",
        "..####.##.####..",
        "..############..",
        "..############..",
        "...##########...",
        "....########....",
        ".....######.....",
        "....########....",
        "...##########...",
        "..############..",
        "..############..",
        "................",
    ),
}

# --- FILE LETTERS (5 x 9, room for ascenders and the tail of the g) ---
FILE_GLYPHS: dict[str, Bitmap] = {
    "a": bitmap(
        ".....",
        ".....",
        ".###.",
        "....#",
        ".####",
        "#...#",
        ".####",
        ".....",
        ".....",
    ),
    "b": bitmap(
        "#....",
        "#....",
        "####.",
        "#...#",
        "#...#",
        "#...#",
        "####.",
        ".....",
        ".....",
    ),
    "c": bitmap(
        ".....",
        ".....",
        ".###.",
        "#....",
        "#....",
        "#....",
        ".###.",
        ".....",
        ".....",
    ),
    "d": bitmap(
        "....#",
        "....#",
        ".####",
        "#...#",
        "#...#",
        "#...#",
        ".####",
        ".....",
        ".....",
    ),
    "e": bitmap(
        ".....",
        ".....",
        ".###.",
        "#...#",
        "#####",
        "#....",
        ".###.",
        ".....",
        ".....",
    ),
    "f": bitmap(
        "..##.",
        ".#...",
        "####.",
        ".#...",
        ".#...",
        ".#...",
        ".#...",
        ".....",
        ".....",
    ),
    "g": bitmap(
        ".....",
        ".....",
        ".####",
        "#...#",
        "#...#",
        ".####",
        "....#",
        "....#",
        ".###.",
    ),
    "h": bitmap(
        "#....",
        "#....",
        "####.",
        "#...#",
        "#...#",
        "#...#",
        "#...#",
        ".....",
        ".....",
    ),
}

# --- RANK DIGITS (5 x 7) ---
RANK_GLYPHS: dict[int, Bitmap] = {
    1: bitmap(
        "..#..",
        ".##..",
        "..#..",
        "..#..",
        "..#..",
        "..#..",
        ".###.",
    ),
    2: bitmap(
        ".###.",
        "#...#",
        "....#",
        "...#.",
        "..#..",
        ".#...",
        "#####",
    ),
    3: bitmap(
        "####.",
        "....#",
        "....#",
        ".###.",
        "....#",
        "....#",
        "####.",
    ),
    4: bitmap(
        "...#.",
        "..##.",
        ".#.#.",
        "#..#.",
        "#####",
        "...#.",
        "...#.",
    ),
    5: bitmap(
        "#####",
        "#....",
        "####.",
        "....#",
        "....#",
        "#...#",
        ".###.",
    ),
    6: bitmap(
        "..##.",
        ".#...",
        "#....",
        "####.",
        "#...#",
        "#...#",
        ".###.",
    ),
    7: bitmap(
        "#####",
        "....#",
        "...#.",
        "..#..",
        ".#...",
        ".#...",
        ".#...",
    ),
    8: bitmap(
        ".###.",
        "#...#",
        "#...#",
        ".###.",
        "#...#",
        "#...#",
        ".###.",
    ),
}


def outline_cells(glyph: Bitmap) -> list[tuple[int, int]]:
    """
    Empty cells touching an inked cell (8-neighbourhood), as (col, row).
    Includes cells one step outside the glyph, so the ring always closes.
    """
    height = len(glyph)
    width = len(glyph[0])

    def inked(col: int, row: int) -> bool:
        return 0 <= row < height and 0 <= col < width and glyph[row][col]

    cells: list[tuple[int, int]] = []
    for row in range(-1, height + 1):
        for col in range(-1, width + 1):
            if inked(col, row):
                continue
            if any(
                inked(col + dc, row + dr)
                for dc in (-1, 0, 1)
                for dr in (-1, 0, 1)
                if (dc, dr) != (0, 0)
            ):
                cells.append((col, row))
    return cells


def inked_cells(glyph: Bitmap) -> list[tuple[int, int]]:
    return [
        (col, row)
        for row, cells in enumerate(glyph)
        for col, cell in enumerate(cells)
        if cell
    ]

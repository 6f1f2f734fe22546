from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .board import PATH, WALL, Coin, Door, Grid, Position

Segment = Tuple[int, int, int, int]  # x1, y1, x2, y2; horizontal or vertical


@dataclass(frozen=True)
class CuratedLevel:
    """Hand-authored layout that replaces the procedural maze for one reserved seed."""
    level: int
    seed: int
    segments: Tuple[Segment, ...]
    coins: Tuple[Coin, ...]
    doors: Tuple[Door, ...]


def _coin(x: int, y: int, color: str) -> Coin:
    return Coin(Position(x, y), color)


def _door(x: int, y: int, color: str) -> Door:
    return Door(Position(x, y), color)


CURATED_LEVELS: Tuple[CuratedLevel, ...] = (
    CuratedLevel(
        level=3,
        seed=1050,
        segments=(
            (1, 1, 1, 5),
            (1, 5, 7, 5),
            (7, 5, 7, 1),
            (7, 1, 9, 1),
            (9, 1, 9, 9),
        ),
        coins=(_coin(4, 5, 'red'),),
        doors=(_door(9, 4, 'red'),),
    ),
    CuratedLevel(
        level=7,
        seed=1213,
        segments=(
            (1, 1, 1, 5),
            (1, 5, 9, 5),
            (9, 5, 9, 1),
            (9, 1, 11, 1),
            (11, 1, 11, 9),
            (11, 9, 3, 9),
            (3, 9, 3, 11),
            (3, 11, 11, 11),
        ),
        coins=(_coin(1, 5, 'red'), _coin(11, 9, 'blue')),
        doors=(_door(9, 1, 'red'), _door(3, 11, 'blue')),
    ),
    CuratedLevel(
        level=8,
        seed=1221,
        segments=(
            (1, 1, 1, 3),
            (1, 3, 7, 3),
            (7, 3, 7, 1),
            (7, 1, 11, 1),
            (11, 1, 11, 7),
            (11, 7, 9, 7),
            (9, 7, 9, 11),
            (9, 11, 5, 11),
            (5, 11, 5, 9),
            (5, 9, 3, 9),
            (3, 9, 3, 11),
            (3, 11, 11, 11),
        ),
        coins=(_coin(3, 3, 'red'), _coin(11, 7, 'blue'), _coin(5, 11, 'green')),
        doors=(_door(7, 1, 'red'), _door(9, 7, 'blue'), _door(5, 9, 'green')),
    ),
    CuratedLevel(
        level=18,
        seed=1327,
        segments=(
            (1, 1, 1, 5),
            (1, 5, 9, 5),
            (9, 5, 9, 1),
            (9, 1, 19, 1),
            (19, 1, 19, 7),
            (19, 7, 5, 7),
            (5, 7, 5, 11),
            (5, 11, 17, 11),
            (17, 11, 17, 15),
            (17, 15, 3, 15),
            (3, 15, 3, 19),
            (3, 19, 19, 19),
        ),
        coins=(_coin(1, 5, 'red'), _coin(19, 7, 'blue'), _coin(17, 11, 'green')),
        doors=(_door(9, 1, 'red'), _door(5, 7, 'blue'), _door(3, 15, 'green')),
    ),
    CuratedLevel(
        level=19,
        seed=1334,
        segments=(
            (1, 1, 1, 7),
            (1, 7, 11, 7),
            (11, 7, 11, 1),
            (11, 1, 19, 1),
            (19, 1, 19, 9),
            (19, 9, 7, 9),
            (7, 9, 7, 13),
            (7, 13, 15, 13),
            (15, 13, 15, 17),
            (15, 17, 3, 17),
            (3, 17, 3, 19),
            (3, 19, 19, 19),
        ),
        coins=(_coin(1, 7, 'red'), _coin(15, 9, 'blue'), _coin(3, 17, 'green')),
        doors=(_door(11, 1, 'red'), _door(7, 9, 'blue'), _door(5, 19, 'green')),
    ),
    CuratedLevel(
        level=20,
        seed=1341,
        segments=(
            (1, 1, 1, 7),
            (1, 7, 13, 7),
            (13, 7, 13, 1),
            (13, 1, 19, 1),
            (19, 1, 19, 9),
            (19, 9, 9, 9),
            (9, 9, 9, 15),
            (9, 15, 17, 15),
            (17, 15, 17, 19),
            (17, 19, 3, 19),
            (3, 19, 3, 11),
            (3, 11, 7, 11),
            (7, 11, 7, 13),
            (7, 13, 15, 13),
            (15, 13, 15, 17),
            (15, 17, 5, 17),
            (5, 17, 5, 19),
            (5, 19, 19, 19),
        ),
        coins=(_coin(1, 7, 'red'), _coin(19, 9, 'blue'), _coin(17, 15, 'green')),
        doors=(_door(13, 1, 'red'), _door(9, 9, 'blue'), _door(3, 19, 'green')),
    ),
)

_BY_SEED: Dict[int, CuratedLevel] = {c.seed: c for c in CURATED_LEVELS}
_BY_LEVEL: Dict[int, CuratedLevel] = {c.level: c for c in CURATED_LEVELS}


def curated_for_seed(seed: int) -> Optional[CuratedLevel]:
    return _BY_SEED.get(seed)


def curated_for_level(level: int) -> Optional[CuratedLevel]:
    return _BY_LEVEL.get(level)


def _blank(width: int, height: int) -> List[List[str]]:
    return [[WALL] * width for _ in range(height)]


def _carve(rows: List[List[str]], seg: Segment) -> None:
    x1, y1, x2, y2 = seg
    height = len(rows)
    width = len(rows[0]) if height else 0
    if x1 == x2:
        for y in range(min(y1, y2), max(y1, y2) + 1):
            if 0 <= x1 < width and 0 <= y < height:
                rows[y][x1] = PATH
    elif y1 == y2:
        for x in range(min(x1, x2), max(x1, x2) + 1):
            if 0 <= x < width and 0 <= y1 < height:
                rows[y1][x] = PATH
    else:
        raise ValueError(f"Segment must be axis-aligned: {seg}")


def _open_corners(rows: List[List[str]], width: int, height: int) -> None:
    # start (1,1) and exit (w-2,h-2) plus their inward neighbours
    for x, y in ((1, 1), (2, 1), (1, 2), (width - 2, height - 2), (width - 3, height - 2), (width - 2, height - 3)):
        if 0 <= x < width and 0 <= y < height:
            rows[y][x] = PATH


def build_from_segments(width: int, height: int, segments) -> Grid:
    rows = _blank(width, height)
    for seg in segments:
        _carve(rows, seg)
    _open_corners(rows, width, height)
    return Grid.from_rows(rows)


def build_curated_grid(curated: CuratedLevel, width: int, height: int) -> Grid:
    """Carves the curated segments into an all-wall grid of the given size."""
    return build_from_segments(width, height, curated.segments)


def snake_grid(width: int, height: int) -> Grid:
    """Serpentine layout: odd columns joined alternately at the bottom and top."""
    segments: List[Segment] = []
    max_x = width - 2
    max_y = height - 2
    x = 1
    down = True
    while x <= max_x:
        segments.append((x, 1 if down else max_y, x, max_y if down else 1))
        if x + 2 <= max_x:
            y_join = max_y if down else 1
            segments.append((x, y_join, x + 2, y_join))
        x += 2
        down = not down
    return build_from_segments(width, height, segments)

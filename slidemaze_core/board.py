from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, NamedTuple, Optional, Sequence, Set, Tuple

WALL = 'wall'
PATH = 'path'

CellKind = str  # WALL or PATH
CoinColor = str  # one of COLORS

COLORS: Tuple[CoinColor, ...] = ('red', 'blue', 'green', 'yellow', 'purple', 'orange')


class Position(NamedTuple):
    """Grid coordinate; x is the column, y the row."""
    x: int
    y: int

    def key(self) -> str:
        return f"{self.x},{self.y}"

    @classmethod
    def from_key(cls, key: str) -> 'Position':
        x_s, y_s = key.split(',')
        return cls(int(x_s), int(y_s))


@dataclass(frozen=True)
class Coin:
    """A collectible that unlocks every door of the same color."""
    position: Position
    color: CoinColor


@dataclass(frozen=True)
class Door:
    """Impassable until a coin of the same color has been collected."""
    position: Position
    color: CoinColor


@dataclass(frozen=True)
class Grid:
    """Wall/path cells of a maze, indexed cells[y][x]."""
    width: int
    height: int
    cells: Tuple[Tuple[CellKind, ...], ...]

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[CellKind]]) -> 'Grid':
        cells = tuple(tuple(row) for row in rows)
        height = len(cells)
        width = len(cells[0]) if height else 0
        for row in cells:
            if len(row) != width:
                raise ValueError('Grid rows must have equal length')
        return cls(width=width, height=height, cells=cells)

    def to_rows(self) -> List[List[CellKind]]:
        return [list(row) for row in self.cells]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def at(self, x: int, y: int) -> CellKind:
        return self.cells[y][x]

    def is_wall(self, x: int, y: int) -> bool:
        return self.cells[y][x] == WALL

    def is_path(self, x: int, y: int) -> bool:
        return self.cells[y][x] == PATH

    def coords(self) -> Iterator[Position]:
        """Iterates over all positions in row-major order."""
        for y in range(self.height):
            for x in range(self.width):
                yield Position(x, y)

    def path_cells(self) -> List[Position]:
        return [p for p in self.coords() if self.cells[p.y][p.x] == PATH]

    def with_walls(self, positions: Iterable[Position]) -> 'Grid':
        """Returns a copy with the given cells turned into walls."""
        targets = {p for p in positions if self.in_bounds(p.x, p.y)}
        if not targets:
            return self
        rows = self.to_rows()
        for p in targets:
            rows[p.y][p.x] = WALL
        return Grid(self.width, self.height, tuple(tuple(r) for r in rows))

    def with_wall_rows(self, upto_row: int) -> 'Grid':
        """Returns a copy where every row from 0 through upto_row is solid wall."""
        last = min(upto_row, self.height - 1)
        if last < 0:
            return self
        solid = tuple(WALL for _ in range(self.width))
        return Grid(self.width, self.height, tuple(solid for _ in range(last + 1)) + self.cells[last + 1:])

    def pretty(
        self,
        player: Optional[Position] = None,
        exit_pos: Optional[Position] = None,
        coins: Optional[Iterable[Coin]] = None,
        doors: Optional[Iterable[Door]] = None,
        collected: Optional[Set[Position]] = None,
    ) -> str:
        """Generates a human-readable rendering: '#' wall, '@' player, 'E' exit,
        lowercase coin color initial, uppercase door color initial."""
        marks = {}
        taken = collected or set()
        for door in doors or ():
            marks[door.position] = door.color[0].upper()
        for coin in coins or ():
            if coin.position not in taken:
                marks[coin.position] = coin.color[0]
        if exit_pos is not None:
            marks[exit_pos] = 'E'
        if player is not None:
            marks[player] = '@'
        lines: List[str] = []
        for y in range(self.height):
            row: List[str] = []
            for x in range(self.width):
                pos = Position(x, y)
                if pos in marks:
                    row.append(marks[pos])
                elif self.cells[y][x] == WALL:
                    row.append('#')
                else:
                    row.append('.')
            lines.append(''.join(row))
        return "\n".join(lines)

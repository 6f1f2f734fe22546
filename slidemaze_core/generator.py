from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Deque, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .board import COLORS, PATH, WALL, Coin, Door, Grid, Position
from .errors import MazeGenerationError
from .layouts import CuratedLevel, build_curated_grid, curated_for_seed, snake_grid
from .levels import LevelParams
from .rng import SeededRandom

logger = logging.getLogger(__name__)

# N, E, S, W
DELTAS: Tuple[Tuple[int, int], ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))

COIN_MIN_LEVEL = 2
MAX_PAIRS = 3
SLIDE_GUARD_MIN_LEVEL = 22

# (index into DELTAS, stopping point)
SlideStep = Tuple[int, Position]
_SearchNode = Tuple[Position, FrozenSet[Position]]


@dataclass(frozen=True)
class MazeLayout:
    """Result of generating one level: the grid plus everything placed on it."""
    grid: Grid
    start_pos: Position
    exit_pos: Position
    solution_length: int
    coins: Tuple[Coin, ...]
    doors: Tuple[Door, ...]
    # stopping points of the fewest-slides winning route, start first; () if none
    slide_route: Tuple[Position, ...] = ()


@dataclass
class _Cell:
    x: int
    y: int
    visited: bool = False
    # top, right, bottom, left
    walls: List[bool] = field(default_factory=lambda: [True, True, True, True])


def _unvisited_neighbors(cell: _Cell, cells: List[List[_Cell]], size: int) -> List[_Cell]:
    out: List[_Cell] = []
    x, y = cell.x, cell.y
    if y > 0 and not cells[y - 1][x].visited:
        out.append(cells[y - 1][x])
    if x < size - 1 and not cells[y][x + 1].visited:
        out.append(cells[y][x + 1])
    if y < size - 1 and not cells[y + 1][x].visited:
        out.append(cells[y + 1][x])
    if x > 0 and not cells[y][x - 1].visited:
        out.append(cells[y][x - 1])
    return out


def _remove_wall(current: _Cell, nxt: _Cell) -> None:
    dx = nxt.x - current.x
    dy = nxt.y - current.y
    if dx == 1:
        current.walls[1] = False
        nxt.walls[3] = False
    elif dx == -1:
        current.walls[3] = False
        nxt.walls[1] = False
    elif dy == 1:
        current.walls[2] = False
        nxt.walls[0] = False
    elif dy == -1:
        current.walls[0] = False
        nxt.walls[2] = False


def carve_spanning_tree(size: int, rng: SeededRandom) -> List[List[_Cell]]:
    """Recursive backtracker over a size x size cell graph, starting at (0, 0)."""
    cells = [[_Cell(x, y) for x in range(size)] for y in range(size)]
    stack: List[_Cell] = [cells[0][0]]
    cells[0][0].visited = True
    while stack:
        current = stack[-1]
        options = _unvisited_neighbors(current, cells, size)
        if not options:
            stack.pop()
            continue
        nxt = options[rng.next_int(0, len(options))]
        _remove_wall(current, nxt)
        nxt.visited = True
        stack.append(nxt)
    return cells


def rasterize(cells: List[List[_Cell]], size: int) -> List[List[str]]:
    """Cell centres at odd coordinates; carved edges open the cell between them."""
    width = height = size * 2 + 1
    rows = [[WALL] * width for _ in range(height)]
    for y in range(size):
        for x in range(size):
            cell = cells[y][x]
            gx, gy = x * 2 + 1, y * 2 + 1
            rows[gy][gx] = PATH
            if not cell.walls[1] and x < size - 1:
                rows[gy][gx + 1] = PATH
            if not cell.walls[2] and y < size - 1:
                rows[gy + 1][gx] = PATH
    return rows


def open_centerline(rows: List[List[str]]) -> None:
    """Opens walls on the vertical centre line that separate two path cells."""
    height = len(rows)
    width = len(rows[0])
    mid_x = width // 2
    for y in range(3, height - 3, 2):
        if rows[y][mid_x] == WALL and rows[y][mid_x - 1] == PATH and rows[y][mid_x + 1] == PATH:
            rows[y][mid_x] = PATH


def procedural_grid(size: int, rng: SeededRandom) -> Grid:
    rows = rasterize(carve_spanning_tree(size, rng), size)
    open_centerline(rows)
    return Grid.from_rows(rows)


def _neighbors(grid: Grid, pos: Position) -> List[Position]:
    out: List[Position] = []
    for dx, dy in DELTAS:
        nx, ny = pos.x + dx, pos.y + dy
        if grid.in_bounds(nx, ny) and grid.cells[ny][nx] == PATH:
            out.append(Position(nx, ny))
    return out


def _bfs(grid: Grid, start: Position) -> Tuple[Dict[Position, int], Dict[Position, Optional[Position]]]:
    dist: Dict[Position, int] = {start: 0}
    parent: Dict[Position, Optional[Position]] = {start: None}
    queue: Deque[Position] = deque([start])
    while queue:
        current = queue.popleft()
        for nxt in _neighbors(grid, current):
            if nxt in dist:
                continue
            dist[nxt] = dist[current] + 1
            parent[nxt] = current
            queue.append(nxt)
    return dist, parent


def distance_map(grid: Grid, start: Position) -> Dict[Position, int]:
    """BFS distance from start to every reachable path cell."""
    return _bfs(grid, start)[0]


def shortest_path_length(grid: Grid, start: Position, end: Position) -> int:
    """Number of unit steps from start to end, 0 if unreachable."""
    return distance_map(grid, start).get(end, 0)


def shortest_path(grid: Grid, start: Position, end: Position) -> List[Position]:
    """Cells of one shortest path, start and end included; empty if unreachable."""
    _, parent = _bfs(grid, start)
    if end not in parent:
        return []
    path: List[Position] = []
    node: Optional[Position] = end
    while node is not None:
        path.append(node)
        node = parent[node]
    path.reverse()
    return path


def _gated_slide(
    grid: Grid,
    pos: Position,
    delta: Tuple[int, int],
    coins_at: Dict[Position, str],
    doors_at: Dict[Position, str],
    collected: FrozenSet[Position],
) -> Tuple[Position, FrozenSet[Position]]:
    dx, dy = delta
    x, y = pos
    taken = set(collected)
    unlocked = {coins_at[p] for p in taken if p in coins_at}
    while grid.in_bounds(x + dx, y + dy) and grid.cells[y + dy][x + dx] == PATH:
        nxt = Position(x + dx, y + dy)
        color = doors_at.get(nxt)
        if color is not None and color not in unlocked:
            break
        x, y = nxt
        if nxt in coins_at:
            taken.add(nxt)
            unlocked.add(coins_at[nxt])
    return Position(x, y), frozenset(taken)


def slide_destination(grid: Grid, pos: Position, delta: Tuple[int, int]) -> Position:
    """Where a slide stops on walls alone (doors and hazards ignored)."""
    return _gated_slide(grid, pos, delta, {}, {}, frozenset())[0]


def slide_search(
    grid: Grid,
    start: Position,
    end: Position,
    coins: Iterable[Coin] = (),
    doors: Iterable[Door] = (),
    collected: Iterable[Position] = (),
) -> Optional[List[SlideStep]]:
    """
    Fewest slides from start to end with every coin collected.
    Slides stop on walls and on doors whose colour has no collected coin;
    coins are picked up mid-slide. Returns (index into DELTAS, stopping point)
    per slide, [] when already done, None when no route exists.
    """
    coins_at = {c.position: c.color for c in coins}
    doors_at = {d.position: d.color for d in doors}
    coin_cells = frozenset(coins_at)
    origin: _SearchNode = (start, frozenset(p for p in collected if p in coins_at))
    parent: Dict[_SearchNode, Optional[Tuple[_SearchNode, int]]] = {origin: None}
    queue: Deque[_SearchNode] = deque([origin])
    while queue:
        node = queue.popleft()
        pos, taken = node
        if pos == end and coin_cells <= taken:
            route: List[SlideStep] = []
            while parent[node] is not None:
                prev, index = parent[node]  # type: ignore[misc]
                route.append((index, node[0]))
                node = prev
            route.reverse()
            return route
        for index, delta in enumerate(DELTAS):
            nxt = _gated_slide(grid, pos, delta, coins_at, doors_at, taken)
            if nxt[0] == pos or nxt in parent:
                continue
            parent[nxt] = (node, index)
            queue.append(nxt)
    return None


def shortest_slide_path(grid: Grid, start: Position, end: Position) -> List[Position]:
    """Stopping points of the fewest-slides route from start to end; empty if none."""
    route = slide_search(grid, start, end)
    if route is None:
        return []
    return [start] + [stop for _, stop in route]


def slide_route_cells(route: Sequence[Position]) -> List[List[Position]]:
    """Cells entered by each slide of a stop-to-stop route, stopping point last."""
    moves: List[List[Position]] = []
    for a, b in zip(route, route[1:]):
        dx = (b.x > a.x) - (b.x < a.x)
        dy = (b.y > a.y) - (b.y < a.y)
        cells: List[Position] = []
        x, y = a
        while (x, y) != (b.x, b.y):
            x, y = x + dx, y + dy
            cells.append(Position(x, y))
        moves.append(cells)
    return moves


def _place_on_steps(
    grid: Grid, start: Position, exit_pos: Position, level: int
) -> Tuple[Tuple[Coin, ...], Tuple[Door, ...]]:
    pairs = min((level - 1) // 3 + 1, MAX_PAIRS)
    dist = distance_map(grid, start)
    main_path = [p for p in shortest_path(grid, start, exit_pos) if p != start and p != exit_pos]
    main_path.sort(key=lambda p: dist.get(p, 0))
    segment = len(main_path) // (pairs + 1)

    coins: List[Coin] = []
    doors: List[Door] = []
    for i, color in enumerate(COLORS[:pairs]):
        coin_start = i * segment
        coin_end = coin_start + segment // 2
        coin_candidates = main_path[coin_start:coin_end]
        door_candidates = main_path[coin_end:(i + 1) * segment]
        # a door without its coin would seal the exit
        if not coin_candidates or not door_candidates:
            continue
        coins.append(Coin(coin_candidates[len(coin_candidates) // 2], color))
        doors.append(Door(door_candidates[len(door_candidates) // 2], color))
    return tuple(coins), tuple(doors)


def _place_on_slide_stops(
    grid: Grid, start: Position, exit_pos: Position, level: int, rng: SeededRandom
) -> Optional[Tuple[Tuple[Coin, ...], Tuple[Door, ...]]]:
    stops = [p for p in shortest_slide_path(grid, start, exit_pos) if p != start and p != exit_pos]
    if len(stops) < 2:
        return None
    max_pairs = min((level - 1) // 3 + 1, len(COLORS))
    pairs = max(1, min(max_pairs, len(stops) // 3))
    segment = len(stops) // (pairs + 1)

    coins: List[Coin] = []
    doors: List[Door] = []
    for i, color in enumerate(COLORS[:pairs]):
        seg_start = i * segment
        seg_end = min((i + 1) * segment, len(stops) - 1)
        if seg_end - seg_start < 3:
            continue
        coin_end = seg_start + max(1, (seg_end - seg_start) // 2 - 1)
        door_start = min(coin_end + 1, seg_end)
        coins.append(Coin(stops[rng.next_int(seg_start, coin_end + 1)], color))
        doors.append(Door(stops[rng.next_int(door_start, seg_end + 1)], color))
    if not coins:
        return None
    return tuple(coins), tuple(doors)


def place_coins_and_doors(
    grid: Grid, start: Position, exit_pos: Position, level: int, rng: Optional[SeededRandom] = None
) -> Tuple[Tuple[Coin, ...], Tuple[Door, ...]]:
    """
    Places colored coin/door pairs, each coin before its door.
    From SLIDE_GUARD_MIN_LEVEL on, pairs sit on the stopping points of the
    fewest-slides route so every coin is a place a slide can reach; earlier
    levels, and routes too short to split, use the step-by-step shortest path.
    """
    if level < COIN_MIN_LEVEL:
        return (), ()
    if level >= SLIDE_GUARD_MIN_LEVEL:
        placed = _place_on_slide_stops(grid, start, exit_pos, level, rng or SeededRandom(level))
        if placed is not None:
            return placed
    return _place_on_steps(grid, start, exit_pos, level)


def _keep_winnable(
    grid: Grid, start: Position, exit_pos: Position, coins: Tuple[Coin, ...], doors: Tuple[Door, ...]
) -> Tuple[Tuple[Coin, ...], Tuple[Door, ...]]:
    """Drops trailing pairs until every coin can be collected by slides."""
    if slide_search(grid, start, exit_pos) is None:
        return coins, doors
    while coins and slide_search(grid, start, exit_pos, coins, doors) is None:
        logger.debug("Dropping %s coin/door pair: not collectable by slides", coins[-1].color)
        coins, doors = coins[:-1], doors[:-1]
    return coins, doors


def _try_curated(curated: CuratedLevel, width: int, height: int, start: Position, exit_pos: Position) -> Optional[Grid]:
    grid = build_curated_grid(curated, width, height)
    if shortest_path_length(grid, start, exit_pos) > 0:
        return grid
    logger.warning("Curated layout for level %d (seed %d) has no solution; using procedural maze",
                   curated.level, curated.seed)
    return None


@lru_cache(maxsize=64)
def generate_maze(params: LevelParams, level: Optional[int] = None) -> MazeLayout:
    """
    Generates the maze for the given parameters.
    Identical (params, level) always yield an identical layout. The level drives
    coin/door placement; when omitted, the curated table's level for the seed is
    used and uncurated seeds get no coins or doors.
    """
    rng = SeededRandom(params.seed)
    width = height = params.grid_size * 2 + 1
    start = Position(1, 1)
    exit_pos = Position(width - 2, height - 2)

    curated = curated_for_seed(params.seed)
    if level is None:
        level = curated.level if curated is not None else 0

    grid: Optional[Grid] = None
    if curated is not None:
        grid = _try_curated(curated, width, height, start, exit_pos)
    used_curated = grid is not None
    if grid is None:
        grid = procedural_grid(params.grid_size, rng)
        if level >= SLIDE_GUARD_MIN_LEVEL and not shortest_slide_path(grid, start, exit_pos):
            snake = snake_grid(width, height)
            if shortest_slide_path(snake, start, exit_pos):
                logger.info("Level %d (seed %d) not solvable by slides; using serpentine layout",
                            level, params.seed)
                grid = snake

    solution_length = shortest_path_length(grid, start, exit_pos)
    if solution_length == 0:
        raise MazeGenerationError(f"No path from {start} to {exit_pos} for seed {params.seed}")

    if used_curated:
        coins, doors = curated.coins, curated.doors  # type: ignore[union-attr]
    else:
        coins, doors = place_coins_and_doors(grid, start, exit_pos, level, rng)
        coins, doors = _keep_winnable(grid, start, exit_pos, coins, doors)

    route = slide_search(grid, start, exit_pos, coins, doors)
    slide_route = (start,) + tuple(stop for _, stop in route) if route is not None else ()

    return MazeLayout(
        grid=grid,
        start_pos=start,
        exit_pos=exit_pos,
        solution_length=solution_length,
        coins=coins,
        doors=doors,
        slide_route=slide_route,
    )

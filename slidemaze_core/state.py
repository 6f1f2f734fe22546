from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Set, Tuple

from .board import Coin, Door, Grid, Position
from .levels import LAVA_MOVES_PER_ROW, PLANET


class Status:
    PLAYING = 'playing'
    WON = 'won'
    LOST = 'lost'


SoilVisits = Tuple[Tuple[Position, int], ...]  # sorted by position


def freeze_visits(visits: Mapping[Position, int]) -> SoilVisits:
    return tuple(sorted((Position(*p), int(n)) for p, n in visits.items() if n > 0))


@dataclass(frozen=True)
class HistoryEntry:
    """Pre-move snapshot pushed before every successful move."""
    player_pos: Position
    moves_left: int
    collected_coins: FrozenSet[Position]
    grid: Grid
    time_left: Optional[float] = None
    timer_started: bool = False
    last_move_icy: bool = False
    soil_visits: SoilVisits = ()
    sand_checkpoint: Optional[Position] = None
    sand_reveal_seconds: float = 0.0
    lava_row: Optional[int] = None
    lava_move_counter: int = 0


@dataclass(frozen=True)
class GameState:
    """Represents one run of a level. Never mutated; every transition returns a new value."""
    level: int
    grid: Grid
    start_pos: Position
    player_pos: Position
    exit_pos: Position
    coins: Tuple[Coin, ...]
    doors: Tuple[Door, ...]
    collected_coins: FrozenSet[Position]
    moves_left: int
    max_moves: int
    status: str
    history: Tuple[HistoryEntry, ...]
    seed: int
    stage: str = PLANET
    # hazard fields; defaults mean "hazard not in play"
    icy_cells: FrozenSet[Position] = frozenset()
    last_move_icy: bool = False
    time_left: Optional[float] = None
    max_time: Optional[float] = None
    timer_started: bool = False
    soil_visits: SoilVisits = ()
    # cells that never crumble, however often they are crossed
    soil_bedrock: FrozenSet[Position] = frozenset()
    sand_storm_active: bool = False
    sand_checkpoint: Optional[Position] = None
    sand_reveal_seconds: float = 0.0
    lava_row: Optional[int] = None
    lava_move_counter: int = 0
    lava_moves_per_row: int = LAVA_MOVES_PER_ROW

    def coin_at(self, pos: Position) -> Optional[Coin]:
        for coin in self.coins:
            if coin.position == pos:
                return coin
        return None

    def door_at(self, pos: Position) -> Optional[Door]:
        for door in self.doors:
            if door.position == pos:
                return door
        return None

    def unlocked_colors(self, collected: Optional[Iterable[Position]] = None) -> Set[str]:
        taken = set(self.collected_coins if collected is None else collected)
        return {coin.color for coin in self.coins if coin.position in taken}

    def is_door_locked(self, door: Door, collected: Optional[Iterable[Position]] = None) -> bool:
        return door.color not in self.unlocked_colors(collected)

    def all_coins_collected(self, collected: Optional[Iterable[Position]] = None) -> bool:
        taken = set(self.collected_coins if collected is None else collected)
        return all(coin.position in taken for coin in self.coins)

    def soil_visit_count(self, pos: Position) -> int:
        return self.soil_visits_map().get(pos, 0)

    def soil_visits_map(self) -> Dict[Position, int]:
        """Fresh dict copy of the soil visit counters."""
        return dict(self.soil_visits)

    def snapshot(self) -> HistoryEntry:
        return HistoryEntry(
            player_pos=self.player_pos,
            moves_left=self.moves_left,
            collected_coins=frozenset(self.collected_coins),
            grid=self.grid,
            time_left=self.time_left,
            timer_started=self.timer_started,
            last_move_icy=self.last_move_icy,
            soil_visits=self.soil_visits,
            sand_checkpoint=self.sand_checkpoint,
            sand_reveal_seconds=self.sand_reveal_seconds,
            lava_row=self.lava_row,
            lava_move_counter=self.lava_move_counter,
        )

    def restored(self, entry: HistoryEntry, history: Tuple[HistoryEntry, ...]) -> 'GameState':
        """Rolls back to a snapshot; the result is always playing."""
        return replace(
            self,
            player_pos=entry.player_pos,
            moves_left=entry.moves_left,
            collected_coins=frozenset(entry.collected_coins),
            grid=entry.grid,
            time_left=entry.time_left,
            timer_started=entry.timer_started,
            last_move_icy=entry.last_move_icy,
            soil_visits=entry.soil_visits,
            sand_checkpoint=entry.sand_checkpoint,
            sand_reveal_seconds=entry.sand_reveal_seconds,
            lava_row=entry.lava_row,
            lava_move_counter=entry.lava_move_counter,
            history=history,
            status=Status.PLAYING,
        )

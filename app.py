from __future__ import annotations

import logging
import math
import os
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify, request

from game import (
    Coin,
    Door,
    GameState,
    Grid,
    HistoryEntry,
    InvalidActionError,
    InvalidStateError,
    LAVA_MOVES_PER_ROW,
    Position,
    ProgressStore,
    Status,
    action_from_dict,
    can_undo,
    create_level,
    game_reducer,
    get_cell_type,
    get_progress,
    hint,
    is_cell_visible,
    lava_warning_row,
    legal_directions,
    record_completion,
)
from slidemaze_core.db import progress_to_json
from slidemaze_core.state import freeze_visits

logging.basicConfig(
    level=getattr(logging, os.getenv("SLIDEMAZE_LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_DB = os.getenv("SLIDEMAZE_DB", "data/progress.db")

app = Flask(__name__)


# ---------- JSON conversion ----------

def position_to_json(p: Position) -> Dict[str, int]:
    return {"x": int(p.x), "y": int(p.y)}


def position_from_json(obj: Any) -> Position:
    if isinstance(obj, str):
        return Position.from_key(obj)
    if isinstance(obj, dict):
        return Position(int(obj["x"]), int(obj["y"]))
    x, y = obj
    return Position(int(x), int(y))


def grid_to_json(g: Grid) -> Dict[str, Any]:
    return {"width": int(g.width), "height": int(g.height), "cells": g.to_rows()}


def grid_from_json(obj: Dict[str, Any]) -> Grid:
    grid = Grid.from_rows([[str(c) for c in row] for row in obj["cells"]])
    if grid.width != int(obj.get("width", grid.width)) or grid.height != int(obj.get("height", grid.height)):
        raise ValueError("grid size does not match its cells")
    return grid


def _keys(positions) -> List[str]:
    return [p.key() for p in sorted(positions)]


def _visits_to_json(visits) -> Dict[str, int]:
    return {p.key(): int(n) for p, n in visits}


def _visits_from_json(obj: Optional[Dict[str, Any]]):
    return freeze_visits({Position.from_key(k): int(n) for k, n in (obj or {}).items()})


def _optional_position(obj: Any) -> Optional[Position]:
    return None if obj is None else position_from_json(obj)


def _finite(value: Any) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: {value!r}")
    return number


def _whole(value: Any) -> int:
    """int() that refuses infinities and NaN with ValueError."""
    if isinstance(value, float):
        _finite(value)
    return int(value)


def _optional_float(obj: Any) -> Optional[float]:
    return None if obj is None else _finite(obj)


def history_entry_to_json(e: HistoryEntry, live_grid: Grid) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "playerPos": position_to_json(e.player_pos),
        "movesLeft": int(e.moves_left),
        "collectedCoins": _keys(e.collected_coins),
        "timeLeft": e.time_left,
        "timerStarted": bool(e.timer_started),
        "lastMoveIcy": bool(e.last_move_icy),
        "soilVisits": _visits_to_json(e.soil_visits),
        "sandCheckpoint": e.sand_checkpoint.key() if e.sand_checkpoint is not None else None,
        "sandRevealSeconds": float(e.sand_reveal_seconds),
        "lavaRow": e.lava_row,
        "lavaMoveCounter": int(e.lava_move_counter),
    }
    # grids only differ after soil or lava changed the maze
    if e.grid != live_grid:
        out["grid"] = grid_to_json(e.grid)
    return out


def history_entry_from_json(obj: Dict[str, Any], live_grid: Grid) -> HistoryEntry:
    return HistoryEntry(
        player_pos=position_from_json(obj["playerPos"]),
        moves_left=int(obj["movesLeft"]),
        collected_coins=frozenset(position_from_json(k) for k in obj.get("collectedCoins", [])),
        grid=grid_from_json(obj["grid"]) if "grid" in obj else live_grid,
        time_left=_optional_float(obj.get("timeLeft")),
        timer_started=bool(obj.get("timerStarted", False)),
        last_move_icy=bool(obj.get("lastMoveIcy", False)),
        soil_visits=_visits_from_json(obj.get("soilVisits")),
        sand_checkpoint=_optional_position(obj.get("sandCheckpoint")),
        sand_reveal_seconds=_finite(obj.get("sandRevealSeconds", 0.0)),
        lava_row=None if obj.get("lavaRow") is None else int(obj["lavaRow"]),
        lava_move_counter=int(obj.get("lavaMoveCounter", 0)),
    )


def state_to_json(s: GameState) -> Dict[str, Any]:
    return {
        "level": int(s.level),
        "seed": int(s.seed),
        "stage": s.stage,
        "grid": grid_to_json(s.grid),
        "startPos": position_to_json(s.start_pos),
        "playerPos": position_to_json(s.player_pos),
        "exitPos": position_to_json(s.exit_pos),
        "coins": [{"position": position_to_json(c.position), "color": c.color} for c in s.coins],
        "doors": [{"position": position_to_json(d.position), "color": d.color} for d in s.doors],
        "collectedCoins": _keys(s.collected_coins),
        "movesLeft": int(s.moves_left),
        "maxMoves": int(s.max_moves),
        "status": s.status,
        "history": [history_entry_to_json(e, s.grid) for e in s.history],
        "icyCells": _keys(s.icy_cells),
        "lastMoveIcy": bool(s.last_move_icy),
        "timeLeft": s.time_left,
        "maxTime": s.max_time,
        "timerStarted": bool(s.timer_started),
        "soilVisits": _visits_to_json(s.soil_visits),
        "sandStormActive": bool(s.sand_storm_active),
        "sandCheckpoint": s.sand_checkpoint.key() if s.sand_checkpoint is not None else None,
        "sandRevealSeconds": float(s.sand_reveal_seconds),
        "lavaRow": s.lava_row,
        "lavaMoveCounter": int(s.lava_move_counter),
        "lavaMovesPerRow": int(s.lava_moves_per_row),
        "soilBedrock": _keys(s.soil_bedrock),
    }


def json_to_state(obj: Dict[str, Any]) -> GameState:
    try:
        grid = grid_from_json(obj["grid"])
        status = str(obj.get("status", Status.PLAYING))
        if status not in (Status.PLAYING, Status.WON, Status.LOST):
            raise ValueError(f"unknown status {status!r}")
        return GameState(
            level=int(obj["level"]),
            grid=grid,
            start_pos=position_from_json(obj.get("startPos", {"x": 1, "y": 1})),
            player_pos=position_from_json(obj["playerPos"]),
            exit_pos=position_from_json(obj["exitPos"]),
            coins=tuple(Coin(position_from_json(c["position"]), str(c["color"])) for c in obj.get("coins", [])),
            doors=tuple(Door(position_from_json(d["position"]), str(d["color"])) for d in obj.get("doors", [])),
            collected_coins=frozenset(position_from_json(k) for k in obj.get("collectedCoins", [])),
            moves_left=int(obj["movesLeft"]),
            max_moves=int(obj["maxMoves"]),
            status=status,
            history=tuple(history_entry_from_json(e, grid) for e in obj.get("history", [])),
            seed=int(obj["seed"]),
            stage=str(obj.get("stage", "planet")),
            icy_cells=frozenset(position_from_json(k) for k in obj.get("icyCells", [])),
            last_move_icy=bool(obj.get("lastMoveIcy", False)),
            time_left=_optional_float(obj.get("timeLeft")),
            max_time=_optional_float(obj.get("maxTime")),
            timer_started=bool(obj.get("timerStarted", False)),
            soil_visits=_visits_from_json(obj.get("soilVisits")),
            soil_bedrock=frozenset(position_from_json(k) for k in obj.get("soilBedrock", [])),
            sand_storm_active=bool(obj.get("sandStormActive", False)),
            sand_checkpoint=_optional_position(obj.get("sandCheckpoint")),
            sand_reveal_seconds=_finite(obj.get("sandRevealSeconds", 0.0)),
            lava_row=None if obj.get("lavaRow") is None else int(obj["lavaRow"]),
            lava_move_counter=int(obj.get("lavaMoveCounter", 0)),
            lava_moves_per_row=int(obj.get("lavaMovesPerRow", LAVA_MOVES_PER_ROW)),
        )
    except (KeyError, TypeError, ValueError, OverflowError) as e:
        raise InvalidStateError(f"bad state: {e}") from e


def state_view(s: GameState) -> Dict[str, Any]:
    """Selector output for the renderer."""
    cells = [[get_cell_type(s, x, y) for x in range(s.grid.width)] for y in range(s.grid.height)]
    view: Dict[str, Any] = {
        "cells": cells,
        "progress": get_progress(s),
        "canUndo": can_undo(s),
        "legalDirections": legal_directions(s),
        "lavaWarningRow": lava_warning_row(s),
    }
    if s.sand_storm_active:
        view["visible"] = [[is_cell_visible(s, x, y) for x in range(s.grid.width)] for y in range(s.grid.height)]
    return view


def _state_payload(s: GameState) -> Dict[str, Any]:
    return {"ok": True, "state": state_to_json(s), "view": state_view(s)}


def _progress_store() -> ProgressStore:
    return ProgressStore(DEFAULT_DB)


# ---------- API ----------

@app.get("/api/health")
def api_health() -> Any:
    return jsonify({"ok": True})


@app.post("/api/new")
def api_new() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    try:
        level = _whole(body.get("level", 1))
        seed = body.get("seed", None)
        seed = _whole(seed) if seed is not None else None
    except (TypeError, ValueError, OverflowError):
        return jsonify({"ok": False, "error": "level and seed must be integers"}), 400
    state = create_level(level, seed)
    logger.info("New game: level %d seed %d", state.level, state.seed)
    return jsonify(_state_payload(state))


@app.post("/api/action")
def api_action() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    s_in = body.get("state")
    if not isinstance(s_in, dict):
        return jsonify({"ok": False, "error": "state required"}), 400
    try:
        state = json_to_state(s_in)
        action = action_from_dict(body.get("action"))
    except (InvalidStateError, InvalidActionError) as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    next_state = game_reducer(state, action)
    if next_state.status != state.status:
        logger.info("Level %d: %s -> %s", next_state.level, state.status, next_state.status)
    return jsonify(_state_payload(next_state))


@app.post("/api/hint")
def api_hint() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    s_in = body.get("state")
    if not isinstance(s_in, dict):
        return jsonify({"ok": False, "error": "state required"}), 400
    try:
        state = json_to_state(s_in)
    except InvalidStateError as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    return jsonify({"ok": True, "direction": hint(state)})


@app.get("/api/progress/<user>")
def api_progress_get(user: str) -> Any:
    progress = _progress_store().load(user)
    return jsonify({"ok": True, "progress": progress_to_json(progress)})


@app.post("/api/progress/<user>")
def api_progress_record(user: str) -> Any:
    body = request.get_json(force=True, silent=True) or {}
    try:
        level = _whole(body["level"])
    except (KeyError, TypeError, ValueError, OverflowError):
        return jsonify({"ok": False, "error": "level required"}), 400
    store = _progress_store()
    progress = record_completion(store.load(user), level)
    store.save(user, progress)
    logger.info("Progress for %s: level %d completed", user, level)
    return jsonify({"ok": True, "progress": progress_to_json(progress)})


if __name__ == "__main__":
    debug = os.getenv("FLASK_DEBUG", os.getenv("DEBUG", "0")).lower() in ("1", "true", "yes", "on")
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")), debug=debug)

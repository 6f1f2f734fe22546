"""
Slidemaze core Python package.

Deterministic game core for the sliding-maze puzzle: maze generation, the
slide-move engine and the read-only selectors the UI renders from.
Modules:
- rng.py: SeededRandom (Mulberry32)
- board.py: Position, Grid, Coin, Door
- levels.py: level configuration, move limits, stage bands
- layouts.py: curated hand-authored layouts keyed by seed
- generator.py: generate_maze and path searches
- state.py: GameState, HistoryEntry
- hazards.py: per-stage hazard rules
- moves.py: apply_move, undo
- actions.py / reducer.py: action vocabulary and game_reducer
- selectors.py: derived views
- solver.py: slide-move search used for hints
- db.py: sqlite progress store (consumed by the app, not by the core)
"""

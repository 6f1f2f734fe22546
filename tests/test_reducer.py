import unittest
from dataclasses import replace

from game import (
    ICE,
    RIGHT,
    PATH,
    GameState,
    Grid,
    InvalidActionError,
    LoadLevel,
    Move,
    NextLevel,
    Position,
    Restart,
    SandRevealTick,
    Status,
    Tick,
    Undo,
    action_from_dict,
    action_to_dict,
    create_level,
    game_reducer,
    legal_directions,
)


class TestReducer(unittest.TestCase):
    def _mk_state(self, rows, player, exit_pos, moves=10, stage='planet', **extra):
        grid = Grid.from_rows([[PATH if ch == '.' else 'wall' for ch in r] for r in rows])
        return GameState(
            level=60,
            grid=grid,
            start_pos=Position(*player),
            player_pos=Position(*player),
            exit_pos=Position(*exit_pos),
            coins=(),
            doors=(),
            collected_coins=frozenset(),
            moves_left=moves,
            max_moves=moves,
            status=Status.PLAYING,
            history=(),
            seed=0,
            stage=stage,
            **extra,
        )

    ICE_ROWS = [
        '#######',
        '#.....#',
        '#####.#',
        '#####.#',
        '#######',
    ]

    def test_given_move_and_undo_actions_when_reduced_then_dispatched(self):
        s = create_level(1)
        d = legal_directions(s)[0]
        s2 = game_reducer(s, Move(d))
        self.assertEqual(len(s2.history), 1)
        self.assertEqual(game_reducer(s2, Undo()), s)

    def test_given_progress_when_restarted_then_same_level_and_seed_fresh(self):
        s = create_level(4)
        s2 = game_reducer(s, Move(legal_directions(s)[0]))
        fresh = game_reducer(s2, Restart())
        self.assertEqual(fresh, s)
        self.assertEqual(fresh.history, ())

    def test_given_level_when_next_level_then_following_level_with_its_seed(self):
        s = create_level(1)
        s2 = game_reducer(s, NextLevel())
        self.assertEqual(s2.level, 2)
        self.assertEqual(s2.seed, 1014)

    def test_given_load_level_when_reduced_then_clamped_and_seed_pinned(self):
        s = create_level(1)
        self.assertEqual(game_reducer(s, LoadLevel(0)).level, 1)
        pinned = game_reducer(s, LoadLevel(5, seed=42))
        self.assertEqual(pinned.level, 5)
        self.assertEqual(pinned.seed, 42)
        self.assertEqual(game_reducer(s, LoadLevel(5, seed=42)), pinned)

    def test_given_unknown_action_when_reduced_then_state_unchanged(self):
        s = create_level(1)
        self.assertIs(game_reducer(s, object()), s)

    def test_given_ice_timer_when_ticking_then_counts_down_only_after_first_move(self):
        s = self._mk_state(self.ICE_ROWS, (1, 1), (5, 3), stage=ICE,
                           time_left=30.0, max_time=30.0)
        self.assertIs(game_reducer(s, Tick(5)), s)
        s = game_reducer(s, Move(RIGHT))
        self.assertTrue(s.timer_started)
        s = game_reducer(s, Tick(10))
        self.assertEqual(s.time_left, 20.0)
        self.assertEqual(s.status, Status.PLAYING)
        self.assertIs(game_reducer(s, Tick(0)), s)
        self.assertIs(game_reducer(s, Tick(float('nan'))), s)
        self.assertIs(game_reducer(s, Tick(float('inf'))), s)
        s = game_reducer(s, Tick(25))
        self.assertEqual(s.time_left, 0.0)
        self.assertEqual(s.status, Status.LOST)
        self.assertIs(game_reducer(s, Tick(1)), s)

    def test_given_reveal_window_when_sand_ticking_then_shrinks_to_zero(self):
        s = self._mk_state(self.ICE_ROWS, (1, 1), (5, 3), stage='sand',
                           sand_storm_active=True, sand_reveal_seconds=5.0)
        s = game_reducer(s, SandRevealTick(2))
        self.assertEqual(s.sand_reveal_seconds, 3.0)
        s = game_reducer(s, SandRevealTick(10))
        self.assertEqual(s.sand_reveal_seconds, 0.0)
        self.assertIs(game_reducer(s, SandRevealTick(1)), s)

    def test_given_same_level_when_created_twice_then_equal(self):
        self.assertEqual(create_level(9), create_level(9))
        self.assertNotEqual(create_level(9).grid, create_level(10).grid)

    def test_given_out_of_range_level_when_created_then_clamped(self):
        self.assertEqual(create_level(-3).level, 1)

    def test_given_won_state_when_undone_then_playing_again(self):
        s = self._mk_state(['#######', '#.....#', '#######'], (1, 1), (5, 1))
        won = game_reducer(s, Move(RIGHT))
        self.assertEqual(won.status, Status.WON)
        back = game_reducer(won, Undo())
        self.assertEqual(back.status, Status.PLAYING)
        self.assertEqual(back.player_pos, Position(1, 1))

    def test_given_lost_state_when_restarted_then_fresh_level(self):
        s = replace(create_level(2), status=Status.LOST, moves_left=0)
        fresh = game_reducer(s, Restart())
        self.assertEqual(fresh.status, Status.PLAYING)
        self.assertEqual(fresh.moves_left, fresh.max_moves)


class TestActionParsing(unittest.TestCase):
    def test_given_wire_actions_when_parsed_then_typed_actions(self):
        self.assertEqual(action_from_dict({'type': 'MOVE', 'direction': 'up'}), Move('up'))
        self.assertEqual(action_from_dict({'type': 'UNDO'}), Undo())
        self.assertEqual(action_from_dict({'type': 'RESTART'}), Restart())
        self.assertEqual(action_from_dict({'type': 'NEXT_LEVEL'}), NextLevel())
        self.assertEqual(action_from_dict({'type': 'LOAD_LEVEL', 'level': 12}), LoadLevel(12))
        self.assertEqual(action_from_dict({'type': 'LOAD_LEVEL', 'level': 12, 'seed': 9}), LoadLevel(12, 9))
        self.assertEqual(action_from_dict({'type': 'TICK', 'seconds': 1}), Tick(1.0))
        self.assertEqual(action_from_dict({'type': 'SAND_REVEAL_TICK', 'seconds': 0.5}), SandRevealTick(0.5))

    def test_given_actions_when_serialized_then_parse_back(self):
        for a in (Move('left'), Undo(), LoadLevel(3, 7), LoadLevel(3), Tick(2.0)):
            self.assertEqual(action_from_dict(action_to_dict(a)), a)

    def test_given_malformed_actions_when_parsed_then_error(self):
        bad = [
            None,
            {'type': 'JUMP'},
            {'type': 'MOVE', 'direction': 'north'},
            {'type': 'LOAD_LEVEL'},
            {'type': 'TICK', 'seconds': 'soon'},
            {'type': 'TICK', 'seconds': True},
            {'type': 'TICK', 'seconds': float('nan')},
            {'type': 'TICK', 'seconds': float('inf')},
            {'type': 'SAND_REVEAL_TICK', 'seconds': float('-inf')},
            {'type': 'LOAD_LEVEL', 'level': float('inf')},
            {'type': 'LOAD_LEVEL', 'level': 10 ** 400},
            {'type': 'LOAD_LEVEL', 'level': 3, 'seed': float('nan')},
        ]
        for payload in bad:
            with self.assertRaises(InvalidActionError):
                action_from_dict(payload)


if __name__ == '__main__':
    unittest.main(verbosity=2)

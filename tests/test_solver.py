import unittest
from dataclasses import replace

from game import (
    PATH,
    WALL,
    Coin,
    Door,
    GameState,
    Grid,
    Position,
    Status,
    apply_move,
    create_level,
    hint,
    plan,
    solve,
)


class TestSolver(unittest.TestCase):
    def _mk_state(self, rows, player, exit_pos, coins=(), doors=(), moves=10, **extra):
        grid = Grid.from_rows([[PATH if ch == '.' else WALL for ch in r] for r in rows])
        return GameState(
            level=1,
            grid=grid,
            start_pos=Position(*player),
            player_pos=Position(*player),
            exit_pos=Position(*exit_pos),
            coins=tuple(coins),
            doors=tuple(doors),
            collected_coins=frozenset(),
            moves_left=moves,
            max_moves=moves,
            status=Status.PLAYING,
            history=(),
            seed=0,
            **extra,
        )

    ROWS = [
        '#########',
        '#.......#',
        '#.#######',
        '#.#######',
        '#########',
    ]

    def test_given_gated_corridor_when_solving_then_fetches_coin_first(self):
        s = self._mk_state(
            self.ROWS, (3, 1), (7, 1),
            coins=[Coin(Position(1, 3), 'red')],
            doors=[Door(Position(5, 1), 'red'), Door(Position(6, 1), 'red')],
        )
        self.assertEqual(solve(s), ['left', 'down', 'up', 'right'])
        self.assertEqual(hint(s), 'left')

    def test_given_curated_levels_when_replaying_solution_then_won(self):
        for level in (3, 7, 8):
            s = create_level(level)
            moves = solve(s)
            self.assertIsNotNone(moves, f"level {level}")
            self.assertLessEqual(len(moves), s.max_moves)
            for d in moves:
                s = apply_move(s, d)
            self.assertEqual(s.status, Status.WON, f"level {level}")

    def test_given_level_three_when_solving_then_authored_route(self):
        s = create_level(3)
        self.assertEqual(solve(s), ['down', 'right', 'up', 'right', 'down'])

    def test_given_finished_games_when_solving_then_empty_or_none(self):
        s = self._mk_state(self.ROWS, (3, 1), (7, 1))
        self.assertEqual(solve(replace(s, status=Status.WON)), [])
        self.assertIsNone(hint(replace(s, status=Status.WON)))
        self.assertIsNone(solve(replace(s, status=Status.LOST)))

    def test_given_door_without_coin_when_solving_then_none(self):
        s = self._mk_state(self.ROWS, (3, 1), (7, 1), doors=[Door(Position(5, 1), 'blue')])
        self.assertIsNone(solve(s))
        self.assertIsNone(hint(s))

    def test_given_checkpoint_mid_slide_when_solving_then_line_stops_there_and_continues(self):
        rows = ['#######', '#.....#', '#######']
        s = self._mk_state(rows, (1, 1), (5, 1), stage='sand',
                           sand_storm_active=True, sand_checkpoint=Position(3, 1))
        self.assertEqual(plan(s), ['right'])
        moves = solve(s)
        self.assertEqual(moves, ['right', 'right'])
        self.assertEqual(hint(s), 'right')
        for d in moves:
            s = apply_move(s, d)
        self.assertEqual(s.status, Status.WON)

    def test_given_budget_too_short_for_plan_when_solving_then_none(self):
        rows = ['#######', '#.....#', '#######']
        s = self._mk_state(rows, (1, 1), (5, 1), moves=1, stage='sand',
                           sand_storm_active=True, sand_checkpoint=Position(3, 1))
        self.assertIsNone(solve(s))


class TestWinnableLevels(unittest.TestCase):
    LEVELS = (1, 2, 5, 12, 21, 22, 35, 50, 51, 64, 77, 100, 101, 118, 128, 150,
              151, 166, 180, 200, 201, 202, 219, 233, 250)

    def test_given_sampled_levels_of_every_stage_when_replaying_solution_then_won(self):
        for level in self.LEVELS:
            with self.subTest(level=level):
                s = create_level(level)
                moves = solve(s)
                self.assertIsNotNone(moves)
                self.assertLessEqual(len(moves), s.max_moves)
                for d in moves:
                    s = apply_move(s, d)
                self.assertEqual(s.status, Status.WON)

    def test_given_level_128_when_placing_coins_then_every_coin_reachable_by_slides(self):
        s = create_level(128)
        self.assertIsNotNone(plan(s))


if __name__ == '__main__':
    unittest.main(verbosity=2)

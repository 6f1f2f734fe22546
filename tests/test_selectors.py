import unittest
from dataclasses import replace

from game import (
    LEFT,
    PATH,
    RIGHT,
    WALL,
    Coin,
    Door,
    GameState,
    Grid,
    Position,
    Status,
    apply_move,
    can_undo,
    coins_remaining,
    get_cell_type,
    get_grid_for_render,
    get_progress,
    is_cell_cracked,
    is_cell_visible,
    is_lava_cell,
    lava_warning_row,
)


class TestSelectors(unittest.TestCase):
    def _mk_state(self, rows, player, exit_pos, coins=(), doors=(), moves=10, stage='planet', **extra):
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
            stage=stage,
            **extra,
        )

    ROWS = [
        '#########',
        '#.......#',
        '#.#######',
        '#.#######',
        '#########',
    ]

    def _doors_state(self):
        return self._mk_state(
            self.ROWS, (3, 1), (7, 1),
            coins=[Coin(Position(1, 3), 'red')],
            doors=[Door(Position(5, 1), 'red')],
        )

    def test_given_board_objects_when_classifying_cells_then_priority_order(self):
        s = self._doors_state()
        self.assertEqual(get_cell_type(s, 3, 1), 'player')
        self.assertEqual(get_cell_type(s, 7, 1), 'exit')
        self.assertEqual(get_cell_type(s, 1, 3), 'coin-red')
        self.assertEqual(get_cell_type(s, 5, 1), 'door-red')
        self.assertEqual(get_cell_type(s, 0, 0), 'wall')
        self.assertEqual(get_cell_type(s, 2, 1), 'path')

    def test_given_coordinates_off_the_grid_when_classifying_then_wall(self):
        s = self._mk_state(['...', '...'], (0, 0), (2, 1))
        self.assertEqual(get_cell_type(s, 2, 0), 'path')
        self.assertEqual(get_cell_type(s, -1, 0), 'wall')
        self.assertEqual(get_cell_type(s, 0, -1), 'wall')
        self.assertEqual(get_cell_type(s, 3, 0), 'wall')
        self.assertEqual(get_cell_type(s, 0, 2), 'wall')

    def test_given_coin_collected_when_classifying_then_coin_and_door_become_path(self):
        s = replace(self._doors_state(), collected_coins=frozenset({Position(1, 3)}))
        self.assertEqual(get_cell_type(s, 1, 3), 'path')
        self.assertEqual(get_cell_type(s, 5, 1), 'path')
        self.assertEqual(coins_remaining(s), 0)
        self.assertEqual(coins_remaining(self._doors_state()), 1)

    def test_given_history_when_checking_undo_then_only_while_playing(self):
        s = self._doors_state()
        self.assertFalse(can_undo(s))
        s2 = apply_move(s, LEFT)
        self.assertTrue(can_undo(s2))
        self.assertFalse(can_undo(replace(s2, status=Status.WON)))

    def test_given_moves_spent_when_measuring_progress_then_percentage(self):
        s = self._doors_state()
        self.assertEqual(get_progress(s), 0.0)
        self.assertAlmostEqual(get_progress(apply_move(s, LEFT)), 10.0)
        self.assertEqual(get_progress(replace(s, max_moves=0, moves_left=0)), 0.0)

    def test_given_state_when_rendering_then_plain_grid_copy(self):
        s = self._doors_state()
        rows = get_grid_for_render(s)
        self.assertEqual(rows, s.grid.to_rows())
        rows[1][1] = WALL
        self.assertEqual(s.grid.at(1, 1), PATH)

    def test_given_storm_when_checking_visibility_then_only_player_neighbourhood(self):
        s = self._mk_state(self.ROWS, (3, 1), (7, 1), stage='sand', sand_storm_active=True)
        self.assertTrue(is_cell_visible(s, 2, 0))
        self.assertTrue(is_cell_visible(s, 4, 2))
        self.assertFalse(is_cell_visible(s, 7, 1))
        revealed = replace(s, sand_reveal_seconds=2.0)
        self.assertTrue(is_cell_visible(revealed, 7, 1))
        calm = self._doors_state()
        self.assertTrue(is_cell_visible(calm, 7, 3))

    def test_given_lava_when_querying_then_rows_and_warning(self):
        s = self._mk_state(self.ROWS, (3, 1), (7, 1), stage='lava', lava_row=0, lava_move_counter=1)
        self.assertTrue(is_lava_cell(s, 4, 0))
        self.assertFalse(is_lava_cell(s, 4, 1))
        self.assertIsNone(lava_warning_row(s))
        self.assertEqual(lava_warning_row(replace(s, lava_move_counter=2)), 1)
        self.assertIsNone(lava_warning_row(replace(s, lava_row=4, lava_move_counter=2)))
        self.assertIsNone(lava_warning_row(self._doors_state()))
        slow = replace(s, lava_moves_per_row=5, lava_move_counter=3)
        self.assertIsNone(lava_warning_row(slow))
        self.assertEqual(lava_warning_row(replace(slow, lava_move_counter=4)), 1)

    def test_given_soil_visits_when_checking_cracks_then_second_visit_cracked(self):
        s = self._mk_state(self.ROWS, (1, 1), (1, 3), stage='soil')
        s = apply_move(s, RIGHT)
        self.assertFalse(is_cell_cracked(s, 3, 1))
        s = apply_move(s, LEFT)
        self.assertTrue(is_cell_cracked(s, 3, 1))
        self.assertFalse(is_cell_cracked(s, 3, 2))
        self.assertFalse(is_cell_cracked(replace(s, soil_bedrock=frozenset({Position(3, 1)})), 3, 1))


if __name__ == '__main__':
    unittest.main(verbosity=2)

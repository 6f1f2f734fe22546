import unittest

from game import SeededRandom


class TestSeededRandom(unittest.TestCase):
    def test_given_same_seed_when_drawing_then_streams_identical(self):
        a = SeededRandom(12345)
        b = SeededRandom(12345)
        self.assertEqual([a.next() for _ in range(50)], [b.next() for _ in range(50)])

    def test_given_different_seeds_when_drawing_then_streams_differ(self):
        a = SeededRandom(1)
        b = SeededRandom(2)
        self.assertNotEqual([a.next() for _ in range(10)], [b.next() for _ in range(10)])

    def test_given_stream_when_drawing_floats_then_all_in_unit_interval(self):
        rng = SeededRandom(7)
        for _ in range(1000):
            v = rng.next()
            self.assertGreaterEqual(v, 0.0)
            self.assertLess(v, 1.0)

    def test_given_bounds_when_next_int_then_half_open_range_covered(self):
        rng = SeededRandom(99)
        seen = set()
        for _ in range(500):
            v = rng.next_int(3, 7)
            self.assertIn(v, (3, 4, 5, 6))
            seen.add(v)
        self.assertEqual(seen, {3, 4, 5, 6})

    def test_given_sequence_when_shuffle_then_new_permutation_and_input_untouched(self):
        items = list(range(20))
        out1 = SeededRandom(42).shuffle(items)
        out2 = SeededRandom(42).shuffle(items)
        self.assertEqual(items, list(range(20)))
        self.assertEqual(sorted(out1), items)
        self.assertEqual(out1, out2)
        self.assertIsNot(out1, items)

    def test_given_large_or_negative_seed_when_constructed_then_reduced_to_32_bits(self):
        a = SeededRandom(2 ** 32 + 5)
        b = SeededRandom(5)
        self.assertEqual(a.next(), b.next())
        c = SeededRandom(-1)
        d = SeededRandom(0xFFFFFFFF)
        self.assertEqual(c.next(), d.next())


if __name__ == '__main__':
    unittest.main(verbosity=2)

import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pipes_engine.core.grid import SquareGrid
from pipes_engine.core.layout import LayoutInspector


class TestLayoutInspector(unittest.TestCase):
    def test_stats(self):
        grid = SquareGrid(2, 2)
        stats = LayoutInspector.calculate_stats(grid, [6, 8, 3, 8])
        self.assertEqual(stats["tiles"], 4)
        self.assertEqual(stats["dead_ends"], 2)
        self.assertEqual(stats["turns"], 2)
        self.assertEqual(stats["straights"], 0)
        self.assertEqual(stats["branches"], 0)
        self.assertEqual(stats["dead_end_percent"], 50)

    def test_stats_branches(self):
        grid = SquareGrid(3, 3)
        # a plus in the middle with four arms
        tiles = [0, 4, 0, 2, 15, 8, 0, 1, 0]
        stats = LayoutInspector.calculate_stats(grid, tiles)
        self.assertEqual(stats["empty"], 4)
        self.assertEqual(stats["fully_connected"], 1)
        self.assertEqual(stats["branches"], 1)
        self.assertEqual(stats["dead_ends"], 4)

    def test_spanning_tree(self):
        grid = SquareGrid(2, 2)
        self.assertTrue(LayoutInspector.is_spanning_tree(grid, [6, 8, 3, 8]))
        self.assertEqual(LayoutInspector.count_edges(grid, [6, 8, 3, 8]), 3)

    def test_loop_is_not_a_tree(self):
        grid = SquareGrid(2, 2)
        self.assertFalse(LayoutInspector.is_spanning_tree(grid, [6, 12, 3, 9]))
        self.assertEqual(LayoutInspector.count_edges(grid, [6, 12, 3, 9]), 4)

    def test_broken_connections(self):
        grid = SquareGrid(2, 2)
        # connection pointing out of the board
        self.assertFalse(LayoutInspector.is_spanning_tree(grid, [7, 8, 1, 0]))
        # unmatched connection
        self.assertFalse(LayoutInspector.is_spanning_tree(grid, [6, 8, 1, 1]))

    def test_empty_cells_skipped(self):
        grid = SquareGrid(2, 2, tiles=[2, 8, 0, 0])
        self.assertTrue(LayoutInspector.is_spanning_tree(grid, [2, 8, 0, 0]))


if __name__ == '__main__':
    unittest.main()

import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pipes_engine.core.grid import Grid, SquareGrid
from pipes_engine.core.hexagrid import HexaGrid
from pipes_engine.core.octagrid import OctaGrid
from pipes_engine.core.grids import make_grid


class TestSquareGrid(unittest.TestCase):
    def test_rotation(self):
        grid = SquareGrid(3, 3)
        self.assertEqual(grid.rotate(SquareGrid.NORTH, 1), SquareGrid.EAST)
        self.assertEqual(grid.rotate(SquareGrid.WEST, 1), SquareGrid.NORTH)
        self.assertEqual(grid.rotate(3, -1), 9)
        self.assertEqual(grid.rotate(5, 2), 5)

    def test_tile_types(self):
        grid = SquareGrid(3, 3)
        self.assertIsNone(grid.tile_type(0))
        self.assertIsNone(grid.tile_type(-1))
        self.assertTrue(grid.tile_type(1).is_deadend)
        self.assertTrue(grid.tile_type(10).is_straight)
        self.assertFalse(grid.tile_type(3).is_straight)
        self.assertTrue(grid.tile_type(15).is_fully_connected)
        self.assertEqual(grid.tile_type(12).code, 3)
        self.assertEqual(grid.tile_type(7).branches, 3)

    def test_neighbours(self):
        grid = SquareGrid(3, 2)
        self.assertEqual(grid.find_neighbour(0, SquareGrid.EAST), (1, False))
        self.assertEqual(grid.find_neighbour(0, SquareGrid.NORTH), (-1, True))
        self.assertEqual(grid.find_neighbour(0, SquareGrid.SOUTH), (3, False))

        wrapped = SquareGrid(3, 2, wrap=True)
        self.assertEqual(wrapped.find_neighbour(0, SquareGrid.WEST), (2, False))
        self.assertEqual(wrapped.find_neighbour(0, SquareGrid.NORTH), (3, False))

    def test_empty_cells(self):
        grid = SquareGrid(2, 2, tiles=[2, 8, 0, 0])
        self.assertEqual(grid.empty_cells, {2, 3})
        self.assertEqual(grid.find_neighbour(0, SquareGrid.SOUTH), (2, True))
        self.assertEqual(list(grid.get_neighbors(0)), [(1, SquareGrid.EAST)])

    def test_base_grid_is_abstract(self):
        with self.assertRaises(TypeError):
            Grid(2, 2)

    def test_bounds(self):
        grid = SquareGrid(4, 3)
        self.assertEqual(grid.get_index(3, 2), 11)
        with self.assertRaises(IndexError):
            grid.get_index(4, 0)
        with self.assertRaises(ValueError):
            SquareGrid(0, 3)


class TestOtherGrids(unittest.TestCase):
    def test_hexagonal_types(self):
        grid = HexaGrid(4, 4)
        self.assertEqual(grid.tile_type(grid.rotate(HexaGrid.T3Y, 1)).code, HexaGrid.T3Y)
        self.assertTrue(grid.tile_type(HexaGrid.T2I).is_straight)
        self.assertFalse(grid.tile_type(HexaGrid.T2c).is_straight)
        self.assertTrue(grid.tile_type(HexaGrid.T6).is_fully_connected)
        self.assertEqual(grid.rotate(1, 6), 1)

    def test_octagonal_layout(self):
        grid = OctaGrid(3, 3)
        self.assertEqual(grid.total, 18)
        # last row and last column of squares
        self.assertEqual(grid.empty_cells, {17, 16, 15, 14, 11})
        self.assertEqual(grid.fully_connected(9), 170)
        self.assertEqual(grid.fully_connected(0), 255)
        self.assertEqual(grid.find_neighbour(9, 4), (-1, True))
        self.assertEqual(OctaGrid(3, 3, wrap=True).empty_cells, set())

    def test_make_grid(self):
        self.assertIsInstance(make_grid("hexagonal", 3, 3), HexaGrid)
        self.assertTrue(make_grid("square", 3, 3, wrap=True).wrap)
        with self.assertRaises(ValueError):
            make_grid("triangular", 3, 3)

    def test_neighbour_reciprocity(self):
        grids = [
            SquareGrid(4, 3), SquareGrid(4, 3, wrap=True),
            HexaGrid(4, 5), HexaGrid(4, 5, wrap=True),
            OctaGrid(3, 4), OctaGrid(3, 4, wrap=True),
        ]
        for grid in grids:
            for index in range(grid.total):
                if index in grid.empty_cells:
                    continue
                for direction in grid.polygon_at(index).directions:
                    neighbour, empty = grid.find_neighbour(index, direction)
                    if empty:
                        continue
                    self.assertEqual(
                        grid.find_neighbour(neighbour, grid.OPPOSITE[direction]),
                        (index, False),
                        f"{grid.KIND} wrap={grid.wrap} index={index} direction={direction}",
                    )


if __name__ == '__main__':
    unittest.main()

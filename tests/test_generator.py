import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pipes_engine.algo.generator import Generator
from pipes_engine.algo.growing_tree import GrowingTree
from pipes_engine.algo.solver import AMBIGUOUS, Solver
from pipes_engine.core.exceptions import GenerationError
from pipes_engine.core.grid import SquareGrid
from pipes_engine.core.hexagrid import HexaGrid
from pipes_engine.core.octagrid import OctaGrid
from pipes_engine.core.layout import LayoutInspector


class TestGrowingTree(unittest.TestCase):
    def test_spanning_tree(self):
        grids = [
            SquareGrid(7, 5), SquareGrid(6, 6, wrap=True),
            HexaGrid(5, 5), HexaGrid(5, 4, wrap=True),
            OctaGrid(4, 4), OctaGrid(3, 3, wrap=True),
        ]
        for grid in grids:
            for branching in (0, 0.5, 1):
                tiles = GrowingTree(grid, branching, seed=42).run_all()
                self.assertTrue(
                    LayoutInspector.is_spanning_tree(grid, tiles),
                    f"{grid.KIND} wrap={grid.wrap} branching={branching}",
                )

    def test_avoidance_settings(self):
        grid = SquareGrid(6, 6)
        tiles = GrowingTree(grid, 0.5, avoid_obvious=1, avoid_straights=1, seed=3).run_all()
        self.assertTrue(LayoutInspector.is_spanning_tree(grid, tiles))

    def test_run_reports_progress(self):
        grid = SquareGrid(12, 12)
        builder = GrowingTree(grid, 0.5, seed=1)
        messages = list(builder.run())
        self.assertEqual(messages[-1], "Done")
        self.assertEqual(builder.step_count, grid.total - 1)
        self.assertTrue(messages[0].startswith("Growing..."))

    def test_reuses_start_tiles(self):
        grid = SquareGrid(5, 5)
        start = GrowingTree(grid, 0.5, seed=8).run_all()
        tiles = GrowingTree(grid, 0.5, start_tiles=start, seed=9).run_all()
        self.assertEqual(tiles, start)

    def test_regrows_ambiguous_tiles(self):
        grid = SquareGrid(5, 5)
        start = GrowingTree(grid, 0.5, seed=8).run_all()
        start[:5] = [AMBIGUOUS] * 5
        tiles = GrowingTree(grid, 0.5, start_tiles=start, seed=9).run_all()
        self.assertTrue(LayoutInspector.is_spanning_tree(grid, tiles))

    def test_determinism(self):
        grid = HexaGrid(6, 6)
        first = GrowingTree(grid, 0.3, seed=12345).run_all()
        second = GrowingTree(grid, 0.3, seed=12345).run_all()
        self.assertEqual(first, second)


class TestGenerator(unittest.TestCase):
    def test_random_rotate_keeps_shapes(self):
        grid = OctaGrid(3, 3)
        gen = Generator(grid, seed=4)
        tiles = gen.pregenerate_growingtree(0.5)
        rotated = gen.random_rotate(tiles)
        for index, (tile, turned) in enumerate(zip(tiles, rotated)):
            if tile == 0:
                self.assertEqual(turned, 0)
            else:
                self.assertEqual(grid.tile_type(turned, index).code, grid.tile_type(tile, index).code)

    def test_unique(self):
        grid = SquareGrid(4, 4)
        tiles = Generator(grid, seed=3).generate(solutions_number="unique")
        report = Solver(tiles, grid).mark_ambiguous_tiles()
        self.assertTrue(report.unique)
        self.assertTrue(report.solvable)

    def test_unique_wrap(self):
        grid = SquareGrid(4, 4, wrap=True)
        tiles = Generator(grid, seed=5).generate(branching_amount=0.5, solutions_number="unique")
        solver = Solver(tiles, grid)
        for _ in solver.solve(all_solutions=True):
            pass
        self.assertEqual(len(solver.solutions), 1)
        self.assertTrue(LayoutInspector.is_spanning_tree(grid, solver.solutions[0]))

    def test_unique_hexagonal(self):
        grid = HexaGrid(4, 4)
        tiles = Generator(grid, seed=2).generate(avoid_obvious=0.5, solutions_number="unique")
        report = Solver(tiles, grid).mark_ambiguous_tiles()
        self.assertTrue(report.unique and report.solvable)

    def test_seeded_generation(self):
        grid = SquareGrid(5, 5)
        first = Generator(grid, seed=99).generate()
        second = Generator(grid, seed=99).generate()
        self.assertEqual(first, second)

    def test_multiple_impossible(self):
        grid = SquareGrid(2, 1)
        with self.assertRaises(GenerationError):
            Generator(grid, max_attempts=3).generate(solutions_number="multiple")

    def test_all_empty_grid(self):
        grid = SquareGrid(2, 1, tiles=[0, 0])
        self.assertEqual(Generator(grid, seed=1).generate(solutions_number="whatever"), [0, 0])
        self.assertEqual(GrowingTree(grid, 0.5, seed=1).run_all(), [0, 0])

    def test_unique_wrap_large(self):
        grid = SquareGrid(20, 20, wrap=True)
        tiles = Generator(grid, seed=1).generate()
        solver = Solver(tiles, grid)
        for _ in solver.solve(all_solutions=True):
            pass
        self.assertEqual(len(solver.solutions), 1)

    def test_unknown_solutions_number(self):
        with self.assertRaises(ValueError):
            Generator(SquareGrid(3, 3)).generate(solutions_number="some")


if __name__ == '__main__':
    unittest.main()

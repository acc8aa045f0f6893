import unittest
import sys
import os
import shutil

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pipes_engine.core.grid import SquareGrid
from pipes_engine.main import main
from pipes_engine.io.serializer import PuzzleSerializer


class TestCommandLine(unittest.TestCase):
    def setUp(self):
        os.makedirs("test_out", exist_ok=True)

    def tearDown(self):
        shutil.rmtree("test_out", ignore_errors=True)

    def test_generate_check_solve(self):
        puzzle = "test_out/cli.json"
        solved = "test_out/solved.pipes"
        self.assertEqual(main(["generate", "--width", "4", "--height", "4", "--seed", "1", "--out", puzzle]), 0)
        grid, tiles, meta = PuzzleSerializer.load(puzzle)
        self.assertEqual(grid.total, 16)
        self.assertEqual(meta["seed"], 1)

        self.assertEqual(main(["check", puzzle]), 0)
        self.assertEqual(main(["solve", puzzle, "--out", solved, "--record-events", "test_out/solve.bin"]), 0)
        _, solution, _ = PuzzleSerializer.load(solved)
        self.assertEqual(len(solution), 16)
        self.assertTrue(os.path.exists("test_out/solve.bin"))

    def test_unsolvable_puzzle(self):
        puzzle = "test_out/loop.json"
        PuzzleSerializer.save(SquareGrid(2, 2), [6, 6, 6, 6], puzzle)
        self.assertEqual(main(["solve", puzzle]), 1)
        self.assertEqual(main(["check", puzzle]), 1)


if __name__ == '__main__':
    unittest.main()

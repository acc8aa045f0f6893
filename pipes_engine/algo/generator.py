import logging
import random
from typing import List, Optional, Sequence

from pipes_engine.algo.growing_tree import GrowingTree
from pipes_engine.algo.solver import Solver
from pipes_engine.core.exceptions import GenerationError
from pipes_engine.core.grid import Grid

logger = logging.getLogger(__name__)

SOLUTIONS_NUMBERS = ("unique", "multiple", "whatever")


class Generator:
    """
    Puzzle generator.

    Pregenerates a spanning tree layout and, when a unique solution is
    required, keeps regenerating the ambiguous parts until the solver
    certifies uniqueness.

    reuse_tiles_min_count: smallest region of connected non-ambiguous tiles
        worth keeping when erasing ambiguities.
    uniqueness_patience: abandon an attempt if the count of ambiguous tiles
        did not decrease in this many iterations.
    """

    def __init__(
        self,
        grid: Grid,
        reuse_tiles_min_count: int = 3,
        uniqueness_patience: int = 5,
        max_uniqueness_iterations: int = 100,
        max_attempts: int = 100,
        seed: Optional[int] = None,
        event_writer=None,
    ):
        self.grid = grid
        self.reuse_tiles_min_count = reuse_tiles_min_count
        self.uniqueness_patience = uniqueness_patience
        self.max_uniqueness_iterations = max_uniqueness_iterations
        self.max_attempts = max_attempts
        self.seed = seed
        self.rng = random.Random(seed)
        self.event_writer = event_writer

    def pregenerate_growingtree(
        self,
        branching_amount: float,
        avoid_obvious: float = 0.0,
        avoid_straights: float = 0.0,
        start_tiles: Optional[Sequence[int]] = None,
    ) -> List[int]:
        """
        Fills the grid with tiles using the Growing Tree algorithm.
        Returns the unrandomized tiles array.
        """
        builder = GrowingTree(
            self.grid,
            branching_amount,
            avoid_obvious=avoid_obvious,
            avoid_straights=avoid_straights,
            start_tiles=start_tiles,
            reuse_tiles_min_count=self.reuse_tiles_min_count,
            rng=self.rng,
            event_writer=self.event_writer,
        )
        return builder.run_all()

    def random_rotate(self, tiles: Sequence[int]) -> List[int]:
        rotated = []
        for index, tile in enumerate(tiles):
            if tile == 0:
                rotated.append(0)
                continue
            polygon = self.grid.polygon_at(index)
            rotated.append(polygon.rotate(tile, self.rng.randrange(polygon.num_directions)))
        return rotated

    def generate(
        self,
        branching_amount: float = 0.6,
        avoid_obvious: float = 0.0,
        avoid_straights: float = 0.0,
        solutions_number: str = "unique",
    ) -> List[int]:
        """
        Generates a puzzle.
        solutions_number: 'unique', 'multiple' or 'whatever' to skip the check.
        Returns randomly rotated tiles.
        """
        if solutions_number == "unique":
            return self._generate_unique(branching_amount, avoid_obvious, avoid_straights)
        elif solutions_number == "whatever":
            tiles = self.pregenerate_growingtree(branching_amount, avoid_obvious, avoid_straights)
            return self.random_rotate(tiles)
        elif solutions_number == "multiple":
            for attempt in range(1, self.max_attempts + 1):
                tiles = self.pregenerate_growingtree(branching_amount, avoid_obvious, avoid_straights)
                report = Solver(tiles, self.grid).mark_ambiguous_tiles()
                if not report.unique:
                    logger.info(f"Generated puzzle with multiple solutions on attempt {attempt}")
                    return self.random_rotate(tiles)
            raise GenerationError(
                f"Could not generate a puzzle with multiple solutions in {self.max_attempts} attempts. Maybe try again."
            )
        raise ValueError(f"Unknown setting for solutions_number: {solutions_number!r}, expected one of {SOLUTIONS_NUMBERS}")

    def _generate_unique(self, branching_amount: float, avoid_obvious: float, avoid_straights: float) -> List[int]:
        for attempt in range(1, self.max_attempts + 1):
            start_tiles = None
            tiles = self.pregenerate_growingtree(branching_amount, avoid_obvious, avoid_straights)
            patience_left = self.uniqueness_patience
            ambiguous = self.grid.total
            for iteration in range(1, self.max_uniqueness_iterations + 1):
                report = Solver(tiles, self.grid).mark_ambiguous_tiles()
                if report.unique and report.solvable:
                    logger.info(
                        f"Generated unique {self.grid.width}x{self.grid.height} puzzle "
                        f"(attempt {attempt}, iteration {iteration})"
                    )
                    return self.random_rotate(report.marked)
                num_ambiguous = report.num_ambiguous
                if num_ambiguous >= ambiguous:
                    patience_left -= 1
                else:
                    ambiguous = num_ambiguous
                    patience_left = self.uniqueness_patience
                    start_tiles = report.marked
                logger.debug(
                    f"attempt={attempt} iteration={iteration} ambiguous={num_ambiguous} patience={patience_left}"
                )
                if patience_left == 0:
                    logger.warning(f"Attempt {attempt} stopped improving at {ambiguous} ambiguous tiles, restarting")
                    break
                tiles = self.pregenerate_growingtree(branching_amount, avoid_obvious, avoid_straights, start_tiles)
        raise GenerationError("Could not generate a puzzle with a unique solution. Maybe try again.")

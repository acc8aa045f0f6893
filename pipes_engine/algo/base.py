import random
from abc import ABC, abstractmethod
from typing import Iterator, List, Optional
from pipes_engine.core.grid import Grid

class LayoutBuilder(ABC):
    def __init__(self, grid: Grid, seed: Optional[int] = None, rng: Optional[random.Random] = None, event_writer=None):
        self.grid = grid
        self.seed = seed
        self.rng = rng if rng is not None else random.Random(seed)
        self.event_writer = event_writer
        self.step_count = 0
        self.tiles: List[int] = [0] * grid.total

    @abstractmethod
    def run(self) -> Iterator[str]:
        """
        Yields status strings or progress updates.
        The finished layout is left in self.tiles.
        """
        pass

    def run_all(self) -> List[int]:
        """Helper to run the builder to completion."""
        for _ in self.run():
            pass
        return self.tiles

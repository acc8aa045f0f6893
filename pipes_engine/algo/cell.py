import copy
from typing import Set, Tuple

from pipes_engine.core.exceptions import NoOrientationsPossible
from pipes_engine.core.grid import Grid

# initial value of a tile that can take any shape
UNKNOWN = -1


class Cell:
    """
    Constraint state of one tile: the orientations it may still take plus
    the walls and connections proven so far.
    """

    __slots__ = ('grid', 'index', 'initial', 'possible', 'walls', 'connections')

    def __init__(self, grid: Grid, index: int, initial: int):
        self.grid = grid
        self.index = index
        self.initial = initial

        self.possible: Set[int] = set()
        if initial >= 0:
            rotated = initial
            while rotated not in self.possible:
                self.possible.add(rotated)
                rotated = grid.rotate(rotated, 1, index)
        else:
            full = grid.fully_connected(index)
            self.possible = {shape for shape in range(1, full) if shape & full == shape}
        self.walls = 0
        self.connections = 0

    def add_wall(self, directions: int):
        self.walls |= directions & ~(self.connections | self.walls)

    def add_connection(self, directions: int):
        self.connections |= directions & ~(self.connections | self.walls)

    def must_have_all_walls(self, directions: int):
        """Removes orientations if they don't have all the mentioned walls"""
        self.possible = {o for o in self.possible if not o & directions}

    def must_have_some_walls(self, directions: int):
        """Removes orientations if they don't have at least one of the mentioned walls"""
        self.possible = {o for o in self.possible if o & directions != o}

    def must_have_all_connections(self, directions: int):
        """Removes orientations if they don't have all the mentioned connections"""
        self.possible = {o for o in self.possible if o & directions == directions}

    def apply_constraints(self) -> Tuple[int, int]:
        """
        Filters out orientations that contradict known walls and connections,
        then records the walls and connections shared by every remaining one.
        Returns (added_walls, added_connections), the bits learned by this call.
        """
        walls, connections = self.walls, self.connections
        self.possible = {
            o for o in self.possible
            if not o & walls and o & connections == connections
        }
        if not self.possible:
            raise NoOrientationsPossible(self)

        full = self.grid.fully_connected(self.index)
        new_walls = full
        new_connections = full
        for orientation in self.possible:
            new_walls &= full & ~orientation
            new_connections &= orientation
        added_walls = new_walls & ~walls
        added_connections = new_connections & ~connections
        self.walls = new_walls
        self.connections = new_connections
        return added_walls, added_connections

    def clone(self) -> 'Cell':
        clone = copy.copy(self)
        clone.possible = set(self.possible)
        return clone

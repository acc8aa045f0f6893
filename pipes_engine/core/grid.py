from abc import ABC, abstractmethod
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from pipes_engine.core.polygon import RegularPolygonTile, TileType


class Grid(ABC):
    """
    Topology shared by the solver and the generator.
    Cells are addressed by a flat index in [0, total). A tile is a bitmask of
    DIRECTIONS; a 0 tile marks an empty cell.
    """

    DIRECTIONS: List[int] = []
    OPPOSITE: Dict[int, int] = {}
    KIND = ""

    __slots__ = ('width', 'height', 'wrap', 'total', 'empty_cells')

    def __init__(self, width: int, height: int, wrap: bool = False, tiles: Optional[Sequence[int]] = None):
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.wrap = wrap
        self.total = width * height
        self.empty_cells = set()
        if tiles:
            self.empty_cells = {index for index, tile in enumerate(tiles) if tile == 0}

    @abstractmethod
    def polygon_at(self, index: int) -> RegularPolygonTile:
        pass

    @abstractmethod
    def find_neighbour(self, index: int, direction: int) -> Tuple[int, bool]:
        """
        Returns (neighbour index, is empty or outside the board).
        Neighbour index is -1 outside a non-wrapping board.
        """
        pass

    def rotate(self, tile: int, rotations: int, index: int = 0) -> int:
        return self.polygon_at(index).rotate(tile, rotations)

    def fully_connected(self, index: int) -> int:
        return self.polygon_at(index).fully_connected

    def tile_type(self, tile: int, index: int = 0) -> Optional[TileType]:
        if tile <= 0:
            return None
        return self.polygon_at(index).tile_types.get(tile)

    def get_directions(self, tile: int, index: int = 0) -> List[int]:
        return self.polygon_at(index).get_directions(tile)

    def get_neighbors(self, index: int) -> Iterator[Tuple[int, int]]:
        """(neighbour, direction) pairs in polygon order, skipping empty and outside cells."""
        for direction in self.polygon_at(index).directions:
            neighbour, empty = self.find_neighbour(index, direction)
            if not empty:
                yield neighbour, direction

    def extra_deductions(self, cell, tile_type: Optional[TileType], neighbour_types: Iterable[Optional[TileType]]):
        """Grid specific orientation pruning, neighbour_types follow DIRECTIONS order."""
        pass


class SquareGrid(Grid):
    # Bitmask Constants
    NORTH = 0b0001
    EAST  = 0b0010
    SOUTH = 0b0100
    WEST  = 0b1000

    # Clockwise, a single rotation turns NORTH into EAST
    DIRECTIONS = [NORTH, EAST, SOUTH, WEST]
    DX = {NORTH: 0, SOUTH: 0, EAST: 1, WEST: -1}
    DY = {NORTH: -1, SOUTH: 1, EAST: 0, WEST: 0}
    OPPOSITE = {NORTH: SOUTH, SOUTH: NORTH, EAST: WEST, WEST: EAST}
    KIND = "square"

    POLYGON = RegularPolygonTile(DIRECTIONS)

    __slots__ = ()

    def polygon_at(self, index: int) -> RegularPolygonTile:
        return self.POLYGON

    def get_index(self, x: int, y: int) -> int:
        if 0 <= x < self.width and 0 <= y < self.height:
            return y * self.width + x
        raise IndexError(f"Coordinate ({x}, {y}) out of bounds")

    def find_neighbour(self, index: int, direction: int) -> Tuple[int, bool]:
        x = index % self.width + self.DX[direction]
        y = index // self.width + self.DY[direction]
        if self.wrap:
            x %= self.width
            y %= self.height
        elif not (0 <= x < self.width and 0 <= y < self.height):
            return -1, True
        neighbour = y * self.width + x
        return neighbour, neighbour in self.empty_cells

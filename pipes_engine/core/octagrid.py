from typing import Optional, Sequence, Tuple

from pipes_engine.core.grid import Grid
from pipes_engine.core.polygon import RegularPolygonTile

EAST = 1
NORTHEAST = 2
NORTH = 4
NORTHWEST = 8
WEST = 16
SOUTHWEST = 32
SOUTH = 64
SOUTHEAST = 128


class OctaGrid(Grid):
    """
    Octagons with small squares in the gaps between them.
    Indices [0, w*h) are octagons, [w*h, 2*w*h) are squares. Square (r, c)
    touches octagons (r, c), (r, c+1), (r+1, c) and (r+1, c+1) through its
    diagonal directions only.
    """

    DIRECTIONS = [EAST, NORTHEAST, NORTH, NORTHWEST, WEST, SOUTHWEST, SOUTH, SOUTHEAST]
    OPPOSITE = {
        NORTH: SOUTH,
        SOUTH: NORTH,
        EAST: WEST,
        WEST: EAST,
        NORTHEAST: SOUTHWEST,
        SOUTHWEST: NORTHEAST,
        NORTHWEST: SOUTHEAST,
        SOUTHEAST: NORTHWEST,
    }
    # (dc, dr) between octagons
    OCTAGON_DELTAS = {EAST: (1, 0), NORTH: (0, -1), WEST: (-1, 0), SOUTH: (0, 1)}
    # (dc, dr) from an octagon to a square, in square coordinates
    OCTAGON_TO_SQUARE = {NORTHEAST: (0, -1), NORTHWEST: (-1, -1), SOUTHWEST: (-1, 0), SOUTHEAST: (0, 0)}
    # (dc, dr) from a square to an octagon, in octagon coordinates
    SQUARE_TO_OCTAGON = {NORTHEAST: (1, 0), NORTHWEST: (0, 0), SOUTHWEST: (0, 1), SOUTHEAST: (1, 1)}
    KIND = "octagonal"

    OCTAGON = RegularPolygonTile(DIRECTIONS)
    SQUARE = RegularPolygonTile([NORTHEAST, NORTHWEST, SOUTHWEST, SOUTHEAST])

    __slots__ = ()

    def __init__(self, width: int, height: int, wrap: bool = False, tiles: Optional[Sequence[int]] = None):
        super().__init__(width, height, wrap, tiles)
        self.total = 2 * width * height
        if not tiles and not wrap:
            # squares past the last row and column have nothing to connect to
            n = self.total
            for w in range(1, width + 1):
                self.empty_cells.add(n - w)
            for h in range(1, height):
                self.empty_cells.add(n - 1 - width * h)

    def is_square(self, index: int) -> bool:
        return index >= self.width * self.height

    def polygon_at(self, index: int) -> RegularPolygonTile:
        return self.SQUARE if self.is_square(index) else self.OCTAGON

    def find_neighbour(self, index: int, direction: int) -> Tuple[int, bool]:
        offset = self.width * self.height
        if self.is_square(index):
            if direction not in self.SQUARE_TO_OCTAGON:
                return -1, True
            dc, dr = self.SQUARE_TO_OCTAGON[direction]
            target_offset = 0
            index -= offset
        elif direction in self.OCTAGON_DELTAS:
            dc, dr = self.OCTAGON_DELTAS[direction]
            target_offset = 0
        else:
            dc, dr = self.OCTAGON_TO_SQUARE[direction]
            target_offset = offset

        c = index % self.width + dc
        r = index // self.width + dr
        if self.wrap:
            c %= self.width
            r %= self.height
        elif not (0 <= c < self.width and 0 <= r < self.height):
            return -1, True
        neighbour = r * self.width + c + target_offset
        return neighbour, neighbour in self.empty_cells

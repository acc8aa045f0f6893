from typing import List, Optional, Tuple

from pipes_engine.core.grid import Grid
from pipes_engine.core.polygon import RegularPolygonTile, TileType

EAST = 1
NORTHEAST = 2
NORTHWEST = 4
WEST = 8
SOUTHWEST = 16
SOUTHEAST = 32


class HexaGrid(Grid):
    """
    Hexagonal grid in axial coordinates, index = r * width + q.
    Rows are skewed so the board is a rhombus; with wrap it is a torus that
    is consistent for any width and height.
    """

    DIRECTIONS = [EAST, NORTHEAST, NORTHWEST, WEST, SOUTHWEST, SOUTHEAST]
    OPPOSITE = {
        EAST: WEST,
        WEST: EAST,
        NORTHEAST: SOUTHWEST,
        SOUTHWEST: NORTHEAST,
        NORTHWEST: SOUTHEAST,
        SOUTHEAST: NORTHWEST,
    }
    # (dq, dr)
    DELTAS = {
        EAST: (1, 0),
        NORTHEAST: (1, -1),
        NORTHWEST: (0, -1),
        WEST: (-1, 0),
        SOUTHWEST: (-1, 1),
        SOUTHEAST: (0, 1),
    }
    KIND = "hexagonal"

    # Tile types, named after the letter the pipes look like
    T0 = 0
    T1 = 1
    T2v = 3
    T2c = 5
    T2I = 9
    T3w = 7
    T3y = 11
    T3la = 13
    T3Y = 21
    T4K = 15
    T4psi = 23
    T4X = 27
    T5 = 31
    T6 = 63

    POLYGON = RegularPolygonTile(DIRECTIONS)

    # three adjacent prongs
    FAN_TILES = (T4K, T3w, T5, T4psi)
    # every prong has a neighbouring prong
    SHARP_TILES = (T4K, T2v, T3w, T5, T4X)
    # no two adjacent walls
    PSI_LIKE_TILES = (T4psi, T4X, T5, T3Y)
    # can't have two prongs 60 degrees apart
    NARROW_TILES = (T1, T2c, T2I)

    __slots__ = ()

    def polygon_at(self, index: int) -> RegularPolygonTile:
        return self.POLYGON

    def get_index(self, q: int, r: int) -> int:
        if 0 <= q < self.width and 0 <= r < self.height:
            return r * self.width + q
        raise IndexError(f"Coordinate ({q}, {r}) out of bounds")

    def find_neighbour(self, index: int, direction: int) -> Tuple[int, bool]:
        dq, dr = self.DELTAS[direction]
        q = index % self.width + dq
        r = index // self.width + dr
        if self.wrap:
            q %= self.width
            r %= self.height
        elif not (0 <= q < self.width and 0 <= r < self.height):
            return -1, True
        neighbour = r * self.width + q
        return neighbour, neighbour in self.empty_cells

    def extra_deductions(self, cell, tile_type: Optional[TileType], neighbour_types: List[Optional[TileType]]):
        code = tile_type.code if tile_type is not None else None
        codes = [t.code if t is not None else None for t in neighbour_types]
        n = len(self.DIRECTIONS)

        # can't connect the middle prong of a fan to a sharp turns tile,
        # the side prongs would close a triangle
        if code in self.FAN_TILES:
            for i, neighbour_code in enumerate(codes):
                if neighbour_code in self.SHARP_TILES:
                    direction = self.DIRECTIONS[i]
                    forbidden = direction | self.rotate(direction, 1) | self.rotate(direction, -1)
                    cell.must_have_some_walls(forbidden)

        # adjacent psi-likes must be connected
        if code in self.PSI_LIKE_TILES:
            for i, neighbour_code in enumerate(codes):
                if neighbour_code in self.PSI_LIKE_TILES:
                    cell.must_have_all_connections(self.DIRECTIONS[i])

        # when not connected to a psi-like neighbour, don't connect to a
        # shared neighbour that can't take both the psi and us
        if code not in self.PSI_LIKE_TILES:
            for i, neighbour_code in enumerate(codes):
                if neighbour_code not in self.PSI_LIKE_TILES:
                    continue
                direction = self.DIRECTIONS[i]
                forbidden = 0
                if codes[(i + 1) % n] in self.NARROW_TILES:
                    forbidden |= self.DIRECTIONS[(i + 1) % n]
                if codes[(i + n - 1) % n] in self.NARROW_TILES:
                    forbidden |= self.DIRECTIONS[(i + n - 1) % n]
                if forbidden == 0:
                    continue
                cell.possible = {
                    orientation for orientation in cell.possible
                    if not (orientation & forbidden and not orientation & direction)
                }

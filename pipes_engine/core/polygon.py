from dataclasses import dataclass
from typing import Dict, List, Sequence


@dataclass(frozen=True)
class TileType:
    """Rotation-invariant description of a tile shape."""

    code: int  # smallest shape in the rotation orbit
    branches: int
    is_deadend: bool
    is_straight: bool
    is_fully_connected: bool


class RegularPolygonTile:
    """
    Tile geometry of one cell shape.
    'directions' must be listed in cyclic order: rotating a tile by one step
    moves every bit to the next direction in the list.
    """

    def __init__(self, directions: Sequence[int]):
        self.directions: List[int] = list(directions)
        self.num_directions = len(self.directions)
        self.fully_connected = 0
        for direction in self.directions:
            self.fully_connected |= direction
        self._positions = {d: i for i, d in enumerate(self.directions)}
        self.tile_types: Dict[int, TileType] = self._classify()

    def rotate(self, tile: int, rotations: int) -> int:
        n = self.num_directions
        rotations %= n
        if rotations == 0:
            return tile & self.fully_connected
        rotated = 0
        for i, direction in enumerate(self.directions):
            if tile & direction:
                rotated |= self.directions[(i + rotations) % n]
        return rotated

    def get_directions(self, tile: int) -> List[int]:
        return [d for d in self.directions if d & tile]

    def _classify(self) -> Dict[int, TileType]:
        types: Dict[int, TileType] = {}
        half = self.num_directions // 2
        for shape in range(self.fully_connected + 1):
            if shape & self.fully_connected != shape or shape in types:
                continue
            orbit = []
            rotated = shape
            while rotated not in orbit:
                orbit.append(rotated)
                rotated = self.rotate(rotated, 1)

            present = self.get_directions(shape)
            straight = (
                len(present) == 2
                and self.num_directions % 2 == 0
                and abs(self._positions[present[0]] - self._positions[present[1]]) == half
            )
            tile_type = TileType(
                code=min(orbit),
                branches=len(present),
                is_deadend=len(present) == 1,
                is_straight=straight,
                is_fully_connected=shape == self.fully_connected,
            )
            for member in orbit:
                types[member] = tile_type
        return types

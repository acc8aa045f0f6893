from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from pipes_engine.algo.base import LayoutBuilder
from pipes_engine.algo.cell import UNKNOWN, Cell
from pipes_engine.core.exceptions import GenerationError, NoOrientationsPossible
from pipes_engine.core.polygon import RegularPolygonTile


class GrowingTree(LayoutBuilder):
    """
    Fills the grid with a spanning tree of connections.

    At branching_amount = 0 it's like recursive backtracking (long corridors),
    at branching_amount = 1 it's like Prim's algorithm (lots of branching),
    intermediate values give some mix of these methods.
    """

    def __init__(
        self,
        grid,
        branching_amount: float,
        avoid_obvious: float = 0.0,
        avoid_straights: float = 0.0,
        start_tiles: Optional[Sequence[int]] = None,
        reuse_tiles_min_count: int = 3,
        **kwargs,
    ):
        super().__init__(grid, **kwargs)
        self.branching_amount = branching_amount
        self.avoid_obvious = avoid_obvious
        self.avoid_straights = avoid_straights
        self.start_tiles = start_tiles
        self.reuse_tiles_min_count = reuse_tiles_min_count

    def run(self) -> Iterator[str]:
        grid = self.grid
        rng = self.rng

        unvisited: Set[int] = set(range(grid.total)) - grid.empty_cells
        tiles = [0] * grid.total
        self.tiles = tiles
        # the growing tree, used as a stack or as a random pool
        visited: List[int] = []
        # visited tiles that will become obvious if used again
        avoiding: List[int] = []
        # visited tiles that will become fully connected if used again
        last_resort: List[int] = []
        # reused regions that are absorbed as a whole when reached
        start_components: Dict[int, Set[int]] = {}

        if self.start_tiles and len(self.start_tiles) == grid.total:
            self._reuse_regions(unvisited, visited, start_components)

        forbidden = self._obvious_orientations(unvisited) if self.avoid_obvious > 0 else {}

        if not visited and unvisited:
            start = rng.choice(sorted(unvisited))
            visited.append(start)
            unvisited.discard(start)
            self._log_visit(start)

        while unvisited:
            use_prims = rng.random() < self.branching_amount
            nodes = next((n for n in (visited, avoiding, last_resort) if n), None)
            if nodes is None:
                raise GenerationError(f"{len(unvisited)} tiles can't be reached from the rest of the grid")
            # go from a random element or from the last one
            from_node = rng.choice(nodes) if use_prims else nodes[-1]

            # tiers of possible moves, best first
            unvisited_moves = []
            straight_moves = []       # results in a straight tile, might want to avoid
            obvious_moves = []        # avoided with avoid_obvious setting
            fully_connected_moves = []  # a total last resort
            connections = tiles[from_node]
            polygon = grid.polygon_at(from_node)
            for neighbour, direction in grid.get_neighbors(from_node):
                if direction & connections or neighbour not in unvisited:
                    continue
                move = (neighbour, direction)
                shape = connections | direction
                tile_type = polygon.tile_types[shape]
                if tile_type.is_fully_connected or (
                    tiles[neighbour] > 0
                    and grid.tile_type(tiles[neighbour] | grid.OPPOSITE[direction], neighbour).is_fully_connected
                ):
                    fully_connected_moves.append(move)
                    continue
                if from_node in forbidden and rng.random() < self.avoid_obvious:
                    if shape in forbidden[from_node]:
                        obvious_moves.append(move)
                        continue
                if tile_type.is_straight and rng.random() < self.avoid_straights:
                    straight_moves.append(move)
                    continue
                unvisited_moves.append(move)

            source = next(
                (m for m in (unvisited_moves, straight_moves, obvious_moves, fully_connected_moves) if m),
                None,
            )
            if source is None:
                # all neighbours are already visited
                if use_prims:
                    nodes.remove(from_node)
                else:
                    nodes.pop()
                continue
            if source is fully_connected_moves and visited:
                visited.remove(from_node)
                last_resort.append(from_node)
                continue
            if source is obvious_moves and visited:
                visited.remove(from_node)
                avoiding.append(from_node)
                continue

            neighbour, direction = rng.choice(source)
            tiles[from_node] |= direction
            self._log_carve(from_node, direction)
            if tiles[neighbour] > 0:
                # connected to a reused region, visit it all
                component = start_components.get(neighbour, set())
                component.discard(neighbour)
                for i in component:
                    unvisited.discard(i)
                    visited.append(i)
                    self._log_visit(i)
            tiles[neighbour] |= grid.OPPOSITE[direction]
            unvisited.discard(neighbour)
            visited.append(neighbour)
            self._log_visit(neighbour)

            self.step_count += 1
            if self.step_count % 100 == 0:
                yield f"Growing... Unvisited: {len(unvisited)}"

        yield "Done"

    def _reuse_regions(self, unvisited: Set[int], visited: List[int], start_components: Dict[int, Set[int]]):
        """
        Keeps the non-ambiguous parts of start_tiles. The largest connected
        region becomes the initial tree, smaller ones are reused when reached.
        """
        grid = self.grid
        start_tiles = self.start_tiles
        to_check = set(unvisited)
        regions: List[Set[int]] = []
        while to_check:
            index = min(to_check)
            to_check.discard(index)
            if start_tiles[index] < 0:
                # ambiguous tile, ignore it
                continue
            to_visit = {index}
            region: Set[int] = set()
            while to_visit:
                i = to_visit.pop()
                to_check.discard(i)
                region.add(i)
                for direction in grid.get_directions(start_tiles[i], i):
                    neighbour, empty = grid.find_neighbour(i, direction)
                    if empty or start_tiles[neighbour] < 0 or neighbour in region:
                        continue
                    to_visit.add(neighbour)
            regions.append(region)
        regions.sort(key=len, reverse=True)
        if not regions:
            return

        largest = regions[0]
        for index in sorted(largest):
            self._copy_region_tile(index, largest)
            visited.append(index)
            unvisited.discard(index)
            self._log_visit(index)
        for region in regions[1:]:
            if len(region) < self.reuse_tiles_min_count:
                break
            for index in region:
                start_components[index] = region
                self._copy_region_tile(index, region)

    def _copy_region_tile(self, index: int, region: Set[int]):
        for direction in self.grid.get_directions(self.start_tiles[index], index):
            neighbour, _ = self.grid.find_neighbour(index, direction)
            if neighbour in region:
                self.tiles[index] |= direction

    def _obvious_orientations(self, unvisited: Set[int]) -> Dict[int, Set[int]]:
        """
        Tile index => orientations that could be inferred from the border
        walls alone. Computed once per polygon and wall pattern.
        """
        grid = self.grid
        by_pattern: Dict[Tuple[RegularPolygonTile, int], Set[int]] = {}
        forbidden: Dict[int, Set[int]] = {}
        for index in unvisited:
            polygon = grid.polygon_at(index)
            walls = 0
            for direction in polygon.directions:
                _, empty = grid.find_neighbour(index, direction)
                if empty:
                    walls |= direction
            if walls == 0:
                continue
            key = (polygon, walls)
            if key not in by_pattern:
                by_pattern[key] = self._revealed_orientations(index, walls)
            if by_pattern[key]:
                forbidden[index] = by_pattern[key]
        return forbidden

    def _revealed_orientations(self, index: int, walls: int) -> Set[int]:
        cell = Cell(self.grid, index, UNKNOWN)
        cell.add_wall(walls)
        try:
            cell.apply_constraints()
        except NoOrientationsPossible:
            return set()
        by_type: Dict[int, Set[int]] = {}
        for orientation in cell.possible:
            code = self.grid.tile_type(orientation, index).code
            by_type.setdefault(code, set()).add(orientation)
        return {next(iter(o)) for o in by_type.values() if len(o) == 1}

    def _log_visit(self, index: int):
        if self.event_writer:
            self.event_writer.log_visit(index)

    def _log_carve(self, index: int, direction: int):
        if self.event_writer:
            self.event_writer.log_carve(index, direction)

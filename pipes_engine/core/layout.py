from collections import deque
from typing import Dict, Sequence

from pipes_engine.core.grid import Grid


class LayoutInspector:
    @staticmethod
    def count_edges(grid: Grid, tiles: Sequence[int]) -> int:
        """Counts connections matched from both sides."""
        edges = 0
        for index, tile in enumerate(tiles):
            for direction in grid.get_directions(tile, index):
                neighbour, empty = grid.find_neighbour(index, direction)
                if not empty and tiles[neighbour] & grid.OPPOSITE[direction]:
                    edges += 1
        return edges // 2

    @staticmethod
    def is_spanning_tree(grid: Grid, tiles: Sequence[int]) -> bool:
        """
        True if every connection is matched by the neighbour, no connection
        leads out of the board, and the non-empty tiles form a single tree.
        """
        nodes = [i for i in range(grid.total) if i not in grid.empty_cells]
        if not nodes:
            return True
        for index in nodes:
            if tiles[index] == 0 and len(nodes) > 1:
                return False
            for direction in grid.get_directions(tiles[index], index):
                neighbour, empty = grid.find_neighbour(index, direction)
                if empty or not tiles[neighbour] & grid.OPPOSITE[direction]:
                    return False

        # Connectivity check (BFS over connections)
        seen = {nodes[0]}
        queue = deque([nodes[0]])
        while queue:
            index = queue.popleft()
            for direction in grid.get_directions(tiles[index], index):
                neighbour, _ = grid.find_neighbour(index, direction)
                if neighbour not in seen:
                    seen.add(neighbour)
                    queue.append(neighbour)
        if len(seen) != len(nodes):
            return False
        return LayoutInspector.count_edges(grid, tiles) == len(nodes) - 1

    @staticmethod
    def calculate_stats(grid: Grid, tiles: Sequence[int]) -> Dict[str, float]:
        empty = 0
        dead_ends = 0
        straights = 0
        turns = 0
        branches = 0  # 3+ connections
        fully_connected = 0

        for index, tile in enumerate(tiles):
            tile_type = grid.tile_type(tile, index)
            if tile_type is None:
                empty += 1
                continue
            if tile_type.is_fully_connected:
                fully_connected += 1
            if tile_type.is_deadend:
                dead_ends += 1
            elif tile_type.is_straight:
                straights += 1
            elif tile_type.branches == 2:
                turns += 1
            elif tile_type.branches >= 3:
                branches += 1

        total = grid.total - empty
        return {
            "tiles": total,
            "empty": empty,
            "dead_ends": dead_ends,
            "straights": straights,
            "turns": turns,
            "branches": branches,
            "fully_connected": fully_connected,
            "dead_end_percent": (dead_ends / total) * 100 if total > 0 else 0,
        }

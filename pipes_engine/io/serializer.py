import struct
import json
import zlib
from typing import Optional, Dict, Any, List, Sequence, Tuple
from array import array
from pipes_engine.core.grid import Grid
from pipes_engine.core.grids import GRID_KINDS, make_grid

KIND_CODES = {"square": 0, "hexagonal": 1, "octagonal": 2}
KIND_NAMES = {code: kind for kind, code in KIND_CODES.items()}


class PuzzleSerializer:
    MAGIC = b"PIPE"
    VERSION = 1

    # Flags
    FLAG_COMPRESSED = 1
    FLAG_WRAP = 2

    @staticmethod
    def _check_tiles(grid: Grid, tiles: Sequence[int]):
        if len(tiles) != grid.total:
            raise ValueError(f"Expected {grid.total} tiles, got {len(tiles)}")
        for tile in tiles:
            if not 0 <= tile <= 255:
                raise ValueError(f"Tile {tile} can't be stored, puzzles only hold tiles in 0..255")

    @staticmethod
    def save(grid: Grid, tiles: Sequence[int], filepath: str, meta: Dict[str, Any] = None, compress=False):
        """
        Saves the puzzle to a file. Paths ending in .json get the JSON
        instance layout, anything else the binary format:
        - MAGIC (4 bytes)
        - VERSION (1 byte)
        - FLAGS (1 byte)
        - KIND (1 byte)
        - WIDTH, HEIGHT (4 bytes each)
        - META_LEN (2 bytes)
        - META_JSON (META_LEN bytes)
        - DATA_LEN (4 bytes)
        - DATA (one byte per tile, compressed or raw)
        """
        if meta is None:
            meta = {}
        PuzzleSerializer._check_tiles(grid, tiles)

        if filepath.endswith(".json"):
            instance = {
                "kind": grid.KIND,
                "width": grid.width,
                "height": grid.height,
                "wrap": grid.wrap,
                "tiles": list(tiles),
            }
            if meta:
                instance["meta"] = meta
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(instance, f)
            return

        flags = 0
        if compress:
            flags |= PuzzleSerializer.FLAG_COMPRESSED
        if grid.wrap:
            flags |= PuzzleSerializer.FLAG_WRAP

        meta_bytes = json.dumps(meta).encode('utf-8')

        with open(filepath, "wb") as f:
            f.write(PuzzleSerializer.MAGIC)
            f.write(struct.pack("BBB", PuzzleSerializer.VERSION, flags, KIND_CODES[grid.KIND]))
            f.write(struct.pack("II", grid.width, grid.height))
            f.write(struct.pack("H", len(meta_bytes)))
            f.write(meta_bytes)

            data = array('B', tiles).tobytes()
            if compress:
                data = zlib.compress(data)
            f.write(struct.pack("I", len(data)))
            f.write(data)

    @staticmethod
    def load(filepath: str) -> Tuple[Grid, List[int], Dict[str, Any]]:
        if filepath.endswith(".json"):
            with open(filepath, "r", encoding="utf-8") as f:
                instance = json.load(f)
            kind = instance.get("kind", "square")
            if kind not in GRID_KINDS:
                raise ValueError(f"Unknown grid kind '{kind}'")
            tiles = [int(tile) for tile in instance["tiles"]]
            grid = make_grid(kind, instance["width"], instance["height"], instance.get("wrap", False), tiles)
            PuzzleSerializer._check_tiles(grid, tiles)
            return grid, tiles, instance.get("meta", {})

        with open(filepath, "rb") as f:
            magic = f.read(4)
            if magic != PuzzleSerializer.MAGIC:
                raise ValueError("Invalid file format")

            version, flags, kind_code = struct.unpack("BBB", f.read(3))
            if version != PuzzleSerializer.VERSION:
                raise ValueError(f"Unsupported puzzle file version {version}")
            if kind_code not in KIND_NAMES:
                raise ValueError(f"Unknown grid kind code {kind_code}")
            width, height = struct.unpack("II", f.read(8))
            meta_len = struct.unpack("H", f.read(2))[0]
            meta = json.loads(f.read(meta_len).decode('utf-8'))

            data_len = struct.unpack("I", f.read(4))[0]
            data = f.read(data_len)
            if flags & PuzzleSerializer.FLAG_COMPRESSED:
                data = zlib.decompress(data)

            tiles = list(array('B', data))
            grid = make_grid(KIND_NAMES[kind_code], width, height, bool(flags & PuzzleSerializer.FLAG_WRAP), tiles)
            if len(tiles) != grid.total:
                raise ValueError(f"Expected {grid.total} tiles, got {len(tiles)}")
            return grid, tiles, meta

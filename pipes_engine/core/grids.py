from typing import Dict, Optional, Sequence, Type

from pipes_engine.core.grid import Grid, SquareGrid
from pipes_engine.core.hexagrid import HexaGrid
from pipes_engine.core.octagrid import OctaGrid

GRID_KINDS: Dict[str, Type[Grid]] = {
    SquareGrid.KIND: SquareGrid,
    HexaGrid.KIND: HexaGrid,
    OctaGrid.KIND: OctaGrid,
}


def make_grid(kind: str, width: int, height: int, wrap: bool = False, tiles: Optional[Sequence[int]] = None) -> Grid:
    if kind not in GRID_KINDS:
        raise ValueError(f"Unknown grid kind '{kind}', expected one of {sorted(GRID_KINDS)}")
    return GRID_KINDS[kind](width, height, wrap, tiles)

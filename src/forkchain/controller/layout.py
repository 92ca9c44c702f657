"""
Layout Engine
=============
Converts a BranchSet into 2D block positions, connectors and branch labels.

Why is this file needed?
------------------------
1. Geometry: The renderer only draws what it is given. All placement
   decisions (lanes, spacing, curve control points) are made here.
2. Collision avoidance: Forked branches are stacked into free lanes so that no
   two branches sharing a horizontal extent ever overlap.
3. Determinism: The result is a pure function of the BranchSet. Nothing is
   cached between passes.

Classes:
    BlockPosition: Where a block is drawn.
    Connector: A link between two blocks, straight or fork-curved.
    BranchLabel: A branch name and its anchor.
    ChainLayout: Everything the renderer needs for one pass.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, TYPE_CHECKING

import numpy as np

from forkchain.config import DEFAULT_LAYOUT, LayoutSettings
from forkchain.model.state import BranchSet

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

Point2D = tuple[float, float]


# -------------------------------------------------------------------------------
# Layout data
# -------------------------------------------------------------------------------

@dataclass(frozen=True)
class BlockPosition:
    x: float
    y: float
    branch_index: int
    block_index: int


class ConnectorKind(Enum):
    STRAIGHT = "straight"
    FORK = "fork"


@dataclass(frozen=True)
class Connector:
    """
    A link from `source` to `target` (block hashes).

    `path` holds the anchor points to stroke: two points for a straight line,
    or start, control 1, control 2, end for a cubic Bezier fork curve.
    """
    source: str
    target: str
    kind: ConnectorKind
    path: tuple[Point2D, ...]

    @property
    def is_fork(self) -> bool:
        return self.kind is ConnectorKind.FORK


@dataclass(frozen=True)
class BranchLabel:
    branch_index: int
    text: str
    x: float
    y: float


@dataclass
class ChainLayout:
    positions: dict[str, BlockPosition] = field(default_factory=dict)
    connectors: list[Connector] = field(default_factory=list)
    lanes: dict[str, float] = field(default_factory=dict)
    labels: list[BranchLabel] = field(default_factory=list)
    width: float = 0.0
    height: float = 0.0
    settings: LayoutSettings = DEFAULT_LAYOUT

    def position_of(self, block_hash: str) -> Optional[BlockPosition]:
        return self.positions.get(block_hash)

    def action_anchor(self, block_hash: str) -> Optional[Point2D]:
        """Top-left anchor for the append/fork controls of a block."""
        pos = self.positions.get(block_hash)
        if pos is None:
            return None
        return pos.x + self.settings.block_width + 10.0, pos.y


# -------------------------------------------------------------------------------
# Algorithm
# -------------------------------------------------------------------------------

def compute_layout(branch_set: BranchSet, settings: LayoutSettings = DEFAULT_LAYOUT) -> ChainLayout:
    """
    Lay out every branch of the snapshot.

    The root branch is a straight row at y = 0. Each other branch is placed in
    list order, starting at its fork point's x, in the first free lane below
    the fork point. A branch whose fork point has no position yet (its parent
    history was truncated away) is skipped for this pass.
    """
    layout = ChainLayout(settings=settings)
    if len(branch_set) == 0:
        return layout

    edges: list[tuple[str, str]] = []

    # 1. Root branch: one straight row
    root = branch_set.root
    layout.lanes[root.id] = 0.0
    for i, block in enumerate(root.blocks):
        layout.positions[block.hash] = BlockPosition(
            x=i * settings.block_spacing,
            y=0.0,
            branch_index=0,
            block_index=i,
        )
        if i > 0:
            edges.append((block.previous_hash, block.hash))

    # 2. Forked branches, in creation order
    for branch_index, branch in enumerate(branch_set.branches[1:], start=1):
        fork = branch.fork_point
        fork_pos = layout.positions.get(fork.hash) if fork is not None else None
        if fork_pos is None:
            logger.debug(f"Skipping branch '{branch.name}': fork point has no position.")
            continue

        lane_y = _find_free_lane(layout.positions, fork_pos.x, fork_pos.y, settings)
        layout.lanes[branch.id] = lane_y

        for i, block in enumerate(branch.blocks):
            if i == 0:
                continue  # fork point keeps its parent's position
            layout.positions[block.hash] = BlockPosition(
                x=fork_pos.x + i * settings.block_spacing,
                y=lane_y,
                branch_index=branch_index,
                block_index=i,
            )
            edges.append((branch.blocks[i - 1].hash, block.hash))

    # 3. Connectors
    for source, target in edges:
        connector = _build_connector(layout.positions, source, target, settings)
        if connector is not None:
            layout.connectors.append(connector)

    # 4. Labels
    for branch_index, branch in enumerate(branch_set):
        lane_y = layout.lanes.get(branch.id)
        first = branch.fork_point
        pos = layout.positions.get(first.hash) if first is not None else None
        if pos is None or lane_y is None:
            continue
        layout.labels.append(BranchLabel(
            branch_index=branch_index,
            text=branch.name,
            x=pos.x,
            y=lane_y - settings.label_offset,
        ))

    # 5. Scene size: never smaller than the placed blocks
    max_blocks = max(len(b) for b in branch_set)
    right = max((p.x for p in layout.positions.values()), default=0.0) + settings.block_width
    bottom = max((p.y for p in layout.positions.values()), default=0.0) + settings.block_height
    layout.width = max(
        settings.min_width,
        max_blocks * settings.block_spacing + settings.margin,
        right + settings.margin,
    )
    layout.height = max(
        settings.min_height,
        len(branch_set) * settings.branch_spacing + settings.vertical_margin,
        bottom + settings.vertical_margin,
    )

    return layout


def _find_free_lane(
    positions: dict[str, BlockPosition],
    fork_x: float,
    fork_y: float,
    settings: LayoutSettings,
) -> float:
    """
    First lane fork_y + k * branch_spacing (k >= 1) that keeps at least
    min_lane_distance from every block placed at or right of fork_x.
    """
    xs: npt.NDArray[np.float64] = np.fromiter((p.x for p in positions.values()), dtype=np.float64)
    ys: npt.NDArray[np.float64] = np.fromiter((p.y for p in positions.values()), dtype=np.float64)
    occupied = ys[xs >= fork_x]

    offset = settings.branch_spacing
    while np.any(np.abs(occupied - (fork_y + offset)) < settings.min_lane_distance):
        offset += settings.branch_spacing
    return fork_y + offset


def _build_connector(
    positions: dict[str, BlockPosition],
    source: str,
    target: str,
    settings: LayoutSettings,
) -> Optional[Connector]:
    src = positions.get(source)
    dst = positions.get(target)
    if src is None or dst is None:
        logger.debug(f"Dropping connector {source[:8]} -> {target[:8]}: endpoint not placed.")
        return None

    half_h = settings.block_height / 2
    start = (src.x + settings.block_width, src.y + half_h)
    end = (dst.x, dst.y + half_h)

    if abs(src.y - dst.y) > settings.fork_threshold:
        c1 = (start[0] + settings.block_spacing / 2, start[1])
        c2 = (end[0] - settings.block_spacing / 2, end[1])
        return Connector(source, target, ConnectorKind.FORK, (start, c1, c2, end))

    return Connector(source, target, ConnectorKind.STRAIGHT, (start, end))

"""
Configuration & Global Constants
================================
This module serves as the central registry for application constants and the
diagram geometry.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (block sizes, lane spacing) from
   being scattered between the layout engine and the view.
2. Environment: It reads the few runtime switches (log level, log file) from
   environment variables.

Exports:
    LayoutSettings: Geometry used by the layout engine and the renderer.
    DEFAULT_LAYOUT: The default LayoutSettings instance.
    get_log_level: Log level requested via FORKCHAIN_LOG_LEVEL.
    get_log_file: Optional log file path from FORKCHAIN_LOG_FILE.
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional

ORG_ID = "forkchain"
APP_ID = "forkchain"
VISIBLE_APP_NAME = "Multibranch Blockchain Demonstration"

ENV_LOG_LEVEL = "FORKCHAIN_LOG_LEVEL"
ENV_LOG_FILE = "FORKCHAIN_LOG_FILE"


@dataclass(frozen=True)
class LayoutSettings:
    """Diagram geometry in scene units (pixels at 100% zoom)."""
    block_width: float = 100.0
    block_height: float = 50.0
    block_spacing: float = 140.0
    branch_spacing: float = 120.0

    # A lane is rejected while another block at or right of the fork sits
    # closer than collision_factor * branch_spacing.
    collision_factor: float = 0.8

    # Connectors whose ends differ vertically by more than this are fork curves
    fork_threshold: float = 1.0

    label_offset: float = 20.0

    # Scene size
    min_width: float = 1000.0
    min_height: float = 500.0
    margin: float = 200.0
    vertical_margin: float = 100.0

    @property
    def min_lane_distance(self) -> float:
        return self.collision_factor * self.branch_spacing


DEFAULT_LAYOUT = LayoutSettings()

# Zoom limits for the diagram view
MIN_ZOOM: float = 0.1
MAX_ZOOM: float = 3.0


def get_log_level(default: int = logging.INFO) -> int:
    """Resolve FORKCHAIN_LOG_LEVEL (e.g. "DEBUG") to a logging level."""
    name = os.environ.get(ENV_LOG_LEVEL, "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    if isinstance(level, int):
        return level
    print(f"WARNING: Unknown log level '{name}' in {ENV_LOG_LEVEL}, using default.")
    return default


def get_log_file() -> Optional[str]:
    return os.environ.get(ENV_LOG_FILE) or None

"""Terminal presentation of scan progress and results."""

from .progress import ProgressDisplay
from .results import render

__all__ = ["ProgressDisplay", "render"]

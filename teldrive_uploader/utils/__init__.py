"""Stream and progress helpers."""
from .progress import ProgressReporter
from .stream import BoundedReader

__all__ = ["BoundedReader", "ProgressReporter"]

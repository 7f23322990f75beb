"""Session progress plumbing."""

from castgraph.pipeline.progress_tracker import ProgressTracker

__all__ = ["ProgressTracker"]

"""Merge engine for imports."""

from .merge import MergeResult, merge_records

__all__ = ["MergeResult", "merge_records"]

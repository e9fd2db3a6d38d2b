"""
Filtering tools for filefilter.

This module contains the predicate evaluation and the directory listing and
tree walking drivers built on it.
"""

from .file_filter import (
    FileFilter,
    FileFilterError,
    TraversalError,
    AggregationError,
    passes_filter,
    read_dir,
    walk_dir,
    read_dir_matches,
    walk_dir_matches
)

__all__ = [
    'FileFilter',
    'FileFilterError',
    'TraversalError',
    'AggregationError',
    'passes_filter',
    'read_dir',
    'walk_dir',
    'read_dir_matches',
    'walk_dir_matches'
]

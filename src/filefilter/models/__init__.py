"""
Data models for filefilter.

This module contains the filter configuration and the structures produced
while filtering.
"""

from .config import FilterConfig, parse_duration, format_duration
from .filter_results import FileInfo, FilterMatch, FilterOutcome, FilterRule

__all__ = [
    'FilterConfig',
    'parse_duration',
    'format_duration',
    'FileInfo',
    'FilterMatch',
    'FilterOutcome',
    'FilterRule'
]

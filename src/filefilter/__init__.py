"""
filefilter - Core Package

Selects filesystem entries matching declarative filter rules (name pattern,
modification age and size bounds) from a directory listing or a directory tree.
"""

__version__ = "0.1.0"
__author__ = "filefilter Team"

"""
Configuration management package for filefilter.

This package provides loading, validation and saving of YAML filter documents.
"""

from .parser import (
    FilterConfigParser,
    FilterParseResult,
    ConfigurationError,
    load_filters,
    parse_filters,
    validate_filters_file,
    create_filters_template
)

__all__ = [
    'FilterConfigParser',
    'FilterParseResult',
    'ConfigurationError',
    'load_filters',
    'parse_filters',
    'validate_filters_file',
    'create_filters_template'
]

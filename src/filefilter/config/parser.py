"""
YAML filter document parser for filefilter.

This module loads filter configurations from YAML documents of the form::

    filters:
      - pattern: ^.*\\.txt$
        min_age: 30m
        min_size: 11

It handles file discovery, parsing, validation and reporting of suspicious
constraint combinations, and can write configurations back to YAML.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Sequence, Union
import logging
from dataclasses import dataclass
from pydantic import ValidationError

from ..models.config import FilterConfig


@dataclass
class FilterParseResult:
    """
    Result of a filter document parsing operation.

    Attributes:
        configs: The parsed and validated filter configurations, in document order
        warnings: List of non-fatal warnings
        config_path: Path to the document used (None when parsed from text)
    """
    configs: List[FilterConfig]
    warnings: List[str]
    config_path: Optional[Path]


class ConfigurationError(Exception):
    """Raised when a filter document cannot be read, parsed or validated."""
    pass


class FilterConfigParser:
    """
    YAML filter document parser with validation and error handling.

    Converts the ``filters`` list of a YAML document into FilterConfig objects.
    Every entry is validated eagerly, so a broken pattern or duration is
    reported at load time together with its position in the document.
    """

    DEFAULT_CONFIG_NAMES = [
        '.filefilter.yaml',
        '.filefilter.yml',
        'filefilter.yaml',
        'filefilter.yml',
    ]

    FILTERS_KEY = 'filters'

    def __init__(self, strict_mode: bool = False):
        """
        Initialize the filter document parser.

        Args:
            strict_mode: If True, treat warnings as errors
        """
        self.strict_mode = strict_mode
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_filters(self, config_path: Optional[Union[str, Path]] = None) -> FilterParseResult:
        """
        Load and parse filter configurations from a YAML file.

        Args:
            config_path: Path to the filter document. If None, searches the
                default file names in the current and home directories.

        Returns:
            FilterParseResult containing the parsed configurations

        Raises:
            ConfigurationError: If no document is found, or it is invalid
        """
        if config_path:
            config_path = Path(config_path)
            if not config_path.exists():
                raise ConfigurationError(f"Filter configuration file not found: {config_path}")
        else:
            config_path = self._find_config()
            if config_path is None:
                raise ConfigurationError(
                    f"No filter configuration file found (looked for {', '.join(self.DEFAULT_CONFIG_NAMES)})"
                )

        data = self._load_yaml_file(config_path)
        result = self._build_result(data, config_path)

        self.logger.info(f"Loaded {len(result.configs)} filter(s) from {config_path}")
        return result

    def parse_filters(self, text: str) -> FilterParseResult:
        """
        Parse filter configurations from YAML text.

        Args:
            text: YAML document

        Returns:
            FilterParseResult containing the parsed configurations

        Raises:
            ConfigurationError: If the document is invalid
        """
        data = self._parse_yaml(text, '<string>')
        return self._build_result(data, None)

    def _find_config(self) -> Optional[Path]:
        """
        Find a filter document in the default locations.

        Returns:
            Path of the first document found, or None
        """
        for search_path in [Path.cwd(), Path.home()]:
            for config_name in self.DEFAULT_CONFIG_NAMES:
                config_file = search_path / config_name
                if config_file.is_file():
                    self.logger.info(f"Found filter configuration file: {config_file}")
                    return config_file
        return None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load and parse a YAML file.

        Raises:
            ConfigurationError: If file cannot be read or parsed
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except OSError as e:
            raise ConfigurationError(f"Cannot read filter configuration file {file_path}: {e}") from e

        return self._parse_yaml(content, str(file_path))

    def _parse_yaml(self, content: str, source: str) -> Dict[str, Any]:
        if not content.strip():
            raise ConfigurationError(f"Filter configuration is empty: {source}")

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {source}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Filter configuration must contain a YAML object, got {type(data).__name__}"
            )

        return data

    def _build_result(self, data: Dict[str, Any], config_path: Optional[Path]) -> FilterParseResult:
        configs = self._parse_config_list(data)

        warnings = []
        if not configs:
            warnings.append("No filters configured, nothing will match")
        for config in configs:
            warnings.extend(config.get_warnings())

        for warning in warnings:
            self.logger.warning(warning)

        if self.strict_mode and warnings:
            raise ConfigurationError(f"Filter configuration warnings in strict mode: {'; '.join(warnings)}")

        return FilterParseResult(configs=configs, warnings=warnings, config_path=config_path)

    def _parse_config_list(self, data: Dict[str, Any]) -> List[FilterConfig]:
        """
        Validate the filters list of a document.

        Raises:
            ConfigurationError: If the list or one of its entries is invalid
        """
        unknown_keys = set(data) - {self.FILTERS_KEY}
        if unknown_keys:
            raise ConfigurationError(f"Unknown top-level keys in filter configuration: {sorted(unknown_keys)}")

        entries = data.get(self.FILTERS_KEY)
        if entries is None:
            return []
        if not isinstance(entries, list):
            raise ConfigurationError(f"'{self.FILTERS_KEY}' must be a list, got {type(entries).__name__}")

        configs = []
        for index, entry in enumerate(entries):
            if entry is None:
                entry = {}
            if not isinstance(entry, dict):
                raise ConfigurationError(
                    f"Filter #{index} must be a YAML object, got {type(entry).__name__}"
                )
            try:
                configs.append(FilterConfig.from_dict(entry))
            except ValidationError as e:
                raise ConfigurationError(f"Filter #{index} is invalid: {e}") from e

        return configs

    def save_filters(self, configs: Sequence[FilterConfig], output_path: Union[str, Path]) -> None:
        """
        Save filter configurations to a YAML file.

        Args:
            configs: Configurations to save
            output_path: Path where to save the document

        Raises:
            ConfigurationError: If file cannot be written
        """
        output_path = Path(output_path)
        content = self._generate_yaml_with_comments([config.to_dict() for config in configs])

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            raise ConfigurationError(f"Cannot write filter configuration file {output_path}: {e}") from e

        self.logger.info(f"Filter configuration saved to {output_path}")

    def _generate_yaml_with_comments(self, filters: List[Dict[str, Any]]) -> str:
        lines = [
            "# filefilter configuration",
            "# Each filter selects the files matching all of its rules.",
            "# Rules: pattern (regex on the file name), min_age/max_age (e.g. 30m, 1h30m),",
            "# min_size/max_size (bytes), min_size_mb/max_size_mb (whole megabytes).",
            "",
        ]
        lines.append(yaml.safe_dump({self.FILTERS_KEY: filters}, default_flow_style=False, sort_keys=False).rstrip())
        lines.append("")
        return "\n".join(lines)

    def validate_filters_file(self, config_path: Union[str, Path]) -> List[str]:
        """
        Validate a filter document without keeping the result.

        Args:
            config_path: Path to the filter document

        Returns:
            List of validation errors (empty if valid)
        """
        try:
            self.load_filters(config_path)
        except ConfigurationError as e:
            return [str(e)]
        return []

    def get_filters_template(self) -> str:
        """
        Get a template filter document with commented examples.

        Returns:
            YAML template as string
        """
        template = [
            {
                'name': 'stale-logs',
                'pattern': r'^.*\.log$',
                'min_age': '168h0m0s',
            },
            {
                'name': 'large-archives',
                'pattern': r'^.*\.(tar|gz|zip)$',
                'min_size_mb': 100,
            },
            {
                'name': 'fresh-uploads',
                'max_age': '1h0m0s',
                'min_size': 1,
            },
        ]
        return self._generate_yaml_with_comments(template)


def load_filters(config_path: Optional[Union[str, Path]] = None, strict_mode: bool = False) -> FilterParseResult:
    """
    Convenience function to load filter configurations.

    Args:
        config_path: Path to the filter document (optional)
        strict_mode: Whether to treat warnings as errors

    Returns:
        FilterParseResult containing parsed configurations

    Raises:
        ConfigurationError: If the document is missing or invalid
    """
    parser = FilterConfigParser(strict_mode=strict_mode)
    return parser.load_filters(config_path)


def parse_filters(text: str, strict_mode: bool = False) -> List[FilterConfig]:
    """
    Convenience function to parse filter configurations from YAML text.

    Returns:
        The parsed configurations, in document order
    """
    parser = FilterConfigParser(strict_mode=strict_mode)
    return parser.parse_filters(text).configs


def validate_filters_file(config_path: Union[str, Path]) -> List[str]:
    """
    Convenience function to validate a filter document.

    Returns:
        List of validation errors (empty if valid)
    """
    parser = FilterConfigParser()
    return parser.validate_filters_file(config_path)


def create_filters_template(output_path: Union[str, Path]) -> None:
    """
    Create a template filter document.

    Args:
        output_path: Where to save the template

    Raises:
        ConfigurationError: If template cannot be created
    """
    parser = FilterConfigParser()
    template_content = parser.get_filters_template()

    try:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(template_content)

    except OSError as e:
        raise ConfigurationError(f"Cannot create template file {output_path}: {e}") from e

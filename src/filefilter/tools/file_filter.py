"""
File filter for filefilter.

This module evaluates filesystem entries against filter configurations and
drives the two traversal modes: a flat listing of one directory and a full
recursive walk. Multi-configuration variants apply several filters to the same
root and tag each match with the configuration that produced it.
"""

import os
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Union

from ..models.config import FilterConfig, is_duration_set
from ..models.filter_results import FileInfo, FilterMatch, FilterOutcome, FilterRule

PathType = Union[str, os.PathLike]


class FileFilterError(Exception):
    """Base class for errors raised while filtering files."""
    pass


class TraversalError(FileFilterError):
    """
    Raised when a directory cannot be listed or walked.

    The underlying OSError is chained as ``__cause__``.

    Attributes:
        path: The path that could not be read
    """

    def __init__(self, path: PathType, message: str):
        self.path = os.fspath(path)
        super().__init__(message)


class AggregationError(FileFilterError):
    """
    Raised when applying one of several filter configurations fails.

    The TraversalError that aborted the aggregation is chained as ``__cause__``.

    Attributes:
        config: The configuration being applied when the failure occurred
        config_index: Position of that configuration in the input sequence
        path: Root path of the aggregation
    """

    def __init__(self, config: FilterConfig, config_index: int, path: PathType):
        self.config = config
        self.config_index = config_index
        self.path = os.fspath(path)
        super().__init__(
            f"when applying filter configuration #{config_index} '{config.describe()}' to '{self.path}'"
        )


class FileFilter:
    """
    Applies filter configurations to directory listings and directory trees.

    The filter holds no state besides the logger used for diagnostics, so one
    instance can be reused for any number of calls.
    """

    def __init__(self, diagnostics: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None):
        """
        Initialize the file filter.

        Args:
            diagnostics: Logger receiving per-entry diagnostics. Defaults to a
                logger named after this class.
        """
        self.logger = diagnostics or logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def passes_filter(self, config: FilterConfig, file_info: FileInfo,
                      now: Optional[datetime] = None) -> FilterOutcome:
        """
        Evaluate one entry against one filter configuration.

        Rules are checked in a fixed order and the first failing rule is
        reported: pattern, max_age, min_age, min_size, max_size, min_size_mb,
        max_size_mb. Unset rules always hold.

        Args:
            config: Filter configuration to apply
            file_info: Metadata of the entry
            now: Reference time for the age rules, defaults to the current time

        Returns:
            FilterOutcome telling whether the entry passed, and which rule
            rejected it if not
        """
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.astimezone(timezone.utc)

        if config.pattern is not None and not config.pattern.search(file_info.name):
            return self._reject(FilterRule.PATTERN, config, file_info)

        if is_duration_set(config.max_age) and file_info.modified_time + config.max_age < now:
            return self._reject(FilterRule.MAX_AGE, config, file_info)

        if is_duration_set(config.min_age) and file_info.modified_time + config.min_age > now:
            return self._reject(FilterRule.MIN_AGE, config, file_info)

        if config.min_size and file_info.size < config.min_size:
            return self._reject(FilterRule.MIN_SIZE, config, file_info)

        if config.max_size and file_info.size > config.max_size:
            return self._reject(FilterRule.MAX_SIZE, config, file_info)

        # Megabytes are truncated before comparing: 1048575 bytes is 0 MB
        if config.min_size_mb and file_info.size_mb < config.min_size_mb:
            return self._reject(FilterRule.MIN_SIZE_MB, config, file_info)

        if config.max_size_mb and file_info.size_mb > config.max_size_mb:
            return self._reject(FilterRule.MAX_SIZE_MB, config, file_info)

        return FilterOutcome.success()

    def _reject(self, rule: FilterRule, config: FilterConfig, file_info: FileInfo) -> FilterOutcome:
        self.logger.debug(
            f"File '{file_info.name}' did not pass the {rule.value} filter",
            extra={'file_name': file_info.name, 'filter_rule': rule.value, 'filter_config': config.describe()}
        )
        return FilterOutcome.failure(rule)

    def read_dir(self, config: FilterConfig, dir_path: PathType) -> List[FileInfo]:
        """
        List the immediate entries of a directory that pass a filter.

        Subdirectories are not descended into. They are evaluated like any
        other entry and are returned when they pass.

        Args:
            config: Filter configuration to apply
            dir_path: Directory to list

        Returns:
            Passing entries, ordered by name

        Raises:
            TraversalError: If the directory cannot be listed
        """
        try:
            with os.scandir(dir_path) as scanner:
                entries = sorted(
                    (FileInfo.from_stat(entry.name, entry.stat(follow_symlinks=False)) for entry in scanner),
                    key=lambda info: info.name
                )
        except OSError as e:
            raise TraversalError(dir_path, f"when listing files in the folder '{os.fspath(dir_path)}': {e}") from e

        now = datetime.now(timezone.utc)
        files = []
        for file_info in entries:
            if self.passes_filter(config, file_info, now):
                files.append(file_info)

        self.logger.debug(f"{len(files)} of {len(entries)} entries in '{os.fspath(dir_path)}' passed the filter")
        return files

    def walk_dir(self, config: FilterConfig, dir_path: PathType) -> Dict[str, FileInfo]:
        """
        Recursively walk a directory tree and collect the files that pass a filter.

        Directories are descended into but never evaluated themselves. Symbolic
        links are not followed; a link is evaluated as an entry of its own. If
        the root is not a directory it is evaluated on its own.

        Args:
            config: Filter configuration to apply
            dir_path: Root of the tree

        Returns:
            Passing files keyed by their full path

        Raises:
            TraversalError: If any part of the tree cannot be read. No partial
                result is returned.
        """
        root = os.fspath(dir_path)
        now = datetime.now(timezone.utc)
        files: Dict[str, FileInfo] = {}

        try:
            root_info = FileInfo.from_path(root)
            if not root_info.is_dir:
                if self.passes_filter(config, root_info, now):
                    files[root] = root_info
                return files

            for current_dir, subdirs, filenames in os.walk(root, onerror=_raise_walk_error):
                subdirs.sort()
                for name in sorted(subdirs + filenames):
                    file_path = os.path.join(current_dir, name)
                    file_info = FileInfo.from_stat(name, os.lstat(file_path))
                    if file_info.is_dir:
                        continue
                    if self.passes_filter(config, file_info, now):
                        files[file_path] = file_info
        except OSError as e:
            failed_path = e.filename if e.filename else root
            raise TraversalError(failed_path, f"when walking the file system at '{failed_path}': {e}") from e

        self.logger.debug(f"{len(files)} files under '{root}' passed the filter")
        return files

    def read_dir_matches(self, configs: Iterable[FilterConfig], dir_path: PathType) -> List[FilterMatch]:
        """
        Apply several filter configurations to the listing of one directory.

        Matches are grouped by configuration, in the order the configurations
        are given; within a configuration they follow the listing order. A file
        passing several configurations is reported once for each of them.

        Args:
            configs: Filter configurations to apply
            dir_path: Directory to list

        Returns:
            Match records tagged with the configuration that produced them

        Raises:
            AggregationError: If listing the directory fails for any configuration
        """
        configs = list(configs)
        root = os.fspath(dir_path)
        matches = []
        for index, config in enumerate(configs):
            try:
                files = self.read_dir(config, root)
            except TraversalError as e:
                raise AggregationError(config, index, root) from e

            for file_info in files:
                matches.append(FilterMatch(
                    file_info=file_info,
                    file_path=os.path.join(root, file_info.name),
                    config=config
                ))

        self.logger.info(f"{len(matches)} matches for {len(configs)} filter(s) in '{root}'")
        return matches

    def walk_dir_matches(self, configs: Iterable[FilterConfig], dir_path: PathType) -> List[FilterMatch]:
        """
        Apply several filter configurations to a whole directory tree.

        Matches are grouped by configuration, in the order the configurations
        are given. Callers should not rely on the order of matches within one
        configuration.

        Args:
            configs: Filter configurations to apply
            dir_path: Root of the tree

        Returns:
            Match records tagged with the configuration that produced them

        Raises:
            AggregationError: If walking the tree fails for any configuration
        """
        configs = list(configs)
        root = os.fspath(dir_path)
        matches = []
        for index, config in enumerate(configs):
            try:
                files = self.walk_dir(config, root)
            except TraversalError as e:
                raise AggregationError(config, index, root) from e

            for file_path, file_info in files.items():
                matches.append(FilterMatch(file_info=file_info, file_path=file_path, config=config))

        self.logger.info(f"{len(matches)} matches for {len(configs)} filter(s) under '{root}'")
        return matches


def _raise_walk_error(error: OSError) -> None:
    raise error


def passes_filter(config: FilterConfig, file_info: FileInfo, now: Optional[datetime] = None) -> FilterOutcome:
    """
    Convenience function to evaluate one entry against one filter configuration.

    Args:
        config: Filter configuration to apply
        file_info: Metadata of the entry
        now: Reference time for the age rules (optional)

    Returns:
        FilterOutcome for the entry
    """
    return FileFilter().passes_filter(config, file_info, now)


def read_dir(config: FilterConfig, dir_path: PathType) -> List[FileInfo]:
    """Convenience function to list the passing entries of one directory."""
    return FileFilter().read_dir(config, dir_path)


def walk_dir(config: FilterConfig, dir_path: PathType) -> Dict[str, FileInfo]:
    """Convenience function to collect the passing files of a directory tree."""
    return FileFilter().walk_dir(config, dir_path)


def read_dir_matches(configs: Iterable[FilterConfig], dir_path: PathType) -> List[FilterMatch]:
    """Convenience function to apply several filters to one directory listing."""
    return FileFilter().read_dir_matches(configs, dir_path)


def walk_dir_matches(configs: Iterable[FilterConfig], dir_path: PathType) -> List[FilterMatch]:
    """Convenience function to apply several filters to a directory tree."""
    return FileFilter().walk_dir_matches(configs, dir_path)

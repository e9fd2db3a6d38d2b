"""
Filter result data models for filefilter.

This module defines the structures produced while filtering: the metadata read
for every filesystem entry, the outcome of evaluating one entry against one
filter configuration, and the match records handed back to callers.
"""

import os
import stat
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Any, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import FilterConfig, BYTES_PER_MB


class FilterRule(Enum):
    """The rules of a filter configuration, in evaluation order."""
    PATTERN = "pattern"
    MAX_AGE = "max_age"
    MIN_AGE = "min_age"
    MIN_SIZE = "min_size"
    MAX_SIZE = "max_size"
    MIN_SIZE_MB = "min_size_mb"
    MAX_SIZE_MB = "max_size_mb"


class FileInfo(BaseModel):
    """
    Metadata about a single filesystem entry.

    Read from the filesystem without following symbolic links, so a link is
    described by its own metadata rather than by its target's.

    Attributes:
        name: Base name of the entry
        size: Size in bytes
        modified_time: Last modification timestamp (UTC)
        is_dir: Whether the entry is a directory
        mode: Raw st_mode bits
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Base name of the entry")
    size: int = Field(..., ge=0, description="Size in bytes")
    modified_time: datetime = Field(..., description="Last modification timestamp")
    is_dir: bool = Field(False, description="Whether the entry is a directory")
    mode: int = Field(0, ge=0, description="Raw st_mode bits")

    @field_validator('modified_time')
    @classmethod
    def validate_modified_time(cls, v: datetime) -> datetime:
        """Naive timestamps are taken as local time and converted to UTC."""
        if v.tzinfo is None:
            return v.astimezone(timezone.utc)
        return v

    @classmethod
    def from_stat(cls, name: str, stat_result: os.stat_result) -> 'FileInfo':
        """Build metadata from an os.stat_result."""
        return cls(
            name=name,
            size=stat_result.st_size,
            modified_time=datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc),
            is_dir=stat.S_ISDIR(stat_result.st_mode),
            mode=stat_result.st_mode,
        )

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike]) -> 'FileInfo':
        """
        Read metadata for a path.

        Raises:
            OSError: If the path cannot be stat'ed
        """
        return cls.from_stat(Path(path).name, os.lstat(path))

    @property
    def size_mb(self) -> int:
        """Size in whole megabytes, truncated."""
        return self.size // BYTES_PER_MB

    def get_size_human_readable(self) -> str:
        """Get file size in human-readable format."""
        size = float(self.size)
        for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
            if size < 1024.0:
                return f"{size:.1f} {unit}"
            size /= 1024.0
        return f"{size:.1f} PB"

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary representation."""
        data = self.model_dump()
        data['modified_time'] = self.modified_time.isoformat()
        data['size_human'] = self.get_size_human_readable()
        return data


@dataclass(frozen=True)
class FilterOutcome:
    """
    Result of evaluating one entry against one filter configuration.

    Attributes:
        passed: Whether every configured rule held
        reason: The first rule that failed, None when passed
    """
    passed: bool
    reason: Optional[FilterRule] = None

    @classmethod
    def success(cls) -> 'FilterOutcome':
        return cls(passed=True)

    @classmethod
    def failure(cls, rule: FilterRule) -> 'FilterOutcome':
        return cls(passed=False, reason=rule)

    def __bool__(self) -> bool:
        return self.passed

    def __str__(self) -> str:
        if self.passed:
            return "passed"
        return f"failed {self.reason.value}"


@dataclass(frozen=True)
class FilterMatch:
    """
    A file that passed a filter configuration.

    Attributes:
        file_info: Metadata of the matched file
        file_path: Full path to the matched file
        config: The filter configuration that matched (the caller's own object)
    """
    file_info: FileInfo
    file_path: str
    config: FilterConfig

    def get_filename(self) -> str:
        """Get just the filename without directory path."""
        return self.file_info.name

    def to_dict(self) -> Dict[str, Any]:
        """Convert match to dictionary representation."""
        return {
            'file_path': self.file_path,
            'file_info': self.file_info.to_dict(),
            'config': self.config.to_dict(),
        }

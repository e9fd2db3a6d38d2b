"""
Filter configuration data models for filefilter.

This module defines the declarative rule set a file is checked against: a name
pattern, modification-age bounds and size bounds (in bytes or in megabytes).
Every constraint is optional and an unset constraint holds its zero value.
"""

from typing import Dict, List, Optional, Any, Union
from datetime import timedelta
import re
from pydantic import BaseModel, ConfigDict, Field, field_validator


# Go-style duration units, as found in hand written YAML ("30m", "1h30m", "250ms")
_DURATION_NANOS = {
    'ns': 1,
    'us': 1000,
    'µs': 1000,
    'μs': 1000,
    'ms': 1000 * 1000,
    's': 1000 * 1000 * 1000,
    'm': 60 * 1000 * 1000 * 1000,
    'h': 3600 * 1000 * 1000 * 1000,
}

_DURATION_PART = re.compile(r'(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)')

BYTES_PER_MB = 1024 * 1024

# Longest duration Go can represent, about 292 years
MAX_DURATION = timedelta(microseconds=(2 ** 63 - 1) // 1000)


def parse_duration(value: str) -> timedelta:
    """
    Parse a Go-style duration string into a timedelta.

    A duration is a sequence of decimal numbers, each with an optional fraction
    and a unit suffix, such as "300ms", "1.5h" or "2h45m". A bare "0" is the
    zero duration.

    Args:
        value: Duration string to parse

    Returns:
        The parsed duration

    Raises:
        ValueError: If the string is not a valid duration
    """
    text = value.strip()
    if not text:
        raise ValueError("Duration cannot be empty")

    sign = 1
    if text[0] in '+-':
        sign = -1 if text[0] == '-' else 1
        text = text[1:]

    if text == '0':
        return timedelta(0)

    nanos = 0.0
    position = 0
    while position < len(text):
        match = _DURATION_PART.match(text, position)
        if not match:
            raise ValueError(f"Invalid duration: {value!r}")
        number, unit = match.groups()
        nanos += float(number) * _DURATION_NANOS[unit]
        position = match.end()

    if position == 0:
        raise ValueError(f"Invalid duration: {value!r}")

    # timedelta resolution is one microsecond
    try:
        return timedelta(microseconds=sign * (int(nanos) // 1000))
    except OverflowError:
        raise ValueError(f"Duration out of range: {value!r}")


def format_duration(value: timedelta) -> str:
    """Render a timedelta the way Go prints durations, e.g. "1h30m0s"."""
    if value == timedelta(0):
        return "0s"

    sign = '-' if value < timedelta(0) else ''
    micros = abs(value) // timedelta(microseconds=1)

    if micros < 1000:
        return f"{sign}{micros}µs"
    if micros < 1000000:
        return f"{sign}{_trim_fraction(micros / 1000)}ms"

    hours, micros = divmod(micros, 3600 * 1000000)
    minutes, micros = divmod(micros, 60 * 1000000)
    seconds = _trim_fraction(micros / 1000000)

    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def _trim_fraction(number: float) -> str:
    text = f"{number:.6f}".rstrip('0').rstrip('.')
    return text or '0'


def is_duration_set(value: timedelta) -> bool:
    """A duration only counts as a constraint from one whole millisecond up."""
    return abs(value) >= timedelta(milliseconds=1)


class FilterConfig(BaseModel):
    """
    A named set of optional constraints that a file must satisfy.

    The configuration is immutable once constructed. The name pattern is
    compiled when the configuration is built, so an invalid regular expression
    fails here rather than at the first evaluation.

    Attributes:
        name: Optional label used in logs and error messages
        pattern: Regular expression the file's base name must match
        min_age: Minimum time since last modification
        max_age: Maximum time since last modification
        min_size: Minimum size in bytes
        max_size: Maximum size in bytes
        min_size_mb: Minimum size in whole megabytes
        max_size_mb: Maximum size in whole megabytes
    """

    model_config = ConfigDict(frozen=True, extra='forbid')

    name: Optional[str] = Field(None, description="Optional label for this filter")
    pattern: Optional[re.Pattern] = Field(None, description="Regular expression for the file name")
    min_age: timedelta = Field(timedelta(0), description="Minimum age since last modification")
    max_age: timedelta = Field(timedelta(0), description="Maximum age since last modification")
    min_size: int = Field(0, ge=0, description="Minimum size in bytes")
    max_size: int = Field(0, ge=0, description="Maximum size in bytes")
    min_size_mb: float = Field(0.0, ge=0, description="Minimum size in megabytes")
    max_size_mb: float = Field(0.0, ge=0, description="Maximum size in megabytes")

    @field_validator('pattern', mode='before')
    @classmethod
    def validate_pattern(cls, v) -> Optional[re.Pattern]:
        """Compile the name pattern eagerly."""
        if v is None or isinstance(v, re.Pattern):
            return v
        if isinstance(v, str):
            if not v:
                return None
            try:
                return re.compile(v)
            except re.error as e:
                raise ValueError(f"Invalid pattern '{v}': {e}")
        raise ValueError(f"Pattern must be a string, got {type(v).__name__}")

    @field_validator('min_age', 'max_age', mode='before')
    @classmethod
    def validate_duration(cls, v) -> Union[timedelta, int, float]:
        """Accept Go-style duration strings besides numbers of seconds."""
        if v is None:
            return timedelta(0)
        if isinstance(v, str):
            return parse_duration(v)
        if isinstance(v, bool):
            raise ValueError("Duration must be a string, a number of seconds or a timedelta")
        return v

    @field_validator('min_age', 'max_age')
    @classmethod
    def validate_non_negative(cls, v: timedelta) -> timedelta:
        if v < timedelta(0):
            raise ValueError(f"Duration cannot be negative: {format_duration(v)}")
        if v > MAX_DURATION:
            raise ValueError(f"Duration too long: {format_duration(v)} exceeds {format_duration(MAX_DURATION)}")
        return v

    def has_constraints(self) -> bool:
        """Check whether any rule is configured at all."""
        return bool(
            self.pattern is not None
            or is_duration_set(self.min_age)
            or is_duration_set(self.max_age)
            or self.min_size
            or self.max_size
            or self.min_size_mb
            or self.max_size_mb
        )

    def get_warnings(self) -> List[str]:
        """
        Report constraint combinations that are legal but probably mistakes.

        Returns:
            List of warning messages (empty if nothing looks suspicious)
        """
        label = self.name or 'filter'
        warnings = []

        if not self.has_constraints():
            warnings.append(f"{label}: no constraints configured, every file will match")

        if (is_duration_set(self.min_age) and is_duration_set(self.max_age)
                and self.min_age > self.max_age):
            warnings.append(
                f"{label}: min_age ({format_duration(self.min_age)}) is greater than "
                f"max_age ({format_duration(self.max_age)}), no file can match"
            )

        if self.min_size and self.max_size and self.min_size > self.max_size:
            warnings.append(f"{label}: min_size ({self.min_size}) is greater than max_size ({self.max_size})")

        if self.min_size_mb and self.max_size_mb and self.min_size_mb > self.max_size_mb:
            warnings.append(
                f"{label}: min_size_mb ({self.min_size_mb}) is greater than max_size_mb ({self.max_size_mb})"
            )

        if self.min_size and self.min_size_mb:
            warnings.append(f"{label}: both min_size and min_size_mb are set, min_size is checked first")

        if self.max_size and self.max_size_mb:
            warnings.append(f"{label}: both max_size and max_size_mb are set, max_size is checked first")

        return warnings

    def describe(self) -> str:
        """Get a compact, human-readable description of the configured rules."""
        parts = []
        for key, value in self.to_dict().items():
            if key == 'name' or value is None:
                continue
            parts.append(f"{key}={value}")

        rules = ', '.join(parts) if parts else 'no constraints'
        if self.name:
            return f"{self.name} ({rules})"
        return rules

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the dictionary form used in YAML filter documents.

        Unset constraints are left out.
        """
        data: Dict[str, Any] = {}
        if self.name:
            data['name'] = self.name
        if self.pattern is not None:
            data['pattern'] = self.pattern.pattern
        if is_duration_set(self.min_age):
            data['min_age'] = format_duration(self.min_age)
        if is_duration_set(self.max_age):
            data['max_age'] = format_duration(self.max_age)
        if self.min_size:
            data['min_size'] = self.min_size
        if self.max_size:
            data['max_size'] = self.max_size
        if self.min_size_mb:
            data['min_size_mb'] = self.min_size_mb
        if self.max_size_mb:
            data['max_size_mb'] = self.max_size_mb
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FilterConfig':
        """Create a FilterConfig from a dictionary."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        return f"FilterConfig({self.describe()})"

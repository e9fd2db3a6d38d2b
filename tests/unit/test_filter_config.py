"""
Unit tests for filter configuration models.

Tests FilterConfig validation, duration parsing and formatting, and the
warnings reported for suspicious constraint combinations.
"""

import re
from datetime import timedelta
import pytest
from pydantic import ValidationError

from filefilter.models.config import (
    FilterConfig,
    MAX_DURATION,
    parse_duration,
    format_duration,
    is_duration_set
)


class TestParseDuration:
    """Test cases for Go-style duration parsing."""

    @pytest.mark.parametrize("text, expected", [
        ("30m", timedelta(minutes=30)),
        ("1h", timedelta(hours=1)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("2h45m10s", timedelta(hours=2, minutes=45, seconds=10)),
        ("1.5h", timedelta(hours=1, minutes=30)),
        ("250ms", timedelta(milliseconds=250)),
        ("10us", timedelta(microseconds=10)),
        ("10µs", timedelta(microseconds=10)),
        ("1500ns", timedelta(microseconds=1)),
        (".5s", timedelta(milliseconds=500)),
        ("0", timedelta(0)),
        ("-1h", -timedelta(hours=1)),
        (" 45s ", timedelta(seconds=45)),
    ])
    def test_valid_durations(self, text, expected):
        assert parse_duration(text) == expected

    @pytest.mark.parametrize("text", ["", "30", "1d", "h", "1h 30m", "abc", "-", "1.2.3s"])
    def test_invalid_durations(self, text):
        with pytest.raises(ValueError):
            parse_duration(text)

    def test_out_of_range_duration(self):
        with pytest.raises(ValueError, match="out of range"):
            parse_duration("99999999999999h")


class TestFormatDuration:
    """Test cases for duration formatting."""

    @pytest.mark.parametrize("value, expected", [
        (timedelta(0), "0s"),
        (timedelta(minutes=30), "30m0s"),
        (timedelta(hours=1, minutes=30), "1h30m0s"),
        (timedelta(seconds=1.5), "1.5s"),
        (timedelta(milliseconds=250), "250ms"),
        (timedelta(microseconds=7), "7µs"),
        (timedelta(days=1), "24h0m0s"),
    ])
    def test_format(self, value, expected):
        assert format_duration(value) == expected

    def test_format_parses_back(self):
        value = timedelta(hours=5, minutes=4, seconds=3)
        assert parse_duration(format_duration(value)) == value


class TestFilterConfig:
    """Test cases for FilterConfig."""

    def test_defaults_are_unset(self):
        config = FilterConfig()
        assert config.name is None
        assert config.pattern is None
        assert config.min_age == timedelta(0)
        assert config.max_age == timedelta(0)
        assert config.min_size == 0
        assert config.max_size == 0
        assert config.min_size_mb == 0.0
        assert config.max_size_mb == 0.0
        assert config.has_constraints() is False

    def test_pattern_compiled_eagerly(self):
        config = FilterConfig(pattern=r'^.*\.txt$')
        assert isinstance(config.pattern, re.Pattern)
        assert config.pattern.search('notes.txt')

    def test_precompiled_pattern_kept(self):
        pattern = re.compile(r'\.log$', re.IGNORECASE)
        config = FilterConfig(pattern=pattern)
        assert config.pattern is pattern

    def test_empty_pattern_is_unset(self):
        assert FilterConfig(pattern='').pattern is None

    def test_invalid_pattern(self):
        with pytest.raises(ValidationError, match="Invalid pattern"):
            FilterConfig(pattern='([unclosed')

    def test_pattern_must_be_string(self):
        with pytest.raises(ValidationError):
            FilterConfig(pattern=42)

    def test_duration_strings(self):
        config = FilterConfig(min_age='30m', max_age='2h')
        assert config.min_age == timedelta(minutes=30)
        assert config.max_age == timedelta(hours=2)

    def test_duration_seconds_and_timedelta(self):
        config = FilterConfig(min_age=90, max_age=timedelta(days=1))
        assert config.min_age == timedelta(seconds=90)
        assert config.max_age == timedelta(days=1)

    def test_invalid_duration(self):
        with pytest.raises(ValidationError):
            FilterConfig(min_age='thirty minutes')

    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError, match="negative"):
            FilterConfig(max_age='-1h')

    def test_duration_above_maximum_rejected(self):
        with pytest.raises(ValidationError, match="too long"):
            FilterConfig(max_age=10 ** 12)
        with pytest.raises(ValidationError, match="too long"):
            FilterConfig(min_age="9999999999h")
        with pytest.raises(ValidationError):
            FilterConfig(max_age="99999999999999h")

    def test_maximum_duration_accepted(self):
        assert FilterConfig(max_age=MAX_DURATION).max_age == MAX_DURATION

    @pytest.mark.parametrize("field", ['min_size', 'max_size', 'min_size_mb', 'max_size_mb'])
    def test_negative_sizes_rejected(self, field):
        with pytest.raises(ValidationError):
            FilterConfig(**{field: -1})

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            FilterConfig(min_sise=10)

    def test_immutable(self):
        config = FilterConfig(min_size=10)
        with pytest.raises(ValidationError):
            config.min_size = 20

    def test_is_duration_set(self):
        assert is_duration_set(timedelta(milliseconds=1))
        assert not is_duration_set(timedelta(microseconds=999))
        assert not is_duration_set(timedelta(0))

    def test_has_constraints(self):
        assert FilterConfig(pattern='x').has_constraints()
        assert FilterConfig(min_age='1s').has_constraints()
        assert FilterConfig(max_size_mb=0.5).has_constraints()
        assert not FilterConfig(name='only a name').has_constraints()

    def test_to_dict_skips_unset(self):
        config = FilterConfig(name='logs', pattern=r'\.log$', min_age='1h30m', min_size_mb=2)
        assert config.to_dict() == {
            'name': 'logs',
            'pattern': r'\.log$',
            'min_age': '1h30m0s',
            'min_size_mb': 2.0,
        }

    def test_from_dict_round_trip(self):
        config = FilterConfig(pattern='a', max_age='10m', min_size=1, max_size=9)
        assert FilterConfig.from_dict(config.to_dict()) == config

    def test_describe(self):
        assert FilterConfig().describe() == 'no constraints'
        assert FilterConfig(min_size=11).describe() == 'min_size=11'
        assert FilterConfig(name='big', min_size=11).describe() == 'big (min_size=11)'
        assert 'min_size=11' in str(FilterConfig(min_size=11))


class TestFilterConfigWarnings:
    """Test cases for suspicious combination warnings."""

    def test_no_warnings_for_sane_config(self):
        assert FilterConfig(pattern='x', min_age='1h', max_age='2h', min_size=1, max_size=2).get_warnings() == []

    def test_no_constraints(self):
        warnings = FilterConfig(name='all').get_warnings()
        assert len(warnings) == 1
        assert 'every file will match' in warnings[0]
        assert warnings[0].startswith('all:')

    def test_inverted_age_window(self):
        warnings = FilterConfig(min_age='2h', max_age='1h').get_warnings()
        assert any('min_age' in w and 'max_age' in w for w in warnings)

    def test_inverted_size_bounds(self):
        warnings = FilterConfig(min_size=10, max_size=5).get_warnings()
        assert any('min_size (10)' in w for w in warnings)

        warnings = FilterConfig(min_size_mb=10, max_size_mb=5).get_warnings()
        assert any('min_size_mb' in w for w in warnings)

    def test_both_units_in_same_direction(self):
        warnings = FilterConfig(min_size=10, min_size_mb=1).get_warnings()
        assert any('min_size is checked first' in w for w in warnings)

        warnings = FilterConfig(max_size=10, max_size_mb=1).get_warnings()
        assert any('max_size is checked first' in w for w in warnings)

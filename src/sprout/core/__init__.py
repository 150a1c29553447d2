"""Core components: records, time handling, configuration and errors."""

from .config import DEFAULT_CONFIG, Config, dump_config
from .errors import ConfigurationError, FetchError, RecordParseError, SproutError
from .records import (
    ActivityKind,
    ActivityRecord,
    DiaperRecord,
    FeedRecord,
    GenericRecord,
    SleepRecord,
    parse_record,
    primary_timestamp,
    record_to_dict,
)
from .time import Clock, FixedClock, SystemClock, TimeZoneSpec, resolve_timezone

__all__ = [
    "DEFAULT_CONFIG",
    "ActivityKind",
    "ActivityRecord",
    "Clock",
    "Config",
    "ConfigurationError",
    "DiaperRecord",
    "FeedRecord",
    "FetchError",
    "FixedClock",
    "GenericRecord",
    "RecordParseError",
    "SleepRecord",
    "SproutError",
    "SystemClock",
    "TimeZoneSpec",
    "dump_config",
    "parse_record",
    "primary_timestamp",
    "record_to_dict",
    "resolve_timezone",
]

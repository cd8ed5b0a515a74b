from .avgweather import (Aggregator, AggregatorClosedError, EmptyBucketError, HourBucket,
                         MonthBucket, RunningAverage, Sample, YearBucket)
from .csvloader import ColumnLayout, LoadResult, SourceError, collect_samples, load_samples, locate_columns

__all__ = [
    "Aggregator",
    "AggregatorClosedError",
    "EmptyBucketError",
    "HourBucket",
    "MonthBucket",
    "RunningAverage",
    "Sample",
    "YearBucket",
    "ColumnLayout",
    "LoadResult",
    "SourceError",
    "collect_samples",
    "load_samples",
    "locate_columns",
]

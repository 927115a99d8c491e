from xpq.aggregate.count import count_rows, count_rows_many
from xpq.aggregate.frequency import FrequencyCounter, count_frequencies, extract, resolve_columns
from xpq.aggregate.sampler import ReservoirSampler, sample, validate_sample_size

__all__ = [
    "FrequencyCounter",
    "ReservoirSampler",
    "count_frequencies",
    "count_rows",
    "count_rows_many",
    "extract",
    "resolve_columns",
    "sample",
    "validate_sample_size",
]

"""
Metrics module for per-brand visibility aggregation.

Public API:
    - aggregate: Compute MetricsRecords for a batch of answers
    - rank_records: Sort records by any numeric metric
    - safe_ratio: Division helper that never raises or returns NaN
"""

from .aggregator import aggregate, rank_records, safe_ratio

__all__ = [
    "aggregate",
    "rank_records",
    "safe_ratio",
]

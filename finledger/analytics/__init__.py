"""Analytics package: dashboard aggregations."""

from finledger.analytics.aggregator import (
    MONTH_LABELS,
    WEEKDAY_LABELS,
    AnalyticsAggregator,
    month_label,
    resolve_timezone,
    weekday_label,
)

__all__ = [
    "MONTH_LABELS",
    "WEEKDAY_LABELS",
    "AnalyticsAggregator",
    "month_label",
    "resolve_timezone",
    "weekday_label",
]

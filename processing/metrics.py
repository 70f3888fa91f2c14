"""
Prometheus metrics for the processing layer.
"""

from prometheus_client import Counter, Gauge, Histogram

AGGREGATION_PASSES = Counter(
    'board_aggregation_passes_total',
    'Airport statistics recomputations'
)

AGGREGATION_LATENCY = Histogram(
    'board_aggregation_latency_seconds',
    'Airport statistics computation time',
    buckets=[0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25]
)

AIRPORTS_WITH_TRAFFIC = Gauge(
    'board_airports_with_traffic',
    'Airports with at least one arrival or departure in the last pass'
)

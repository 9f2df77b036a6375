"""
Prometheus metrics for the achievement & progress engine.

- Check metrics: how often checks run, how long they take, how they end
- Unlock metrics: achievements unlocked, duplicate unlock rejections, points awarded
- Aggregation metrics: metrics that degraded to 0 because their query failed

Expose them with prometheus_client.start_http_server() or the host
application's /metrics endpoint.
"""

import logging
from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

# =============================================================================
# Check Metrics
# =============================================================================

achievement_checks_total = Counter(
    "achievement_checks_total",
    "Total achievement checks run",
    ["status"],  # status: success/error/anonymous
)

achievement_check_duration_seconds = Histogram(
    "achievement_check_duration_seconds",
    "Achievement check duration in seconds",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

# =============================================================================
# Unlock Metrics
# =============================================================================

achievements_unlocked_total = Counter(
    "achievements_unlocked_total",
    "Total achievements unlocked",
    ["category"],
)

achievement_duplicate_unlocks_total = Counter(
    "achievement_duplicate_unlocks_total",
    "Unlock inserts rejected because the user already had the achievement",
)

achievement_unlock_failures_total = Counter(
    "achievement_unlock_failures_total",
    "Unlock inserts that failed with an error",
)

achievement_points_awarded_total = Counter(
    "achievement_points_awarded_total",
    "Total points credited for achievement unlocks",
)

# =============================================================================
# Aggregation Metrics
# =============================================================================

achievement_metric_degraded_total = Counter(
    "achievement_metric_degraded_total",
    "Activity metrics that fell back to 0 because their query failed",
    ["field"],
)

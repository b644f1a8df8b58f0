"""
Prometheus metrics for quotes, booking creation and booking lifecycle transitions.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Example:
    >>> from booking_engine.metrics import pricing_duration, quotes_total
    >>> with pricing_duration.time():
    ...     result = calculate_pricing(repo, prop, check_in, check_out, adults)
    >>> quotes_total.labels(status="success").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Pricing Metrics
# =============================================================================

quotes_total = Counter(
    "rentals_price_quotes_total",
    "Total number of price quotes computed",
    ["status"],
)
"""
Counter for price quotes.

Labels:
    status: success, or the error kind that rejected the quote
"""

pricing_duration = Histogram(
    "rentals_pricing_duration_seconds",
    "Time spent computing a price breakdown, availability check included",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, float("inf")),
)

# =============================================================================
# Booking Metrics
# =============================================================================

bookings_created = Counter(
    "rentals_bookings_created_total",
    "Total number of bookings created",
)

booking_conflicts = Counter(
    "rentals_booking_conflicts_total",
    "Booking creations or re-datings rejected because the dates were taken",
)

booking_transitions = Counter(
    "rentals_booking_transitions_total",
    "Booking state machine actions attempted",
    ["action", "status"],
)
"""
Counter for state machine actions.

Labels:
    action: approve, reject, confirm, check_in, check_out, complete, cancel, update
    status: success, or the error kind that rejected the action
"""

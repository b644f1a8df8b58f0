"""
Prometheus metrics endpoint for monitoring and observability.

This module provides a FastAPI route that exposes Prometheus metrics in the
standard text-based format for scraping by Prometheus servers.

Example:
    GET /metrics

    Response:
        # HELP rentals_bookings_created_total Total number of bookings created
        # TYPE rentals_bookings_created_total counter
        rentals_bookings_created_total 42.0
        ...
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text-based exposition format. This endpoint
    should be scraped by Prometheus at regular intervals (e.g., every 15-30 seconds).

    Returns:
        Response: Metrics in Prometheus format with Content-Type: text/plain

    Example Response:
        # HELP rentals_price_quotes_total Total number of price quotes computed
        # TYPE rentals_price_quotes_total counter
        rentals_price_quotes_total{status="success"} 118.0
        rentals_price_quotes_total{status="PropertyUnavailableError"} 7.0

        # HELP rentals_pricing_duration_seconds Time spent computing a price breakdown
        # TYPE rentals_pricing_duration_seconds histogram
        rentals_pricing_duration_seconds_bucket{le="0.005"} 96.0
        ...
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

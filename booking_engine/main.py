# booking_engine/main.py

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from booking_engine.config import ALLOWED_ORIGINS
from booking_engine.logging_config import setup_logging
from booking_engine.middleware import RequestIDMiddleware
from booking_engine.routes.bookings import router as bookings_router
from booking_engine.routes.health import router as health_router
from booking_engine.routes.metrics import router as metrics_router
from booking_engine.routes.properties import router as properties_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Rental Booking API",
    description="Availability, pricing and booking lifecycle for rental properties",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(properties_router, tags=["Properties"])
app.include_router(bookings_router, tags=["Bookings"])

logger.info("app_initialized", routes=len(app.routes))

import os
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

# A bare postgresql:// scheme resolves to psycopg 3 on SQLAlchemy 2.1; pin psycopg2
if DATABASE_URL.startswith("postgresql://"):
    DATABASE_URL = "postgresql+psycopg2://" + DATABASE_URL[len("postgresql://"):]

SCHEMA = "rentals"

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS")
if not ALLOWED_ORIGINS_RAW:
    raise ValueError("ALLOWED_ORIGINS must be set in the environment")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",")
]

# Applied when a property has no service fee rate of its own
DEFAULT_SERVICE_FEE_RATE = Decimal(os.getenv("DEFAULT_SERVICE_FEE_RATE", "0.05"))

BOOKING_NUMBER_PREFIX = os.getenv("BOOKING_NUMBER_PREFIX", "BK")

# How long a checked-out booking waits before the sweep job completes it
AUTO_COMPLETE_AFTER_SECONDS = int(os.getenv("AUTO_COMPLETE_AFTER_SECONDS", "0"))

import logging
import os

from dotenv import load_dotenv

load_dotenv()

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
ANALYTICS_ENDPOINT = os.getenv("ANALYTICS_ENDPOINT")
METRICS_STORE_PATH = os.getenv("METRICS_STORE_PATH", "performance_metrics.json")
ACTIVITY_FEED_MAX_ITEMS = int(os.getenv("ACTIVITY_FEED_MAX_ITEMS", "10"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


def is_production() -> bool:
    return APP_ENV == "production"


def configure_logging():
    """Configure root logging once for the whole service."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

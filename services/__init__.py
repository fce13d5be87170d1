"""
Services package for Seraglio
"""

from services.errors import SeraglioError, StorageError, NotFoundError, ValidationError
from services.config import BotConfig
from services.session_store import SessionStore
from services.session_tracker import SessionTracker
from services.duration_aggregator import DurationAggregator
from services.shutdown_reconciler import ShutdownReconciler
from services.stats_service import StatsService

__all__ = [
    "SeraglioError",
    "StorageError",
    "NotFoundError",
    "ValidationError",
    "BotConfig",
    "SessionStore",
    "SessionTracker",
    "DurationAggregator",
    "ShutdownReconciler",
    "StatsService"
]

"""
Utilities package for Seraglio
"""

from utils.clock import utcnow
from utils.duration_format import format_duration

__all__ = ["utcnow", "format_duration"]

"""
Shared Utility Functions for the Free-Time Service

Provides common utilities for date/time processing, timezone normalization,
response envelopes, hashing, serialization and execution timing used across
the availability engine, the cache and the HTTP layer.
"""

import hashlib
import inspect
import json
import logging
from datetime import datetime, date, time
from enum import Enum
from functools import wraps
from typing import Any, Dict, Optional

import pytz

from ..engine.errors import FreeTimeError

# Configure module logger
logger = logging.getLogger(__name__)

# =============================================================================
# Date and Time Utilities
# =============================================================================

def calculate_duration(start_time: datetime, end_time: datetime) -> int:
    """Calculate duration between two datetimes in whole minutes"""
    return int((end_time - start_time).total_seconds() // 60)

def format_duration(minutes: int) -> str:
    """Format duration in minutes to human-readable string"""
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    elif minutes < 1440:  # Less than 24 hours
        hours = minutes // 60
        remaining_minutes = minutes % 60
        if remaining_minutes == 0:
            return f"{hours} hour{'s' if hours != 1 else ''}"
        return f"{hours} hour{'s' if hours != 1 else ''} and {remaining_minutes} minute{'s' if remaining_minutes != 1 else ''}"
    else:  # Days
        days = minutes // 1440
        remaining_hours = (minutes % 1440) // 60
        if remaining_hours == 0:
            return f"{days} day{'s' if days != 1 else ''}"
        return f"{days} day{'s' if days != 1 else ''} and {remaining_hours} hour{'s' if remaining_hours != 1 else ''}"

def format_time_slot(start_time: datetime, end_time: datetime) -> str:
    """Format a slot as e.g. 'Monday 08:00-09:00 (60min)'"""
    minutes = calculate_duration(start_time, end_time)
    return f"{start_time.strftime('%A')} {start_time.strftime('%H:%M')}-{end_time.strftime('%H:%M')} ({minutes}min)"

def parse_clock_time(value: str) -> time:
    """
    Parse a wall-clock time such as '08:00' or '8:30'

    Raises:
        ValueError: if the value is not an HH:MM time
    """
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid clock time '{value}', expected HH:MM") from e

def normalize_to_zone(value: datetime, timezone_str: str = "UTC") -> datetime:
    """
    Convert a timestamp into naive wall-clock time of the reference zone

    Naive timestamps are assumed to already be expressed in the reference zone
    and are returned unchanged (minus seconds and microseconds).
    """
    if value.tzinfo is not None:
        tz = pytz.timezone(timezone_str)
        value = value.astimezone(tz).replace(tzinfo=None)
    return value.replace(second=0, microsecond=0)

# =============================================================================
# Response Envelopes
# =============================================================================

def create_error_response(
    error_message: str,
    error_code: str = "GENERAL_ERROR",
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Create standardized error response"""
    return {
        "success": False,
        "error": {
            "message": error_message,
            "code": error_code,
            "details": details or {},
            "timestamp": datetime.now().isoformat()
        }
    }

def create_success_response(
    data: Any = None,
    message: str = "Operation completed successfully"
) -> Dict[str, Any]:
    """Create standardized success response"""
    return {
        "success": True,
        "message": message,
        "data": data,
        "timestamp": datetime.now().isoformat()
    }

# =============================================================================
# Hashing and Serialization Utilities
# =============================================================================

def create_hash(data: str, salt: Optional[str] = None) -> str:
    """Create SHA-256 hash of data with optional salt"""
    if salt:
        data = f"{data}{salt}"
    return hashlib.sha256(data.encode()).hexdigest()

def safe_json_serialize(data: Any) -> str:
    """Serialize data to JSON with datetime and enum handling"""
    def json_serializer(obj):
        if isinstance(obj, (datetime, date, time)):
            return obj.isoformat()
        elif isinstance(obj, Enum):
            return obj.value
        elif hasattr(obj, 'to_dict'):
            return obj.to_dict()
        raise TypeError(f"Object of type {type(obj)} is not JSON serializable")

    return json.dumps(data, default=json_serializer, ensure_ascii=False, sort_keys=True)

# =============================================================================
# Performance Utilities
# =============================================================================

def measure_execution_time(func):
    """Decorator to measure function execution time"""
    @wraps(func)
    async def async_wrapper(*args, **kwargs):
        start_time = datetime.now()
        try:
            result = await func(*args, **kwargs)
            execution_time = (datetime.now() - start_time).total_seconds()
            logger.debug(f"{func.__name__} executed in {execution_time:.3f} seconds")
            return result
        except FreeTimeError as e:
            logger.debug(f"{func.__name__} rejected input: {e.code} {e.message}")
            raise
        except Exception as e:
            execution_time = (datetime.now() - start_time).total_seconds()
            logger.error(f"{func.__name__} failed after {execution_time:.3f} seconds: {str(e)}")
            raise

    @wraps(func)
    def sync_wrapper(*args, **kwargs):
        start_time = datetime.now()
        try:
            result = func(*args, **kwargs)
            execution_time = (datetime.now() - start_time).total_seconds()
            logger.debug(f"{func.__name__} executed in {execution_time:.3f} seconds")
            return result
        except FreeTimeError as e:
            logger.debug(f"{func.__name__} rejected input: {e.code} {e.message}")
            raise
        except Exception as e:
            execution_time = (datetime.now() - start_time).total_seconds()
            logger.error(f"{func.__name__} failed after {execution_time:.3f} seconds: {str(e)}")
            raise

    if inspect.iscoroutinefunction(func):
        return async_wrapper
    else:
        return sync_wrapper

# =============================================================================
# Export all utility functions
# =============================================================================

__all__ = [
    # Date/Time utilities
    'calculate_duration',
    'format_duration',
    'format_time_slot',
    'parse_clock_time',
    'normalize_to_zone',

    # Responses
    'create_error_response',
    'create_success_response',

    # Hashing / serialization
    'create_hash',
    'safe_json_serialize',

    # Performance
    'measure_execution_time'
]

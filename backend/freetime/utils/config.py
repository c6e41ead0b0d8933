"""
Free-Time Service Configuration Management
Handles environment variables, engine defaults and API settings
"""

import os
import logging
from typing import Dict, Any, List, Tuple
from dataclasses import dataclass
from datetime import time
from pathlib import Path

import pytz

from .helpers import parse_clock_time

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def _env_clock(name: str, default: str) -> time:
    return parse_clock_time(os.getenv(name, default))

@dataclass
class EngineConfig:
    """Availability engine defaults"""
    working_hours_start: time
    working_hours_end: time
    min_duration_minutes: int
    max_suggestions: int
    max_meeting_length_minutes: int
    preferred_band_start: time
    preferred_band_end: time
    duration_weight: float
    time_of_day_weight: float
    band_falloff_minutes: int
    monthly_mode: str
    reference_timezone: str

    @classmethod
    def from_env(cls) -> 'EngineConfig':
        return cls(
            working_hours_start=_env_clock('WORKING_HOURS_START', '08:00'),
            working_hours_end=_env_clock('WORKING_HOURS_END', '22:00'),
            min_duration_minutes=int(os.getenv('MIN_DURATION_MINUTES', '30')),
            max_suggestions=int(os.getenv('MAX_SUGGESTIONS', '5')),
            max_meeting_length_minutes=int(os.getenv('MAX_MEETING_LENGTH_MINUTES', '120')),
            preferred_band_start=_env_clock('PREFERRED_BAND_START', '11:00'),
            preferred_band_end=_env_clock('PREFERRED_BAND_END', '14:00'),
            duration_weight=float(os.getenv('RANKING_DURATION_WEIGHT', '0.6')),
            time_of_day_weight=float(os.getenv('RANKING_TIME_OF_DAY_WEIGHT', '0.4')),
            band_falloff_minutes=int(os.getenv('BAND_FALLOFF_MINUTES', '240')),
            monthly_mode=os.getenv('MONTHLY_RECURRENCE_MODE', 'four_week'),
            reference_timezone=os.getenv('REFERENCE_TIMEZONE', 'UTC')
        )

@dataclass
class CacheConfig:
    """Result cache configuration"""
    enabled: bool
    ttl_seconds: int
    max_entries: int

    @classmethod
    def from_env(cls) -> 'CacheConfig':
        return cls(
            enabled=os.getenv('AVAILABILITY_CACHE_ENABLED', 'True').lower() == 'true',
            ttl_seconds=int(os.getenv('AVAILABILITY_CACHE_TTL', '300')),
            max_entries=int(os.getenv('AVAILABILITY_CACHE_MAX_ENTRIES', '1024'))
        )

@dataclass
class APIConfig:
    """FastAPI Application Configuration"""
    host: str
    port: int
    debug: bool
    cors_origins: List[str]
    log_level: str

    @classmethod
    def from_env(cls) -> 'APIConfig':
        return cls(
            host=os.getenv('API_HOST', '0.0.0.0'),
            port=int(os.getenv('API_PORT', '8000')),
            debug=os.getenv('DEBUG', 'False').lower() == 'true',
            cors_origins=os.getenv('CORS_ORIGINS', 'http://localhost:3000').split(','),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper()
        )

class Config:
    """Main Configuration Manager"""

    def __init__(self):
        self.load_environment()

        # Load all configuration sections
        self.engine = EngineConfig.from_env()
        self.cache = CacheConfig.from_env()
        self.api = APIConfig.from_env()

        # Validate critical configurations
        self.validate_config()

    def load_environment(self) -> None:
        """Load environment variables from .env file if it exists"""
        env_path = Path(__file__).parent.parent / 'config' / '.env'

        if env_path.exists():
            with open(env_path, 'r') as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith('#') and '=' in line:
                        key, value = line.split('=', 1)
                        os.environ.setdefault(key.strip(), value.strip())
            logger.info(f"Loaded environment from {env_path}")

    def validate_config(self) -> None:
        """Validate configuration values"""
        errors = []
        engine = self.engine

        if engine.working_hours_start >= engine.working_hours_end:
            errors.append("WORKING_HOURS_START must be before WORKING_HOURS_END")
        if engine.preferred_band_start >= engine.preferred_band_end:
            errors.append("PREFERRED_BAND_START must be before PREFERRED_BAND_END")
        if engine.min_duration_minutes <= 0:
            errors.append("MIN_DURATION_MINUTES must be positive")
        if engine.max_suggestions < 0:
            errors.append("MAX_SUGGESTIONS cannot be negative")
        if engine.max_meeting_length_minutes <= 0:
            errors.append("MAX_MEETING_LENGTH_MINUTES must be positive")
        if engine.band_falloff_minutes <= 0:
            errors.append("BAND_FALLOFF_MINUTES must be positive")
        if engine.duration_weight < 0 or engine.time_of_day_weight < 0:
            errors.append("Ranking weights cannot be negative")
        elif engine.duration_weight + engine.time_of_day_weight <= 0:
            errors.append("Ranking weights must sum to a positive value")
        if engine.monthly_mode not in ('four_week', 'calendar'):
            errors.append("MONTHLY_RECURRENCE_MODE must be 'four_week' or 'calendar'")
        if engine.reference_timezone not in pytz.all_timezones_set:
            errors.append(f"Unknown REFERENCE_TIMEZONE '{engine.reference_timezone}'")

        if self.cache.ttl_seconds <= 0:
            errors.append("AVAILABILITY_CACHE_TTL must be positive")
        if self.cache.max_entries <= 0:
            errors.append("AVAILABILITY_CACHE_MAX_ENTRIES must be positive")

        if self.api.log_level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            errors.append(f"Unknown LOG_LEVEL '{self.api.log_level}'")

        if errors:
            error_msg = "Configuration validation failed:\n" + "\n".join(f"- {error}" for error in errors)
            logger.error(error_msg)
            raise ValueError(error_msg)

        logger.info("Configuration validation passed")

    def ranking_weights(self) -> Tuple[float, float]:
        """(duration, time of day) weights for the suggestion ranker"""
        return self.engine.duration_weight, self.engine.time_of_day_weight

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return os.getenv('ENVIRONMENT', 'development') == 'production'

    def get_log_config(self) -> Dict[str, Any]:
        """Get logging configuration"""
        return {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                },
            },
            'handlers': {
                'default': {
                    'formatter': 'default',
                    'class': 'logging.StreamHandler',
                    'stream': 'ext://sys.stdout',
                },
            },
            'root': {
                'level': self.api.log_level,
                'handlers': ['default'],
            },
        }

# Global configuration instance
config = Config()

# Export commonly used configurations
__all__ = [
    'config',
    'EngineConfig',
    'CacheConfig',
    'APIConfig',
    'Config'
]

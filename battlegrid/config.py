"""Engine configuration using environment variables."""
import logging
import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

# Fewest line divisions that leave an interior sample point
MIN_COVER_SAMPLES = 2


class Settings:
    """Engine settings loaded from environment variables."""

    def __init__(self):
        # Grid defaults
        self.FEET_PER_CELL: int = int(os.getenv("BATTLEGRID_FEET_PER_CELL", "5"))

        # Cover sampling resolution (divisions per corner-to-corner line)
        self.COVER_SAMPLES: int = int(os.getenv("BATTLEGRID_COVER_SAMPLES", "20"))

        # Logging
        self.LOG_LEVEL: str = os.getenv("BATTLEGRID_LOG_LEVEL", "WARNING").upper()
        self.DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

        self._validate()

    def _validate(self) -> None:
        # battlegrid.core imports this module, so its errors load lazily
        from battlegrid.core.errors import GridConfigError

        if self.COVER_SAMPLES < MIN_COVER_SAMPLES:
            raise GridConfigError(
                "BATTLEGRID_COVER_SAMPLES",
                self.COVER_SAMPLES,
                f"must be at least {MIN_COVER_SAMPLES}"
            )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str = None) -> None:
    """Apply the configured log level to the engine's loggers."""
    settings = get_settings()
    if level is None:
        level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL
    logging.getLogger("battlegrid").setLevel(level)

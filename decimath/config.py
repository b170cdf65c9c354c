"""
Library configuration module.
Loads environment variables and provides library-wide defaults.

Settings are re-read on every get_settings() call: nothing here is a mutable
process-wide singleton, callers pass the resulting values explicitly.
"""
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get project root (one level up from this package)
PROJECT_ROOT = Path(__file__).parent.parent

# Largest row/column count a Matrix accepts (signed 32-bit index range)
MAX_INDEX_DIMENSION = 2 ** 31 - 1

# Values up to this many plain-form digits never consult Settings.MAX_DIGITS
MIN_DIGIT_LIMIT = 10_000


class Settings(BaseSettings):
    """
    Library settings loaded from environment variables or .env file.
    (Note: Environment variables take precedence over .env file)

    Every variable is prefixed with DECIMATH_, e.g. DECIMATH_DEFAULT_PRECISION=50.
    """
    # Precision context
    DEFAULT_PRECISION: int = 100  # Significant digits for division, roots, inexact powers
    DEFAULT_ROUNDING: str = "HALF_UP"  # Name of a RoundingPolicy member
    MAX_DIGITS: int = Field(1_000_000, ge=MIN_DIGIT_LIMIT)  # Longest plain digit string a value may expand to

    # Locale
    DEFAULT_LOCALE: str = "en_US"  # Babel identifier used when none is given

    # Matrix engine
    COFACTOR_EXPANSION_LIMIT: int = 5  # Larger determinants switch to Bareiss elimination
    MAX_MATRIX_DIMENSION: int = MAX_INDEX_DIMENSION

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="DECIMATH_",
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra="ignore",
        )


def get_settings() -> Settings:
    """
    Get settings instance.

    Returns:
        Settings: Library settings, freshly loaded from the environment
    """
    return Settings()

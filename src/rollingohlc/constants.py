"""Core constants for rollingohlc."""

from enum import Enum


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class RecordErrorPolicy(str, Enum):
    """What the driver does with a record it cannot use."""

    SKIP = "skip"
    FAIL = "fail"


# ============================================
# Aggregation Defaults
# ============================================

MIN_SAMPLES = 4
PRICE_DECIMALS = 6
MAX_PRICE_EXPONENT = 308  # double range
DEFAULT_WINDOW_SIZE = 60

# ============================================
# Application Constants
# ============================================

APP_NAME = "rollingohlc"
DEFAULT_CONFIG_PATH = "config/config.yaml"
DEFAULT_INPUT_PATH = "data.txt"
DEFAULT_OUTPUT_PATH = "Output.txt"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_FORMAT_JSON = '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'

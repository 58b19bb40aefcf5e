"""OIFLOW system configuration loaded from environment variables."""
import os
from typing import Dict, List
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# ============================================================================
# Instrument Registry
# ============================================================================

INSTRUMENT_CONFIG: Dict[str, Dict] = {
    'NIFTY': {
        'broker_symbol': 'NSE:NIFTY50-INDEX',
        'lot_size': 25,
        'tick_size': 50,
        'label': 'NIFTY 50',
    },
    'BANKNIFTY': {
        'broker_symbol': 'NSE:NIFTYBANK-INDEX',
        'lot_size': 15,
        'tick_size': 100,
        'label': 'BANK NIFTY',
    },
    'SENSEX': {
        'broker_symbol': 'BSE:SENSEX-INDEX',
        'lot_size': 10,
        'tick_size': 100,
        'label': 'SENSEX',
    },
}

INSTRUMENTS: List[str] = [
    s.strip().upper()
    for s in os.getenv('INSTRUMENTS', 'NIFTY,BANKNIFTY,SENSEX').split(',')
    if s.strip()
]

# ============================================================================
# Polling Parameters
# ============================================================================

STRIKE_RANGES: List[int] = [int(r) for r in os.getenv('STRIKE_RANGES', '5,10').split(',')]
DEFAULT_STRIKE_RANGE = int(os.getenv('DEFAULT_STRIKE_RANGE', '10'))
REFRESH_INTERVALS: List[int] = [int(r) for r in os.getenv('REFRESH_INTERVALS', '5,10,15').split(',')]

# ============================================================================
# Engine Parameters
# ============================================================================

VOLATILITY_BUFFER_SIZE = int(os.getenv('VOLATILITY_BUFFER_SIZE', '10'))
DEFAULT_ELAPSED_SECONDS = float(os.getenv('DEFAULT_ELAPSED_SECONDS', '5'))
MAX_ELAPSED_SECONDS = float(os.getenv('MAX_ELAPSED_SECONDS', '3600'))
DOMINANCE_THRESHOLD_PCT = float(os.getenv('DOMINANCE_THRESHOLD_PCT', '60'))
PRESSURE_LABEL_THRESHOLD = float(os.getenv('PRESSURE_LABEL_THRESHOLD', '0.2'))

# ============================================================================
# Logging Configuration
# ============================================================================

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
LOG_FILE = os.getenv('LOG_FILE', '')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'detailed')


def get_instrument_config(instrument: str) -> Dict:
    """Return registry entry for an instrument (KeyError if unknown)."""
    key = instrument.upper()
    if key not in INSTRUMENT_CONFIG:
        raise KeyError(f"Unknown instrument: {instrument}")
    return INSTRUMENT_CONFIG[key]


def get_tick_size(instrument: str) -> float:
    return float(get_instrument_config(instrument)['tick_size'])


def validate_strike_range(strike_range: int) -> int:
    """Return the range unchanged if allowed, otherwise raise ValueError."""
    if strike_range not in STRIKE_RANGES:
        allowed = ', '.join(str(r) for r in STRIKE_RANGES)
        raise ValueError(f"Invalid strike range {strike_range}. Use one of: {allowed}")
    return strike_range


# ============================================================================
# Validation
# ============================================================================

def validate_config() -> None:
    """Validate configuration values."""
    errors = []

    unknown = [s for s in INSTRUMENTS if s not in INSTRUMENT_CONFIG]
    if unknown:
        errors.append(f"INSTRUMENTS contains unknown symbols: {', '.join(unknown)}")

    if not STRIKE_RANGES or any(r <= 0 for r in STRIKE_RANGES):
        errors.append("STRIKE_RANGES must be positive integers")

    if DEFAULT_STRIKE_RANGE not in STRIKE_RANGES:
        errors.append("DEFAULT_STRIKE_RANGE must be one of STRIKE_RANGES")

    if VOLATILITY_BUFFER_SIZE < 1:
        errors.append("VOLATILITY_BUFFER_SIZE must be at least 1")

    if not (0 < DEFAULT_ELAPSED_SECONDS <= MAX_ELAPSED_SECONDS):
        errors.append("DEFAULT_ELAPSED_SECONDS must be in (0, MAX_ELAPSED_SECONDS]")

    if not (0 < DOMINANCE_THRESHOLD_PCT <= 100):
        errors.append("DOMINANCE_THRESHOLD_PCT must be between 0 and 100")

    if not (0 <= PRESSURE_LABEL_THRESHOLD <= 1):
        errors.append("PRESSURE_LABEL_THRESHOLD must be between 0 and 1")

    if errors:
        raise ValueError("Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors))


# ============================================================================
# Logging Setup
# ============================================================================

def setup_logging() -> None:
    """Configure logging based on config settings."""
    import logging
    import sys

    level = getattr(logging, LOG_LEVEL, logging.INFO)

    if LOG_FORMAT == 'json':
        format_string = '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "message": "%(message)s"}'
    elif LOG_FORMAT == 'detailed':
        format_string = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    else:  # simple
        format_string = '%(levelname)s: %(message)s'

    handlers = []

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(logging.Formatter(format_string))
    handlers.append(stdout_handler)

    if LOG_FILE:
        file_handler = logging.FileHandler(LOG_FILE)
        file_handler.setFormatter(logging.Formatter(format_string))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        force=True
    )

    logging.getLogger('oiflow').setLevel(level)


# ============================================================================
# Initialization
# ============================================================================

validate_config()

setup_logging()

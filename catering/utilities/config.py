"""Configuration management for the catering pricing engine."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'INFO').upper()

# Pricing
TAX_RATE: Final[float] = float(os.getenv('TAX_RATE', '0.08'))
MAX_REMOVAL_CREDIT_PERCENTAGE: Final[float] = float(os.getenv('MAX_REMOVAL_CREDIT_PERCENTAGE', '0.20'))
CAULIFLOWER_UPCHARGE: Final[float] = float(os.getenv('CAULIFLOWER_UPCHARGE', '0.50'))
DEFAULT_GUEST_COUNT: Final[int] = int(os.getenv('DEFAULT_GUEST_COUNT', '10'))

# Recalculation / caching
DEBOUNCE_MS: Final[int] = int(os.getenv('DEBOUNCE_MS', '150'))
CATALOG_TTL_SECONDS: Final[float] = float(os.getenv('CATALOG_TTL_SECONDS', '300'))
SESSION_IDLE_SECONDS: Final[float] = float(os.getenv('SESSION_IDLE_SECONDS', '3600'))

# Packaging (units covered by one 1.5oz on-the-side sauce container)
SAUCE_COVERAGE_RATIOS: Final[dict[str, int]] = {
    "dry": int(os.getenv('SAUCE_RATIO_DRY', '18')),
    "thin": int(os.getenv('SAUCE_RATIO_THIN', '15')),
    "thick": int(os.getenv('SAUCE_RATIO_THICK', '12')),
    "creamy": int(os.getenv('SAUCE_RATIO_CREAMY', '10')),
    "default": int(os.getenv('SAUCE_RATIO_DEFAULT', '13')),
}
DIP_PACK_SIZE: Final[int] = int(os.getenv('DIP_PACK_SIZE', '5'))

# Smart defaults
SECONDARY_SPLIT_RATIO: Final[float] = float(os.getenv('SECONDARY_SPLIT_RATIO', '0.6'))

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('CATERING_DATA_DIR', str(BASE_DIR / 'data')))

from catering.utilities.config import DATA_DIR

# Centralized paths for data files (single source of truth)
PACKAGES_FILE = DATA_DIR / 'packages.json'
CATALOG_FILE = DATA_DIR / 'catalog.json'
SESSIONS_FILE = DATA_DIR / 'sessions.json'

__all__ = ['DATA_DIR', 'PACKAGES_FILE', 'CATALOG_FILE', 'SESSIONS_FILE']

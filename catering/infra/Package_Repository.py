"""Package repository: loads the package definitions sessions are built from."""
import json
import logging
from pathlib import Path
from typing import Dict

from catering.domain.Package import Package
from catering.infra.paths import PACKAGES_FILE
from catering.utilities.errors import UnknownPackageError

logger = logging.getLogger(__name__)


def reading_from_packages(path: Path = PACKAGES_FILE) -> Dict[str, Package]:
    """Read packages from JSON file with proper error handling."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            packages_data = json.load(f)
        packages = [Package.from_dict(entry) for entry in packages_data]
        return {p.id: p for p in packages}
    except FileNotFoundError:
        logger.warning(f"Packages file not found: {path}. Returning empty catalog.")
        return {}
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in packages file: {e}")
        return {}


def get_package(package_id: str, path: Path = PACKAGES_FILE) -> Package:
    packages = reading_from_packages(path)
    if package_id not in packages:
        raise UnknownPackageError(package_id)
    return packages[package_id]

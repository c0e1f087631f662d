"""Catalog access: JSON-backed source plus a time-boxed cache.

The catalog itself is an external collaborator; the engine only needs
get_items_by_category(category, tier=None) returning active items:
    {id, name, unit_price, variants, servings, allergens, active, variant_info?}
"""
import json
import logging
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from catering.domain.Category import Category
from catering.infra.paths import CATALOG_FILE
from catering.utilities.config import CATALOG_TTL_SECONDS
from catering.utilities.errors import CatalogError

logger = logging.getLogger(__name__)


def _active_for_tier(items: List[dict], tier: Optional[int]) -> List[dict]:
    selected = []
    for item in items:
        if not item.get("active", True):
            continue
        tiers = item.get("tiers")
        if tier is not None and tiers and tier not in tiers:
            continue
        selected.append(dict(item))
    return selected


class JsonCatalogSource:
    """Reads the catalog from a JSON file shaped {category: [items]}."""

    def __init__(self, path: Path = CATALOG_FILE):
        self.path = Path(path)

    def _load(self) -> Dict[str, List[dict]]:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise CatalogError(f"Catalog file not found: {self.path}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CatalogError(f"Invalid JSON in catalog file: {e}") from e
        except OSError as e:
            raise CatalogError(f"Catalog file unreadable: {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise CatalogError("Catalog file must contain an object keyed by category")
        return data

    def get_items_by_category(self, category: Category, tier: Optional[int] = None) -> List[dict]:
        category = Category.parse(category)
        data = self._load()
        items = data.get(category.value, [])
        return _active_for_tier(items, tier)


class DictCatalogSource:
    """In-memory catalog (tests, fixtures, or catalogs fetched elsewhere)."""

    def __init__(self, data: Dict[str, List[dict]]):
        self.data = {Category.parse(k).value: list(v) for k, v in (data or {}).items()}
        self.reads = 0

    def get_items_by_category(self, category: Category, tier: Optional[int] = None) -> List[dict]:
        self.reads += 1
        return _active_for_tier(self.data.get(Category.parse(category).value, []), tier)


class CatalogCache:
    """Caches category reads for ttl seconds; invalidate() drops everything (e.g. on package change)."""

    def __init__(self, source, ttl: float = CATALOG_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.source = source
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[Tuple[Category, Optional[int]], Tuple[float, List[dict]]] = {}

    def get_items_by_category(self, category: Category, tier: Optional[int] = None) -> List[dict]:
        key = (Category.parse(category), tier)
        now = self._clock()
        cached = self._entries.get(key)
        if cached is not None and now - cached[0] < self.ttl:
            return [dict(i) for i in cached[1]]
        items = self.source.get_items_by_category(key[0], tier)
        self._entries[key] = (now, [dict(i) for i in items])
        logger.debug(f"Catalog cache refreshed for {key[0].value} ({len(items)} items)")
        return [dict(i) for i in items]

    def invalidate(self) -> None:
        self._entries.clear()
        logger.info("Catalog cache invalidated")


__all__ = ['JsonCatalogSource', 'DictCatalogSource', 'CatalogCache']

"""Read-only, in-memory product catalog snapshot"""
import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from src.core.exceptions import CatalogLoadError
from src.core.models import CatalogItem

_ITEMS = TypeAdapter(List[CatalogItem])


class StaticCatalog:
    """
    Immutable list of catalog items kept in declaration order

    Args:
        items: Catalog items; ids must be unique
    """

    def __init__(self, items: Iterable[CatalogItem]) -> None:
        self._items = tuple(items)
        ids = [item.id for item in self._items]
        duplicates = sorted({item_id for item_id in ids if ids.count(item_id) > 1})
        if duplicates:
            raise CatalogLoadError(message=f"Duplicate catalog item ids: {', '.join(duplicates)}")
        self._by_id: Dict[str, CatalogItem] = {item.id: item for item in self._items}

    def list_items(self, category: Optional[str] = None) -> List[CatalogItem]:
        if category is None:
            return list(self._items)
        return [item for item in self._items if item.category == category]

    def get(self, item_id: str) -> Optional[CatalogItem]:
        return self._by_id.get(item_id)

    def categories(self) -> List[str]:
        seen: List[str] = []
        for item in self._items:
            if item.category not in seen:
                seen.append(item.category)
        return seen

    def __len__(self) -> int:
        return len(self._items)


def load_catalog(path: Union[str, Path]) -> StaticCatalog:
    """
    Load the product catalog from a JSON file

    The file holds either a list of items or an object with an "items" list

    Raises:
        CatalogLoadError: If the file is missing, not JSON, or fails validation
    """
    catalog_path = Path(path)
    try:
        raw = json.loads(catalog_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise CatalogLoadError(message=f"Catalog file not found: {catalog_path}") from e
    except json.JSONDecodeError as e:
        raise CatalogLoadError(message=f"Catalog file is not valid JSON: {catalog_path}") from e

    if isinstance(raw, dict):
        raw = raw.get("items", [])
    try:
        items = _ITEMS.validate_python(raw)
    except ValidationError as e:
        raise CatalogLoadError(
            message=f"Catalog file failed validation: {catalog_path}",
            errors=e.errors(include_url=False, include_context=False),
        ) from e
    return StaticCatalog(items)

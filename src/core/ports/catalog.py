"""Ports (interface) for the product catalog store"""
from typing import List, Optional, Protocol

from src.core.models import CatalogItem

class ICatalog(Protocol):
    """Read-only view over the product catalog"""

    def list_items(self, category: Optional[str] = None) -> List[CatalogItem]:
        """
        List catalog items

        Args:
            category (Optional[str]): Restrict to one category when given

        Returns:
            List[CatalogItem]: Items in stable catalog order
        """
        ...

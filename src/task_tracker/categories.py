from __future__ import annotations

import json
import logging
import os
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: Tuple[str, ...] = ("Work", "Personal", "Shopping", "Health", "Finance")


# PUBLIC_INTERFACE
class CategoryCatalog:
    """
    Locally cached category suggestions offered when editing a task.

    Seeded with DEFAULT_CATEGORIES when nothing has been saved yet. With a
    path configured, the list is stored as a JSON array.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self._path = path
        self._categories: List[str] = self._load()

    def _load(self) -> List[str]:
        if self._path and os.path.exists(self._path):
            try:
                with open(self._path, "r", encoding="utf-8") as f:
                    saved = json.load(f)
            except (OSError, ValueError) as exc:
                logger.warning("Error loading categories from %s: %s", self._path, exc)
            else:
                if isinstance(saved, list):
                    return [c for c in saved if isinstance(c, str) and c.strip()]
        categories = list(DEFAULT_CATEGORIES)
        self._save(categories)
        return categories

    def _save(self, categories: List[str]) -> None:
        if not self._path:
            return
        os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(categories, f)

    def categories(self) -> Tuple[str, ...]:
        return tuple(self._categories)

    def add(self, name: str) -> str:
        """
        Add a category and return its stored form (whitespace stripped).
        Existing names are not duplicated.
        """
        category = name.strip()
        if not category:
            raise ValueError("category must not be empty")
        if category not in self._categories:
            self._categories.append(category)
            self._save(self._categories)
        return category

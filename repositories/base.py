"""
Base repository interface for data access layer.
This follows the Repository pattern to separate business logic from data access.
"""

from abc import ABC
from typing import Any, Callable, Dict, List, Mapping, Optional

from pymongo.collection import Collection


class BaseRepository(ABC):
    """
    Base repository over one MongoDB collection.

    The collection is resolved lazily so repositories can be built before the
    database connection is opened.
    """

    def __init__(self, collection: Optional[Collection] = None, resolve: Optional[Callable[[], Collection]] = None):
        self._collection = collection
        self._resolve = resolve

    @property
    def collection(self) -> Collection:
        if self._collection is None:
            if self._resolve is None:
                raise RuntimeError(f"{self.__class__.__name__} has no collection")
            self._collection = self._resolve()
        return self._collection

    def find_one(self, query: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        return self.collection.find_one(dict(query))

    def find(self, query: Mapping[str, Any], sort: Optional[List] = None, limit: int = 0) -> List[Dict[str, Any]]:
        cursor = self.collection.find(dict(query))
        if sort:
            cursor = cursor.sort(sort)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

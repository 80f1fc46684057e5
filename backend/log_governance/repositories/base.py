"""Generic repository over a single MongoDB collection."""

from typing import Any, Dict, Generic, Optional, Type, TypeVar

from pymongo.database import Database

from log_governance.entities.base import BaseEntity

T = TypeVar("T", bound=BaseEntity)


class BaseRepository(Generic[T]):
    """CRUD helpers shared by all repositories."""

    def __init__(self, db: Database, collection_name: str, model_class: Type[T]):
        self.db = db
        self.collection_name = collection_name
        self.collection = db[collection_name]
        self.model_class = model_class

    def _to_model(self, doc: Optional[Dict[str, Any]]) -> Optional[T]:
        return self.model_class(**doc) if doc else None

    def find_by_id(self, entity_id: Any) -> Optional[T]:
        return self._to_model(self.collection.find_one({"_id": entity_id}))

    def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        return self.collection.count_documents(query or {})

    def insert_one(self, entity: T) -> T:
        result = self.collection.insert_one(entity.to_mongo())
        entity.id = result.inserted_id
        return entity

    def delete_many(self, query: Dict[str, Any]) -> int:
        return self.collection.delete_many(query).deleted_count

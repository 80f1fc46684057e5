"""Base entity shared by documents stored in MongoDB."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class BaseEntity(BaseModel):
    """Base for MongoDB documents. `_id` is exposed as `id`."""

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        use_enum_values=True,
    )

    def to_mongo(self) -> Dict[str, Any]:
        """Serialize to a MongoDB document, dropping an unset `_id`."""
        doc = self.model_dump(by_alias=True)
        if doc.get("_id") is None:
            doc.pop("_id", None)
        return doc

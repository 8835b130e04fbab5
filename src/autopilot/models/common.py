"""Shared Pydantic configuration and envelope helpers."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, matching the dashboard's JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def ok(**data: Any) -> dict[str, Any]:
    """Build the success envelope ``{"ok": true, ...data}``."""
    return {"ok": True, **data}

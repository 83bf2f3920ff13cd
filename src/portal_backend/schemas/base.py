"""Base schema configuration and response envelopes."""

from typing import Any, Dict, Iterable, Optional, Set

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Schema with snake_case attributes and camelCase JSON names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def dump(model: BaseModel, fields: Optional[Set[str]] = None, exclude: Iterable[str] = ()) -> Dict[str, Any]:
    """Serialize a schema to its camelCase JSON shape.

    Args:
        model: Schema instance
        fields: When given, only these camelCase attributes are kept (``id`` always is)
        exclude: camelCase attributes to drop when ``fields`` is not given

    Returns:
        JSON-compatible dictionary
    """
    data = model.model_dump(mode="json", by_alias=True)
    if fields:
        keep = set(fields) | {"id"}
        return {key: value for key, value in data.items() if key in keep}
    for key in exclude:
        data.pop(key, None)
    return data


def success_response(**payload: Any) -> Dict[str, Any]:
    return {"success": True, **payload}


def paginated_response(items: list, page: Any, key: str = "data", **extra: Any) -> Dict[str, Any]:
    """Standard envelope for a page of results.

    Args:
        items: Already serialized items
        page: ``Page`` produced by the search layer
        key: Name of the list attribute in the envelope
        **extra: Additional top-level attributes
    """
    return {
        "success": True,
        "count": len(items),
        "total": page.total,
        "totalPages": page.total_pages,
        "page": page.page,
        "limit": page.limit,
        key: items,
        **extra,
    }

"""Parse raw query parameters into a validated ``QuerySpec``.

Parsing is lenient: malformed values drop the offending term, and malformed
paging values fall back to their defaults. Unknown parameter names are ignored.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Set, Tuple, Union
from uuid import UUID

import structlog

from portal_backend.core.custom_types import to_naive_utc
from .fields import FieldType, SearchSchema

logger = structlog.get_logger(__name__)

RESERVED_PARAMS = frozenset({"page", "sort", "limit", "fields", "keyword"})
RANGE_OPERATORS = ("gt", "gte", "lt", "lte")

_BRACKET = re.compile(r"^(?P<name>[A-Za-z][A-Za-z0-9]*)\[(?P<op>gte|gt|lte|lt)\]$")
_SUFFIX = re.compile(r"^(?P<name>[A-Za-z][A-Za-z0-9]*)_(?P<op>gte|gt|lte|lt)$")

_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


@dataclass(frozen=True)
class FilterTerm:
    """One predicate: ``op`` is ``"match"`` or a range operator.

    A match term with several values is an OR over them.
    """
    name: str
    op: str
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class SortKey:
    name: str
    descending: bool = False


@dataclass(frozen=True)
class SalaryRange:
    minimum: float = 0
    maximum: float = math.inf


@dataclass
class QuerySpec:
    filters: List[FilterTerm] = field(default_factory=list)
    keyword: Optional[str] = None
    salary: Optional[SalaryRange] = None
    sort: List[SortKey] = field(default_factory=list)
    page: int = 1
    limit: int = 10
    fields: Optional[Set[str]] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


ParamSource = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def _items(params: ParamSource) -> List[Tuple[str, str]]:
    if hasattr(params, "multi_items"):
        return list(params.multi_items())
    if isinstance(params, Mapping):
        return list(params.items())
    return list(params)


def _positive_int(raw: Optional[str]) -> Optional[int]:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return None
    return value if value >= 1 else None


def parse_number(raw: str) -> Optional[float]:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(value):
        return None
    return int(value) if value.is_integer() else value


def parse_date(raw: str) -> Optional[datetime]:
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return to_naive_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def coerce_value(field_type: FieldType, raw: str) -> Optional[Any]:
    """Convert one raw string to the field's Python type, or None when malformed."""
    raw = raw.strip()
    if not raw:
        return None
    if field_type is FieldType.NUMBER:
        return parse_number(raw)
    if field_type is FieldType.DATE:
        return parse_date(raw)
    if field_type is FieldType.BOOLEAN:
        lowered = raw.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        return None
    if field_type is FieldType.ID:
        try:
            return UUID(raw)
        except ValueError:
            return None
    return raw


def _split_name(key: str) -> Tuple[str, str]:
    for pattern in (_BRACKET, _SUFFIX):
        match = pattern.match(key)
        if match:
            return match.group("name"), match.group("op")
    return key, "match"


def _parse_sort(raw: str, schema: SearchSchema) -> List[SortKey]:
    keys = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        descending = part.startswith("-")
        name = part.lstrip("-+")
        if schema.sortable(name):
            keys.append(SortKey(name, descending))
        else:
            logger.debug("Ignoring unknown sort key", entity=schema.name, key=name)
    return keys


def parse_query_params(
    params: ParamSource,
    schema: SearchSchema,
    page_size: Optional[int] = None,
    max_page_size: int = 100,
) -> QuerySpec:
    """Translate query parameters into a ``QuerySpec`` for ``schema``.

    Args:
        params: Query parameters; repeated keys are each applied (AND)
        schema: Searchable entity declaration
        page_size: Default ``limit``, the schema's page size when omitted
        max_page_size: Upper bound for ``limit``

    Returns:
        Parsed query spec
    """
    spec = QuerySpec(limit=page_size or schema.page_size)
    sort_raw: Optional[str] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None

    for key, raw in _items(params):
        raw = "" if raw is None else str(raw)

        if key in RESERVED_PARAMS:
            if key == "page":
                spec.page = _positive_int(raw) or 1
            elif key == "limit":
                limit = _positive_int(raw)
                if limit:
                    spec.limit = limit
            elif key == "sort":
                sort_raw = raw
            elif key == "fields":
                requested = {name.strip() for name in raw.split(",") if name.strip()}
                if schema.projectable:
                    requested &= schema.projectable
                spec.fields = requested or None
            elif key == "keyword":
                spec.keyword = raw.strip() or None
            continue

        name, op = _split_name(key)
        field_spec = schema.fields.get(name)
        if field_spec is None:
            logger.debug("Ignoring unknown query parameter", entity=schema.name, param=key)
            continue

        if op != "match" and not field_spec.type.supports_range:
            logger.debug("Ignoring range operator on non-range field", entity=schema.name, param=key)
            continue

        if op == "match" and schema.is_overlap_bound(name):
            value = coerce_value(FieldType.NUMBER, raw)
            if value is None:
                continue
            if name == schema.salary_overlap[0]:
                salary_min = value
            else:
                salary_max = value
            continue

        raw_values = raw.split(",") if op == "match" else [raw]
        values = tuple(
            value for value in (coerce_value(field_spec.type, item) for item in raw_values)
            if value is not None
        )
        if not values:
            logger.debug("Dropping malformed filter value", entity=schema.name, param=key)
            continue
        spec.filters.append(FilterTerm(name=name, op=op, values=values))

    if salary_min is not None or salary_max is not None:
        spec.salary = SalaryRange(
            minimum=salary_min if salary_min is not None else 0,
            maximum=salary_max if salary_max is not None else math.inf,
        )

    spec.limit = min(spec.limit, max_page_size)
    spec.sort = _parse_sort(sort_raw, schema) if sort_raw else []
    if not spec.sort:
        spec.sort = _parse_sort(schema.default_sort, schema)
    return spec

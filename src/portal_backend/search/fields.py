"""Declarations of what each searchable entity exposes to query parameters."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from sqlalchemy.sql.elements import ColumnElement


class FieldType(Enum):
    """How a public attribute is matched.

    TEXT is a case-insensitive substring match, ENUM a case-insensitive
    exact match, TAGS a substring match over the members of a list column.
    NUMBER and DATE additionally accept range comparisons.
    """
    TEXT = "text"
    ENUM = "enum"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    ID = "id"
    TAGS = "tags"

    @property
    def supports_range(self) -> bool:
        return self in (FieldType.NUMBER, FieldType.DATE)


@dataclass(frozen=True)
class FieldSpec:
    column: ColumnElement
    type: FieldType
    sortable: bool = False


@dataclass(frozen=True)
class SearchSchema:
    """Public attribute table of one searchable entity.

    Attributes:
        name: Entity name used in log lines
        fields: camelCase attribute name to column and match type
        keyword_fields: attributes searched by ``keyword``
        default_sort: sort expression applied when none is requested
        default_exclude: attributes dropped from output when ``fields`` is absent
        page_size: default ``limit``
        salary_overlap: ``(min, max)`` attribute pair matched as a range overlap
    """
    name: str
    fields: Dict[str, FieldSpec]
    keyword_fields: Tuple[str, ...] = ()
    default_sort: str = "-createdAt"
    default_exclude: Tuple[str, ...] = ("updatedAt",)
    page_size: int = 10
    salary_overlap: Optional[Tuple[str, str]] = None
    projectable: FrozenSet[str] = field(default_factory=frozenset)

    def sortable(self, name: str) -> bool:
        spec = self.fields.get(name)
        return spec is not None and spec.sortable

    def is_overlap_bound(self, name: str) -> bool:
        return bool(self.salary_overlap) and name in self.salary_overlap

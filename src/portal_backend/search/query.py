"""Apply a ``QuerySpec`` to a SQLAlchemy query and paginate the result."""

import math
import re
from dataclasses import dataclass
from typing import Any, Generic, List, TypeVar

from sqlalchemy import String, and_, cast, false, func, or_
from sqlalchemy.orm import Query

from .fields import FieldSpec, FieldType, SearchSchema
from .params import FilterTerm, QuerySpec, SalaryRange

T = TypeVar("T")

_JSON_SYNTAX = re.compile(r"[\"\[\],\\:{}]")

_RANGE = {
    "gt": lambda column, value: column > value,
    "gte": lambda column, value: column >= value,
    "lt": lambda column, value: column < value,
    "lte": lambda column, value: column <= value,
}


@dataclass
class Page(Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _contains(column, value: str):
    return column.ilike(f"%{_escape_like(value)}%", escape="\\")


def _tag_term(value: str) -> str:
    """Drop characters that belong to the JSON encoding of a list column."""
    return _JSON_SYNTAX.sub("", value).strip()


def match_clause(field_spec: FieldSpec, value: Any):
    """Predicate matching one value against a field according to its type."""
    column = field_spec.column
    if field_spec.type is FieldType.TEXT:
        return _contains(column, str(value))
    if field_spec.type is FieldType.TAGS:
        term = _tag_term(str(value))
        if not term:
            return false()
        return _contains(cast(column, String), term)
    if field_spec.type is FieldType.ENUM:
        return func.lower(column) == str(value).lower()
    return column == value


def _term_clause(schema: SearchSchema, term: FilterTerm):
    field_spec = schema.fields[term.name]
    if term.op == "match":
        clauses = [match_clause(field_spec, value) for value in term.values]
        return clauses[0] if len(clauses) == 1 else or_(*clauses)
    return _RANGE[term.op](field_spec.column, term.values[0])


def keyword_clause(schema: SearchSchema, keyword: str):
    """Case-insensitive substring OR across the schema's keyword fields."""
    return or_(*[match_clause(schema.fields[name], keyword) for name in schema.keyword_fields])


def salary_overlap_clause(schema: SearchSchema, salary: SalaryRange):
    """Records whose salary band intersects the requested one.

    Missing record bounds are open: no minimum behaves as 0 and no maximum
    as unbounded.
    """
    min_column = schema.fields[schema.salary_overlap[0]].column
    max_column = schema.fields[schema.salary_overlap[1]].column

    clauses = [or_(max_column.is_(None), max_column >= salary.minimum)]
    if not math.isinf(salary.maximum):
        clauses.append(or_(min_column.is_(None), min_column <= salary.maximum))
    return and_(*clauses)


def apply_query_spec(query: Query, spec: QuerySpec, schema: SearchSchema) -> Query:
    """Add the QuerySpec filters, keyword search, salary overlap and ordering to ``query``."""
    for term in spec.filters:
        query = query.filter(_term_clause(schema, term))

    if spec.keyword and schema.keyword_fields:
        query = query.filter(keyword_clause(schema, spec.keyword))

    if spec.salary is not None and schema.salary_overlap:
        query = query.filter(salary_overlap_clause(schema, spec.salary))

    ordering = []
    for key in spec.sort:
        column = schema.fields[key.name].column
        ordering.append(column.desc() if key.descending else column.asc())
    if "id" in schema.fields:
        ordering.append(schema.fields["id"].column.asc())
    if ordering:
        # Requested ordering replaces whatever the base query carried
        query = query.order_by(None).order_by(*ordering)
    return query


def paginate(query: Query, spec: QuerySpec) -> Page:
    """Count the filtered query, then fetch the requested page."""
    total = query.order_by(None).count()
    items = query.offset(spec.offset).limit(spec.limit).all()
    return Page(items=items, total=total, page=spec.page, limit=spec.limit)


def search(query: Query, spec: QuerySpec, schema: SearchSchema) -> Page:
    return paginate(apply_query_spec(query, spec, schema), spec)

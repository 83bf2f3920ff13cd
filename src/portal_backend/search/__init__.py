"""Query filter builder: query parameters to filtered, sorted, paginated SQL."""

from .fields import FieldType, FieldSpec, SearchSchema
from .params import QuerySpec, FilterTerm, SortKey, SalaryRange, RESERVED_PARAMS, parse_query_params
from .query import Page, apply_query_spec, paginate, search
from .schemas import (
    JOB_SEARCH,
    APPLICATION_SEARCH,
    COMPANY_SEARCH,
    CANDIDATE_SEARCH,
    USER_SEARCH,
    NOTIFICATION_SEARCH,
)

__all__ = [
    "FieldType",
    "FieldSpec",
    "SearchSchema",
    "QuerySpec",
    "FilterTerm",
    "SortKey",
    "SalaryRange",
    "RESERVED_PARAMS",
    "parse_query_params",
    "Page",
    "apply_query_spec",
    "paginate",
    "search",
    "JOB_SEARCH",
    "APPLICATION_SEARCH",
    "COMPANY_SEARCH",
    "CANDIDATE_SEARCH",
    "USER_SEARCH",
    "NOTIFICATION_SEARCH",
]

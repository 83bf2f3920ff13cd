"""Shared API dependencies."""

from typing import Callable, Iterable, List, Optional

from fastapi import BackgroundTasks, Request
from pydantic import BaseModel

from portal_backend.core.registry import ServiceRegistry
from portal_backend.notifications.outbox import NotificationOutbox
from portal_backend.schemas.base import dump
from portal_backend.search import QuerySpec, SearchSchema, parse_query_params


def get_services(request: Request) -> ServiceRegistry:
    return request.app.state.services


def get_outbox(request: Request, background_tasks: BackgroundTasks) -> NotificationOutbox:
    """Outbox whose items are delivered after the response has been sent."""
    return NotificationOutbox(request.app.state.services.dispatcher, background_tasks)


def search_spec(schema: SearchSchema, page_size_setting: Optional[str] = None) -> Callable[[Request], QuerySpec]:
    """Dependency parsing the request's query string against ``schema``.

    Args:
        schema: Searchable entity declaration
        page_size_setting: Name of the ``Settings`` attribute holding the
            default page size; the schema's own page size when omitted
    """

    def dependency(request: Request) -> QuerySpec:
        settings = request.app.state.services.settings
        page_size = getattr(settings, page_size_setting) if page_size_setting else None
        return parse_query_params(
            request.query_params.multi_items(),
            schema,
            page_size=page_size,
            max_page_size=settings.max_page_size,
        )

    return dependency


def dump_items(
    schema_cls: type,
    items: Iterable,
    spec: Optional[QuerySpec] = None,
    search_schema: Optional[SearchSchema] = None,
) -> List[dict]:
    """Serialize ORM rows with ``schema_cls``, applying projection or default exclusions."""
    fields = spec.fields if spec is not None else None
    exclude = search_schema.default_exclude if search_schema is not None else ()
    result = []
    for item in items:
        model = item if isinstance(item, BaseModel) else schema_cls.model_validate(item)
        result.append(dump(model, fields=fields, exclude=exclude))
    return result

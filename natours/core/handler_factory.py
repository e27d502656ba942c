"""Generic CRUD endpoints.

Each factory takes a ``Resource`` and returns a FastAPI endpoint that a
router mounts with ``add_api_route``. Authorization is attached by the
router through ``dependencies=[...]`` so the same handlers serve public and
protected routes.

Example:
    ```python
    router.add_api_route("", get_all(TOURS), methods=["GET"])
    router.add_api_route(
        "",
        create_one(TOURS),
        methods=["POST"],
        status_code=201,
        dependencies=[Depends(require_permission(Permission.MANAGE_TOURS))],
    )
    ```
"""

from dataclasses import dataclass, field
from typing import Annotated, Any, Callable, Sequence
from uuid import UUID

from fastapi import Depends, Request, status
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from sqlalchemy.orm import InstrumentedAttribute, Query, Session

from natours.core.errors import BadRequestError, NotFoundError
from natours.core.query import FieldSet, QueryFeatures
from natours.core.responses import no_content, serialize, success, success_list
from natours.database import get_db
from natours.repositories.base import Repository


@dataclass(frozen=True)
class Expansion:
    """A relation ``get_one`` can eager-load, and the schema that renders it."""

    loader: Callable[[Repository], Query]
    schema: type[BaseModel]


@dataclass(frozen=True)
class Parent:
    """A path parameter that scopes a nested list route to its parent record."""

    path_param: str
    column: InstrumentedAttribute


@dataclass
class Resource:
    """Everything the factories need to know about an entity."""

    singular: str
    plural: str
    repository: Callable[[Session], Repository]
    response_schema: type[BaseModel]
    fields: FieldSet
    create_schema: type[BaseModel] | None = None
    update_schema: type[BaseModel] | None = None
    expansions: dict[str, Expansion] = field(default_factory=dict)


def parse_id(raw: str) -> UUID:
    """Parse a record identifier from the URL.

    Raises:
        BadRequestError: If the value is not a UUID
    """
    try:
        return UUID(raw)
    except (TypeError, ValueError) as e:
        raise BadRequestError(f"Invalid id: {raw}") from e


def _no_context() -> dict[str, Any]:
    return {}


def get_or_404(resource: Resource, repository: Repository, record_id: str, query: Query | None = None) -> Any:
    record = repository.get(parse_id(record_id), query)
    if record is None:
        raise NotFoundError(resource.singular)
    return record


def list_records(
    resource: Resource,
    db: Session,
    params: Sequence[tuple[str, str]],
    filters: Sequence[Any] = (),
) -> JSONResponse:
    """Run a list query through the query translator and wrap the result.

    ``filters`` are applied before any filter taken from ``params``.
    """
    query = resource.repository(db).list_query()
    for criterion in filters:
        query = query.filter(criterion)

    features = QueryFeatures(query, resource.fields, params).filter().sort().limit_fields().paginate()
    records = features.query.all()
    return success_list(
        resource.plural,
        [features.project(serialize(resource.response_schema, record)) for record in records],
    )


def create_one(resource: Resource, context: Callable[..., dict[str, Any]] = _no_context) -> Callable[..., Any]:
    """Build a create endpoint.

    Args:
        resource: Entity to create
        context: Optional dependency returning fields merged over the request body
            (the author of a review, the tour from a nested URL)
    """
    schema = resource.create_schema

    async def create_handler(
        payload: schema,
        db: Annotated[Session, Depends(get_db)],
        extra: Annotated[dict[str, Any], Depends(context)],
    ) -> JSONResponse:
        data = {**payload.model_dump(), **extra}
        record = resource.repository(db).create(data)
        return success(
            resource.singular,
            serialize(resource.response_schema, record),
            status_code=status.HTTP_201_CREATED,
        )

    return create_handler


def get_one(resource: Resource, expand: str | None = None) -> Callable[..., Any]:
    """Build a read-by-id endpoint, optionally eager-loading the ``expand`` relation."""
    expansion = resource.expansions[expand] if expand else None

    async def get_handler(id: str, db: Annotated[Session, Depends(get_db)]) -> JSONResponse:
        repository = resource.repository(db)
        if expansion is None:
            record = get_or_404(resource, repository, id)
            return success(resource.singular, serialize(resource.response_schema, record))

        record = get_or_404(resource, repository, id, expansion.loader(repository))
        return success(resource.singular, serialize(expansion.schema, record))

    return get_handler


def get_all(resource: Resource, parent: Parent | None = None) -> Callable[..., Any]:
    """Build a list endpoint.

    When mounted under a nested route, ``parent`` names the path parameter whose
    value becomes an equality filter on the parent reference.
    """

    async def list_handler(request: Request, db: Annotated[Session, Depends(get_db)]) -> JSONResponse:
        filters = []
        if parent is not None and parent.path_param in request.path_params:
            filters.append(parent.column == parse_id(request.path_params[parent.path_param]))
        return list_records(resource, db, request.query_params.multi_items(), filters)

    return list_handler


def update_one(resource: Resource) -> Callable[..., Any]:
    """Build a partial-update endpoint. Only fields present in the body change."""
    schema = resource.update_schema

    async def update_handler(
        id: str,
        payload: schema,
        db: Annotated[Session, Depends(get_db)],
    ) -> JSONResponse:
        repository = resource.repository(db)
        record = get_or_404(resource, repository, id)
        record = repository.update(record, payload.model_dump(exclude_unset=True))
        return success(resource.singular, serialize(resource.response_schema, record))

    return update_handler


def delete_one(resource: Resource) -> Callable[..., Any]:
    """Build a hard-delete endpoint answering 204 with an empty body."""

    async def delete_handler(id: str, db: Annotated[Session, Depends(get_db)]) -> Response:
        repository = resource.repository(db)
        record = get_or_404(resource, repository, id)
        repository.delete(record)
        return no_content()

    return delete_handler

"""Translate list-endpoint query strings into SQLAlchemy queries.

``?difficulty=easy&duration[gte]=5&sort=-price,name&fields=name,price&page=2&limit=10``
becomes a filtered, ordered, paginated query plus a field projection that is
applied when the records are serialized.

Only fields declared in the entity's ``FieldSet`` can be filtered or sorted
on. Other keys are ignored. Values that do not fit the column type, and
unknown bracket operators, produce a predicate that matches nothing instead
of an error.
"""

import logging
import operator
import re
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Sequence
from uuid import UUID

from sqlalchemy import false
from sqlalchemy.orm import InstrumentedAttribute, Query

logger = logging.getLogger(__name__)

RESERVED_PARAMS = frozenset({"page", "sort", "limit", "fields"})

OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "gte": operator.ge,
    "gt": operator.gt,
    "lte": operator.le,
    "lt": operator.lt,
}

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 100
DEFAULT_SORT = "-createdAt"
MAX_LIMIT = 1000
# Largest OFFSET the database drivers accept (signed 64-bit)
MAX_OFFSET = 2**63 - 1

_BRACKET_KEY = re.compile(r"^(?P<field>[A-Za-z_][A-Za-z0-9_]*)\[(?P<op>[^\]]*)\]$")


class FieldSet:
    """Public field names an entity exposes to filtering and sorting.

    Args:
        model: Mapped class the columns belong to
        columns: Mapping of public (camelCase) name to mapped column attribute
        repeatable: Fields that accept repeated query keys, matched with IN
    """

    def __init__(
        self,
        model: type,
        columns: Mapping[str, InstrumentedAttribute],
        repeatable: Iterable[str] = (),
    ):
        self.model = model
        self.columns = dict(columns)
        self.repeatable = frozenset(repeatable)

    def __contains__(self, name: str) -> bool:
        return name in self.columns

    def column(self, name: str) -> InstrumentedAttribute:
        return self.columns[name]


class _Uncoercible(Exception):
    pass


def _coerce(column: InstrumentedAttribute, raw: str) -> Any:
    """Convert a query-string value to the column's Python type."""
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return raw

    try:
        if python_type is bool:
            lowered = raw.lower()
            if lowered in ("true", "1"):
                return True
            if lowered in ("false", "0"):
                return False
            raise _Uncoercible(raw)
        if python_type is datetime:
            return datetime.fromisoformat(raw)
        if python_type is UUID:
            return UUID(raw)
        return python_type(raw)
    except (TypeError, ValueError) as e:
        raise _Uncoercible(raw) from e


def _positive_int(raw: str | None, default: int) -> int:
    """Parse a positive integer, falling back to ``default`` on anything else."""
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


class QueryFeatures:
    """Chainable filter/sort/projection/pagination over a SQLAlchemy query.

    Example:
        ```python
        features = (
            QueryFeatures(db.query(Tour), TOUR_FIELDS, request.query_params.multi_items())
            .filter()
            .sort()
            .limit_fields()
            .paginate()
        )
        tours = features.query.all()
        ```
    """

    def __init__(
        self,
        query: Query,
        fields: FieldSet,
        params: Sequence[tuple[str, str]] | Mapping[str, str],
    ):
        self.query = query
        self.fields = fields
        self.params: list[tuple[str, str]] = list(params.items()) if isinstance(params, Mapping) else list(params)
        self.selected_fields: list[str] | None = None
        self.page = DEFAULT_PAGE
        self.limit = DEFAULT_LIMIT

    def _last(self, key: str) -> str | None:
        value = None
        for k, v in self.params:
            if k == key:
                value = v
        return value

    def filter(self) -> "QueryFeatures":
        """Apply equality and comparison filters from non-reserved keys."""
        grouped: dict[tuple[str, str | None], list[str]] = {}
        for key, value in self.params:
            if key in RESERVED_PARAMS:
                continue
            match = _BRACKET_KEY.match(key)
            field, op = (match.group("field"), match.group("op")) if match else (key, None)
            if field not in self.fields:
                continue
            grouped.setdefault((field, op), []).append(value)

        for (field, op), values in grouped.items():
            self.query = self.query.filter(self._predicate(field, op, values))
        return self

    def _predicate(self, field: str, op: str | None, values: list[str]) -> Any:
        column = self.fields.column(field)
        if op is not None and op not in OPERATORS:
            logger.debug(f"Unknown filter operator {op!r} on {field}, matching nothing")
            return false()

        try:
            if op is None and len(values) > 1 and field in self.fields.repeatable:
                return column.in_([_coerce(column, v) for v in values])
            coerced = _coerce(column, values[-1])
        except _Uncoercible:
            return false()

        if op is None:
            return column == coerced
        return OPERATORS[op](column, coerced)

    def sort(self, default: str = DEFAULT_SORT) -> "QueryFeatures":
        """Order by a comma-separated list of fields, ``-`` prefix for descending."""
        order_by = self._order_by(self._last("sort") or "")
        if not order_by:
            order_by = self._order_by(default)
        # Stable tiebreaker so pages don't overlap
        order_by.append(self.fields.model.id.asc())
        self.query = self.query.order_by(*order_by)
        return self

    def _order_by(self, sort_param: str) -> list[Any]:
        clauses = []
        for token in sort_param.split(","):
            token = token.strip()
            descending = token.startswith("-")
            name = token.lstrip("-")
            if name not in self.fields:
                continue
            column = self.fields.column(name)
            clauses.append(column.desc() if descending else column.asc())
        return clauses

    def limit_fields(self) -> "QueryFeatures":
        """Remember the requested projection, applied by ``project``."""
        raw = self._last("fields")
        if raw:
            selected = [name.strip() for name in raw.split(",") if name.strip()]
            self.selected_fields = selected or None
        return self

    def paginate(self) -> "QueryFeatures":
        """Apply ``page``/``limit``, defaulting to page 1 of 100.

        ``limit`` is capped at ``MAX_LIMIT``. A page whose offset the database
        cannot represent falls back to the first page.
        """
        self.limit = min(_positive_int(self._last("limit"), DEFAULT_LIMIT), MAX_LIMIT)
        self.page = _positive_int(self._last("page"), DEFAULT_PAGE)
        if (self.page - 1) * self.limit > MAX_OFFSET:
            self.page = DEFAULT_PAGE
        self.query = self.query.offset((self.page - 1) * self.limit).limit(self.limit)
        return self

    def project(self, record: dict[str, Any]) -> dict[str, Any]:
        """Keep only the selected fields of a serialized record. ``id`` is always kept."""
        if self.selected_fields is None:
            return record
        return {key: value for key, value in record.items() if key == "id" or key in self.selected_fields}

"""Query Compiler — translates core QuerySpec clauses into SQLAlchemy statements.

Invariants:
    - Every clause in spec.scope AND spec.filters is applied (logical AND)
    - Dotted logical fields ("user.username") join through the named relationship
    - Contains escapes LIKE wildcards in the needle and compares lower(column)
    - Count and page statements share the same joins and predicates

Design Decisions:
    - Logical field names resolve by attribute lookup on the mapped class; an unknown
      field is a programming error (AttributeError), not a client error
"""

from sqlalchemy import Select, and_, func, select
from sqlalchemy.sql.elements import ColumnElement

from taskmanager.core.domain_types import SortDirection
from taskmanager.core.query_spec import (
    Between, Clause, Contains, Equals, NotEquals, QuerySpec,
)


LIKE_ESCAPE = "\\"


def _escape_like(needle: str) -> str:
    return (
        needle.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def _split(field: str) -> tuple[str | None, str]:
    if "." in field:
        rel, attr = field.split(".", 1)
        return rel, attr
    return None, field


def resolve_column(model, field: str):
    rel, attr = _split(field)
    if rel is None:
        return getattr(model, attr)
    related = model.__mapper__.relationships[rel].mapper.class_
    return getattr(related, attr)


def compile_clause(model, clause: Clause) -> ColumnElement:
    column = resolve_column(model, clause.field)
    if isinstance(clause, Equals):
        return column == clause.value
    if isinstance(clause, NotEquals):
        return column != clause.value
    if isinstance(clause, Contains):
        return func.lower(column).like(
            f"%{_escape_like(clause.needle)}%", escape=LIKE_ESCAPE,
        )
    if isinstance(clause, Between):
        return and_(column >= clause.lower, column < clause.upper)
    raise TypeError(f"unsupported clause: {clause!r}")


def _required_joins(spec: QuerySpec) -> list[str]:
    fields = [c.field for c in spec.clauses] + [o.field for o in spec.ordering]
    joins: list[str] = []
    for field in fields:
        rel, _ = _split(field)
        if rel is not None and rel not in joins:
            joins.append(rel)
    return joins


def _apply_joins_and_where(stmt: Select, model, spec: QuerySpec) -> Select:
    for rel in _required_joins(spec):
        stmt = stmt.join(getattr(model, rel))
    predicates = [compile_clause(model, c) for c in spec.clauses]
    if predicates:
        stmt = stmt.where(and_(*predicates))
    return stmt


def compile_page_query(model, spec: QuerySpec) -> Select:
    """SELECT model rows matching spec, ordered and sliced to the requested page."""
    stmt = _apply_joins_and_where(select(model), model, spec)
    order_by = []
    for order in spec.ordering:
        column = resolve_column(model, order.field)
        order_by.append(
            column.asc() if order.direction == SortDirection.ASC else column.desc()
        )
    return stmt.order_by(*order_by).offset(spec.offset).limit(spec.size)


def compile_count_query(model, spec: QuerySpec) -> Select:
    stmt = select(func.count(model.id)).select_from(model)
    return _apply_joins_and_where(stmt, model, spec)

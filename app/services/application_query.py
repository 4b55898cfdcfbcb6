"""
Query/filter layer for application listings.

Only the options declared on ApplicationQuery reach the database, and string
filters are bound as escaped LIKE patterns, so a query string cannot inject
operators or wildcards.
"""
from typing import Any, Mapping, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import case, func
from sqlalchemy.orm import Query, Session

from app.core.exceptions import ValidationError
from app.db.models.application import Application
from app.schemas.application import ApplicationQuery, QUERY_MESSAGES
from app.schemas.common import pydantic_field_errors

# Low < Medium < High, so "desc" puts High first
PRIORITY_RANK = case(
    {"High": 3, "Medium": 2, "Low": 1},
    value=Application.priority,
    else_=0,
)

SORT_COLUMNS = {
    "deadline": Application.deadline,
    "priority": PRIORITY_RANK,
    "tuitionFees": Application.tuition_fees,
    "livingExpenses": Application.living_expenses,
    "createdAt": Application.created_at,
}


def parse_query_options(params: Union[Mapping[str, Any], ApplicationQuery, None]) -> ApplicationQuery:
    """
    Validate raw query parameters into ApplicationQuery.

    Raises:
        ValidationError: listing every rejected option
    """
    if isinstance(params, ApplicationQuery):
        return params
    try:
        return ApplicationQuery.model_validate(dict(params or {}))
    except PydanticValidationError as e:
        raise ValidationError(pydantic_field_errors(e, messages=QUERY_MESSAGES))


def _contains_ci(column, value: str):
    return func.lower(column).contains(value.lower(), autoescape=True)


def build_application_query(db: Session, user_id: str, options: ApplicationQuery) -> Query:
    """Owner-scoped, filtered and ordered query for a user's applications."""
    query = db.query(Application).filter(Application.user_id == user_id)

    if options.priority:
        query = query.filter(Application.priority == options.priority)
    if options.status:
        query = query.filter(Application.status == options.status)
    if options.country:
        query = query.filter(_contains_ci(Application.country, options.country))
    if options.starting_semester:
        query = query.filter(_contains_ci(Application.starting_semester, options.starting_semester))

    sort_column = SORT_COLUMNS[options.sort_by or "createdAt"]
    primary = sort_column.asc() if options.sort_order == "asc" else sort_column.desc()
    # Tie-break so equal keys come back in a stable order
    return query.order_by(primary, Application.created_at.desc(), Application.id.asc())

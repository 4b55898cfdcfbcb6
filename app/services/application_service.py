"""
Application store: CRUD over application records, always scoped by owner.

A record that exists but belongs to someone else is reported exactly like a
missing one (NotFound).
"""
import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import InternalError, NotFound, ValidationError
from app.core.logging_config import sanitize_log_data
from app.db.models.application import Application
from app.schemas.application import (
    ApplicationCreate,
    ApplicationQuery,
    ApplicationResponse,
    ApplicationStatus,
    ApplicationUpdate,
    FIELD_MESSAGES,
    IMMUTABLE_FIELDS,
    Priority,
)
from app.schemas.common import pydantic_field_errors
from app.services.application_query import build_application_query, parse_query_options
from app.services.timestamps import next_timestamp, utcnow

logger = logging.getLogger(__name__)

UPCOMING_DEADLINE_DAYS = 30
CLOSED_STATUSES = (ApplicationStatus.ACCEPTED.value, ApplicationStatus.REJECTED.value)


def serialize_application(application: Application) -> dict:
    return ApplicationResponse.model_validate(application).model_dump(by_alias=True, mode="json")


def _validation_failed(fields: Mapping[str, Any], errors: List[Dict[str, str]]) -> ValidationError:
    logger.info(f"Application validation failed: errors={errors}, body={sanitize_log_data(dict(fields))}")
    return ValidationError(errors)


def _validate_create(fields: Mapping[str, Any]) -> ApplicationCreate:
    try:
        return ApplicationCreate.model_validate(dict(fields))
    except PydanticValidationError as e:
        raise _validation_failed(fields, pydantic_field_errors(e, messages=FIELD_MESSAGES))


def _validate_update(fields: Mapping[str, Any]) -> ApplicationUpdate:
    errors: List[Dict[str, str]] = [
        {"field": key, "message": f"{key} cannot be changed"}
        for key in fields
        if key in IMMUTABLE_FIELDS
    ]
    data = None
    try:
        data = ApplicationUpdate.model_validate(
            {key: value for key, value in fields.items() if key not in IMMUTABLE_FIELDS}
        )
    except PydanticValidationError as e:
        errors.extend(pydantic_field_errors(e, messages=FIELD_MESSAGES))
    if errors:
        raise _validation_failed(fields, errors)
    return data


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {action}: {e}", exc_info=True)
        raise InternalError() from e


def create_application(
    db: Session,
    user_id: str,
    fields: Mapping[str, Any],
    now: Optional[datetime] = None,
) -> Application:
    """
    Validate fields and insert a new application owned by user_id.

    Raises:
        ValidationError: listing every violated field; nothing is written
    """
    if not isinstance(fields, Mapping):
        raise ValidationError.for_field("body", "Request body must be an object")
    data = _validate_create(fields)
    now = now or utcnow()

    application = Application(
        user_id=user_id,
        university_name=data.university_name,
        degree=data.degree,
        priority=data.priority,
        number_of_semesters=data.number_of_semesters,
        application_portal=data.application_portal,
        city=data.city,
        country=data.country,
        location=data.location,
        starting_semester=data.starting_semester,
        tuition_fees=data.tuition_fees,
        living_expenses=data.living_expenses,
        documents_required=list(data.documents_required or []),
        status=data.status,
        deadline=data.deadline,
        notes=data.notes or "",
        created_at=now,
        updated_at=now,
    )
    db.add(application)
    _commit(db, "create application")
    db.refresh(application)

    logger.info(f"Application created: application_id={application.id}, user_id={user_id}")
    return application


def list_applications(
    db: Session,
    user_id: str,
    options: Optional[Mapping[str, Any]] = None,
) -> List[Application]:
    """All of user_id's applications matching options, newest first by default."""
    query_options = parse_query_options(options)
    applications = build_application_query(db, user_id, query_options).all()
    logger.debug(f"Applications listed: user_id={user_id}, count={len(applications)}")
    return applications


def get_application(db: Session, application_id: str, user_id: str) -> Application:
    application = db.query(Application).filter(
        Application.id == application_id,
        Application.user_id == user_id,
    ).first()
    if not application:
        raise NotFound("Application not found")
    return application


def update_application(
    db: Session,
    application_id: str,
    user_id: str,
    fields: Mapping[str, Any],
    now: Optional[datetime] = None,
) -> Application:
    """
    Apply a partial update to one of user_id's applications.

    Only supplied fields are validated. Owner, id and timestamps cannot be set
    by the caller; updated_at always moves forward.
    """
    if not isinstance(fields, Mapping):
        raise ValidationError.for_field("body", "Request body must be an object")
    changes = _validate_update(fields).changes()
    application = get_application(db, application_id, user_id)

    for field, value in changes.items():
        setattr(application, field, value)
    application.updated_at = next_timestamp(application.updated_at, now)

    _commit(db, "update application")
    db.refresh(application)

    logger.info(f"Application updated: application_id={application.id}, user_id={user_id}, fields={sorted(changes)}")
    return application


def delete_application(db: Session, application_id: str, user_id: str) -> None:
    application = get_application(db, application_id, user_id)
    db.delete(application)
    _commit(db, "delete application")
    logger.info(f"Application deleted: application_id={application_id}, user_id={user_id}")


def get_application_stats(db: Session, user_id: str, today: Optional[date] = None) -> Dict[str, Any]:
    """Dashboard counters: totals per status and priority plus upcoming deadlines."""
    today = today or utcnow().date()

    by_status = {status.value: 0 for status in ApplicationStatus}
    for status, count in db.query(Application.status, func.count(Application.id)).filter(
        Application.user_id == user_id
    ).group_by(Application.status).all():
        by_status[status] = count

    by_priority = {priority.value: 0 for priority in Priority}
    for priority, count in db.query(Application.priority, func.count(Application.id)).filter(
        Application.user_id == user_id
    ).group_by(Application.priority).all():
        by_priority[priority] = count

    upcoming = db.query(func.count(Application.id)).filter(
        Application.user_id == user_id,
        Application.deadline >= today,
        Application.deadline <= today + timedelta(days=UPCOMING_DEADLINE_DAYS),
        Application.status.notin_(CLOSED_STATUSES),
    ).scalar()

    return {
        "total": sum(by_status.values()),
        "by_status": by_status,
        "by_priority": by_priority,
        "upcoming_deadlines": upcoming or 0,
    }

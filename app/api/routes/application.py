"""
Application endpoints: CRUD over the authenticated user's applications.
"""
import logging
from typing import Any, Dict
from fastapi import APIRouter, Body, Depends, Request, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_current_user
from app.db.models.user import User
from app.db.session import get_db
from app.schemas.application import ApplicationStats
from app.schemas.common import envelope
from app.services import application_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get("")
def list_applications(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List the user's applications.

    Query options: priority, status, country, startingSemester, sortBy, sortOrder.
    Unrecognized options are ignored.
    """
    applications = application_service.list_applications(db, user.id, request.query_params)
    return envelope(
        {"applications": [application_service.serialize_application(a) for a in applications]},
        count=len(applications),
    )


@router.post("", status_code=status.HTTP_201_CREATED)
def create_application(
    payload: Dict[str, Any] = Body(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    application = application_service.create_application(db, user.id, payload)
    return envelope(
        {"application": application_service.serialize_application(application)},
        message="Application created successfully",
    )


# Declared before /{application_id} so "stats" is not read as an id
@router.get("/stats")
def application_stats(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    stats = application_service.get_application_stats(db, user.id)
    return envelope({"stats": ApplicationStats(**stats).model_dump(by_alias=True)})


@router.get("/{application_id}")
def get_application(
    application_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    application = application_service.get_application(db, application_id, user.id)
    return envelope({"application": application_service.serialize_application(application)})


@router.put("/{application_id}")
@router.patch("/{application_id}", include_in_schema=False)
def update_application(
    application_id: str,
    payload: Dict[str, Any] = Body(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    application = application_service.update_application(db, application_id, user.id, payload)
    return envelope(
        {"application": application_service.serialize_application(application)},
        message="Application updated successfully",
    )


@router.delete("/{application_id}")
def delete_application(
    application_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    application_service.delete_application(db, application_id, user.id)
    return envelope(message="Application deleted successfully")

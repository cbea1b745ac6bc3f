import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from blog.core.config import settings
from blog.core.database import get_db
from blog.core.errors import NotFoundError, ValidationError
from blog.core.templating import PagePaths, render
from blog.models.page import Page
from blog.routers.auth import get_current_user, get_optional_user
from blog.schemas.user import UserRecord
from blog.services.page_service import (
    MAX_OFFSET,
    build_page_collection,
    create_page,
    find_page,
    latest_page,
    parse_page_id,
    update_page,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])


def parse_results_page(raw: Optional[str], limit: int) -> int:
    # anything unparsable, < 1, or past the largest offset falls back to the first page
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return 1
    if value < 1 or (value - 1) * limit > MAX_OFFSET:
        return 1
    return value


def parse_limit(raw: Optional[str]) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return settings.DEFAULT_PAGE_LIMIT
    if 0 < value < settings.MAX_PAGE_LIMIT:
        return value
    return settings.DEFAULT_PAGE_LIMIT


def view_url(page_id: uuid.UUID) -> str:
    return f"{PagePaths.VIEW}{page_id}"


@router.get("/")
def index(
    request: Request,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: Optional[UserRecord] = Depends(get_optional_user)
):
    """Most recent page on top, then a paginated list"""
    page_limit = parse_limit(limit)
    results_page = parse_results_page(page, page_limit)
    offset = (results_page - 1) * page_limit

    collection = build_page_collection(db, offset, page_limit)
    first_page = latest_page(db)

    return render(
        request, "index",
        page=first_page,
        page_collection=collection,
        current_user=current_user
    )


@router.get("/pages/new/")
def new_page(request: Request, current_user: UserRecord = Depends(get_current_user)):
    return render(request, "new", page=None, current_user=current_user)


@router.post("/pages/create/")
def create_page_handler(
    title: str = Form(""),
    body: str = Form(""),
    db: Session = Depends(get_db),
    current_user: UserRecord = Depends(get_current_user)
):
    if not title:
        raise ValidationError("Title is required")

    page = Page(id=uuid.uuid4(), title=title, body=body.encode("utf-8"))
    result = create_page(db, page)
    if not result.created:
        # stored row wins
        logger.warning(f"Page id {page.id} collided, showing the stored page")

    return RedirectResponse(view_url(result.page.id), status_code=status.HTTP_302_FOUND)


@router.get("/pages/edit/{page_id}")
def edit_page(
    request: Request,
    page_id: str,
    db: Session = Depends(get_db),
    current_user: UserRecord = Depends(get_current_user)
):
    parsed_id = parse_page_id(page_id)
    try:
        page = find_page(db, parsed_id)
    except NotFoundError:
        logger.info(f"Edit requested for missing page {parsed_id}")
        return render(
            request, "edit",
            status_code=status.HTTP_404_NOT_FOUND,
            page=None,
            page_id=parsed_id,
            current_user=current_user
        )
    return render(request, "edit", page=page, page_id=parsed_id, current_user=current_user)


@router.post("/pages/save/{page_id}")
def save_page(
    page_id: str,
    title: str = Form(""),
    body: str = Form(""),
    db: Session = Depends(get_db),
    current_user: UserRecord = Depends(get_current_user)
):
    parsed_id = parse_page_id(page_id)
    if not title:
        raise ValidationError("Title is required")

    page = update_page(db, parsed_id, title, body)
    return RedirectResponse(view_url(page.id), status_code=status.HTTP_302_FOUND)


@router.get("/pages/{page_id}")
def view_page(
    request: Request,
    page_id: str,
    db: Session = Depends(get_db),
    current_user: Optional[UserRecord] = Depends(get_optional_user)
):
    try:
        page = find_page(db, parse_page_id(page_id))
    except (NotFoundError, ValidationError) as e:
        logger.info(f"View of unknown page: {e}")
        return RedirectResponse(PagePaths.NEW, status_code=status.HTTP_302_FOUND)
    return render(request, "view", page=page, current_user=current_user)

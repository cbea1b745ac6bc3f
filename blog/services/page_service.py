"""Page service: create / find / update / list / count, plus pagination"""

import enum
import logging
import uuid
from typing import List, Optional, Union

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blog.core.clock import utcnow, advance
from blog.core.database import storage_guard
from blog.core.errors import NotFoundError, ValidationError
from blog.models.page import Page

logger = logging.getLogger(__name__)

# largest offset a 64-bit OFFSET clause accepts
MAX_OFFSET = 2**63 - 1


class CreateStatus(enum.Enum):
    CREATED = "created"
    CONFLICT = "conflict"


class CreateResult:
    def __init__(self, status: CreateStatus, page: Page):
        self.status = status
        self.page = page

    @property
    def created(self) -> bool:
        return self.status is CreateStatus.CREATED


class PageCollection:
    """A window of pages plus the numbers needed to paginate it"""

    def __init__(self, pages: List[Page], count: int, results_page_number: int, limit: int):
        self.pages = pages
        self.count = count
        self.results_page_number = results_page_number
        self.limit = limit
        self.next_page = results_page_number + 1
        # not clamped: page 1 gives 0
        self.previous_page = results_page_number - 1
        self.at_last_page = (results_page_number - 1) * limit + len(pages) >= count


def parse_page_id(raw: str) -> uuid.UUID:
    try:
        return uuid.UUID(raw)
    except (ValueError, TypeError, AttributeError):
        raise ValidationError(f"invalid page id: {raw!r}")


def _as_bytes(body: Union[str, bytes, None]) -> bytes:
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode("utf-8")
    return body


# func 1: create_page()
def create_page(db: Session, page: Page) -> CreateResult:
    """Insert a page keyed by its caller-supplied id.

    An existing id leaves the stored row untouched and comes back as
    CONFLICT with the stored page.
    """
    if page.id is None:
        raise ValidationError("page id is required")
    page_id = page.id

    with storage_guard(db, "create page"):
        existing = db.get(Page, page_id)
        if existing is not None:
            logger.info(f"Page {page_id} already exists, nothing written")
            return CreateResult(CreateStatus.CONFLICT, existing)

        now = utcnow()
        page.title = page.title or ""
        page.body = _as_bytes(page.body)
        page.created_at = now
        page.updated_at = now
        db.add(page)
        try:
            db.commit()
        except IntegrityError:
            # inserted concurrently between the lookup and the commit
            db.rollback()
            logger.info(f"Page {page_id} inserted concurrently, nothing written")
            return CreateResult(CreateStatus.CONFLICT, find_page(db, page_id))

        db.refresh(page)
        logger.info(f"Created page {page_id}")
        return CreateResult(CreateStatus.CREATED, page)


# func 2: find_page()
def find_page(db: Session, page_id: uuid.UUID) -> Page:
    with storage_guard(db, "find page"):
        page = db.get(Page, page_id)
    if page is None:
        raise NotFoundError(f"page {page_id} not found")
    return page


# func 3: update_page()
def update_page(db: Session, page_id: uuid.UUID, title: str, body: Union[str, bytes]) -> Page:
    """Overwrite title and body, updated_at always moves forward"""
    with storage_guard(db, "update page"):
        page = db.get(Page, page_id)
        if page is None:
            raise NotFoundError(f"page {page_id} not found")

        page.title = title
        page.body = _as_bytes(body)
        page.updated_at = advance(page.updated_at)
        db.commit()
        db.refresh(page)

    logger.info(f"Updated page {page_id}")
    return page


# func 4: list_pages()
def list_pages(db: Session, offset: int, limit: int) -> List[Page]:
    """Newest first, `limit` rows at most after skipping `offset`"""
    if offset < 0:
        raise ValidationError("offset must not be negative")
    if offset > MAX_OFFSET:
        raise ValidationError("offset out of range")
    if limit <= 0:
        raise ValidationError("limit must be positive")

    with storage_guard(db, "list pages"):
        return db.query(Page).order_by(
            Page.created_at.desc(),
            Page.id.desc()
        ).offset(offset).limit(limit).all()


# func 5: count_pages()
def count_pages(db: Session) -> int:
    with storage_guard(db, "count pages"):
        return db.query(func.count(Page.id)).scalar() or 0


def latest_page(db: Session) -> Optional[Page]:
    pages = list_pages(db, 0, 1)
    return pages[0] if pages else None


# func 6: build_page_collection()
def build_page_collection(db: Session, offset: int, limit: int) -> PageCollection:
    pages = list_pages(db, offset, limit)
    count = count_pages(db)

    # floor division, offsets that are not a multiple of limit land on the page containing them
    results_page_number = offset // limit + 1

    return PageCollection(pages, count, results_page_number, limit)

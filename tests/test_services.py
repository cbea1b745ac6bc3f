import uuid
from datetime import datetime, timedelta, timezone
from unittest import mock

import pytest
from sqlalchemy.exc import OperationalError

from blog.core.database import SessionLocal
from blog.core.errors import AuthError, NotFoundError, StorageError, ValidationError
from blog.models.page import Page
from blog.models.user import User
from blog.services.page_service import (
    MAX_OFFSET,
    CreateStatus,
    build_page_collection,
    count_pages,
    create_page,
    find_page,
    latest_page,
    list_pages,
    parse_page_id,
    update_page,
)
from blog.services.user_service import (
    UserCreateStatus,
    authenticate_user,
    create_user,
    find_user,
    find_user_by_username,
    login,
)

TEST_TITLE = "Test Page Title"
TEST_BODY = "This is a test"


def seed_page(db, title=TEST_TITLE, body=TEST_BODY):
    result = create_page(db, Page(id=uuid.uuid4(), title=title, body=body.encode()))
    assert result.status is CreateStatus.CREATED
    return result.page


def seed_pages(db, n):
    """n pages, one second apart, oldest first"""
    pages = [seed_page(db, title=f"Page {i}") for i in range(n)]
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for i, page in enumerate(pages):
        page.created_at = base + timedelta(seconds=i)
        page.updated_at = page.created_at
    db.commit()
    return pages


# ============ page_service.py ============

def test_create_then_find(db):
    """create then find gives the same title/body and equal timestamps"""
    created = seed_page(db)

    page = find_page(db, created.id)
    assert page.id == created.id
    assert page.title == TEST_TITLE
    assert page.body == TEST_BODY.encode()
    assert page.text == TEST_BODY
    assert page.created_at is not None
    assert page.created_at == page.updated_at


def test_create_existing_id_is_conflict(db):
    created = seed_page(db)

    result = create_page(db, Page(id=created.id, title="Other", body=b"other"))
    assert result.status is CreateStatus.CONFLICT
    assert not result.created
    assert result.page.title == TEST_TITLE
    assert count_pages(db) == 1


def test_create_concurrent_insert_is_conflict(db):
    """Row inserted by another session after the lookup missed"""
    page_id = uuid.uuid4()
    other = SessionLocal()
    try:
        create_page(other, Page(id=page_id, title=TEST_TITLE, body=TEST_BODY.encode()))
    finally:
        other.close()

    real_get = db.get
    calls = []

    def get_missing_first(*args, **kwargs):
        calls.append(args)
        if len(calls) == 1:
            return None
        return real_get(*args, **kwargs)

    with mock.patch.object(db, "get", side_effect=get_missing_first):
        result = create_page(db, Page(id=page_id, title="Other", body=b"other"))

    assert result.status is CreateStatus.CONFLICT
    assert result.page.id == page_id
    assert result.page.title == TEST_TITLE

    # session still usable after the rollback
    assert count_pages(db) == 1
    seed_page(db)
    assert count_pages(db) == 2


def test_create_requires_id(db):
    with pytest.raises(ValidationError):
        create_page(db, Page(title="No id", body=b""))


def test_find_missing_page(db):
    with pytest.raises(NotFoundError):
        find_page(db, uuid.uuid4())


def test_update_page(db):
    created = seed_page(db)
    page = find_page(db, created.id)
    original_created_at = page.created_at
    original_updated_at = page.updated_at

    updated = update_page(db, created.id, TEST_TITLE, "Totally new content")

    assert updated.id == created.id
    assert updated.title == TEST_TITLE
    assert updated.body == b"Totally new content"
    assert updated.created_at == original_created_at
    assert updated.updated_at > original_updated_at

    again = find_page(db, created.id)
    assert again.text == "Totally new content"


def test_update_missing_page(db):
    with pytest.raises(NotFoundError):
        update_page(db, uuid.uuid4(), "title", "body")


def test_list_pages_scenario(db):
    created = seed_page(db)

    pages = list_pages(db, 0, 50)
    assert len(pages) == 1
    assert pages[0].id == created.id
    assert pages[0].title == TEST_TITLE
    assert pages[0].text == TEST_BODY
    assert count_pages(db) == 1


def test_list_pages_empty(db):
    assert list_pages(db, 0, 50) == []
    assert count_pages(db) == 0
    assert latest_page(db) is None


def test_list_pages_newest_first(db):
    seeded = seed_pages(db, 4)

    pages = list_pages(db, 0, 3)
    assert len(pages) == 3
    assert [p.title for p in pages] == ["Page 3", "Page 2", "Page 1"]
    assert latest_page(db).id == seeded[-1].id

    rest = list_pages(db, 3, 3)
    assert [p.title for p in rest] == ["Page 0"]
    assert list_pages(db, 10, 3) == []


def test_list_pages_rejects_bad_window(db):
    with pytest.raises(ValidationError):
        list_pages(db, -1, 5)
    with pytest.raises(ValidationError):
        list_pages(db, 0, 0)
    with pytest.raises(ValidationError):
        list_pages(db, MAX_OFFSET + 1, 5)


def test_count_pages(db):
    seed_pages(db, 3)
    assert count_pages(db) == 3


def test_parse_page_id():
    page_id = uuid.uuid4()
    assert parse_page_id(str(page_id)) == page_id
    with pytest.raises(ValidationError):
        parse_page_id("not-a-uuid")


def test_storage_failure_is_wrapped():
    broken = mock.MagicMock()
    broken.query.side_effect = OperationalError("SELECT", {}, Exception("connection lost"))

    with pytest.raises(StorageError):
        count_pages(broken)
    broken.rollback.assert_called_once()


# ============ pagination ============

def test_collection_first_page(db):
    seed_pages(db, 7)

    collection = build_page_collection(db, 0, 5)
    assert len(collection.pages) == 5
    assert collection.count == 7
    assert collection.limit == 5
    assert collection.results_page_number == 1
    assert collection.previous_page == 0
    assert collection.next_page == 2
    assert collection.at_last_page is False


def test_collection_last_page(db):
    seed_pages(db, 7)

    collection = build_page_collection(db, 5, 5)
    assert len(collection.pages) == 2
    assert collection.results_page_number == 2
    assert collection.previous_page == 1
    assert collection.next_page == 3
    assert collection.at_last_page is True


def test_collection_exact_fit(db):
    seed_pages(db, 4)

    collection = build_page_collection(db, 2, 2)
    assert collection.results_page_number == 2
    assert collection.at_last_page is True


def test_collection_offset_not_multiple_of_limit(db):
    seed_pages(db, 10)

    # offset 3 lies inside the first window of 5
    collection = build_page_collection(db, 3, 5)
    assert collection.results_page_number == 1
    assert len(collection.pages) == 5
    assert collection.at_last_page is False


def test_collection_empty_store(db):
    collection = build_page_collection(db, 0, 5)
    assert collection.pages == []
    assert collection.count == 0
    assert collection.at_last_page is True


# ============ user_service.py ============

def test_create_user_hashes_password(db):
    result = create_user(db, "alice", "s3cret")
    assert result.status is UserCreateStatus.CREATED
    assert result.user.username == "alice"
    assert result.user.role == "user"
    assert not hasattr(result.user, "password")

    stored = db.get(User, result.user.id)
    assert stored.password != b"s3cret"
    assert stored.verify_password("s3cret")


def test_create_user_duplicate_username(db):
    create_user(db, "alice", "s3cret")
    result = create_user(db, "alice", "other")
    assert result.status is UserCreateStatus.CONFLICT
    assert result.user is None


def test_create_user_concurrent_username_is_conflict(db):
    other = SessionLocal()
    try:
        create_user(other, "alice", "s3cret")
    finally:
        other.close()

    real_query = db.query
    calls = []

    def query_missing_first(*args, **kwargs):
        calls.append(args)
        if len(calls) == 1:
            lookup = mock.MagicMock()
            lookup.filter.return_value.first.return_value = None
            return lookup
        return real_query(*args, **kwargs)

    with mock.patch.object(db, "query", side_effect=query_missing_first):
        result = create_user(db, "alice", "other")

    assert result.status is UserCreateStatus.CONFLICT
    assert result.user is None

    # session still usable after the rollback
    assert find_user_by_username(db, "alice").username == "alice"
    assert create_user(db, "bob", "s3cret").status is UserCreateStatus.CREATED


def test_create_user_requires_fields(db):
    with pytest.raises(ValidationError):
        create_user(db, "", "s3cret")
    with pytest.raises(ValidationError):
        create_user(db, "alice", "")


def test_find_user(db):
    created = create_user(db, "alice", "s3cret").user

    assert find_user(db, created.id).username == "alice"
    assert find_user_by_username(db, "alice").id == created.id

    with pytest.raises(NotFoundError):
        find_user(db, uuid.uuid4())
    with pytest.raises(NotFoundError):
        find_user_by_username(db, "bob")


def test_authenticate_user(db):
    user = create_user(db, "alice", "s3cret").user

    authenticate_user(db, user.id, "s3cret")

    with pytest.raises(AuthError):
        authenticate_user(db, user.id, "")
    with pytest.raises(AuthError):
        authenticate_user(db, user.id, "wrong")
    with pytest.raises(AuthError):
        authenticate_user(db, uuid.uuid4(), "s3cret")


def test_login_hides_failure_reason(db):
    create_user(db, "alice", "s3cret")

    assert login(db, "alice", "s3cret").username == "alice"

    with pytest.raises(AuthError) as wrong_password:
        login(db, "alice", "wrong")
    with pytest.raises(AuthError) as unknown_user:
        login(db, "bob", "s3cret")
    assert str(wrong_password.value) == str(unknown_user.value)


# ============ config ============

def test_missing_database_url_is_fatal(monkeypatch):
    from blog.core.config import get_database_url
    from blog.core.errors import ConfigError

    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(ConfigError):
        get_database_url()

    monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")
    assert get_database_url() == "sqlite:///./other.db"

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from blog.core.database import get_db
from blog.core.errors import LoginRequired, NotFoundError, ValidationError, AuthError
from blog.core.security import create_access_token, decode_token
from blog.core.templating import PagePaths, render
from blog.schemas.user import UserRecord
from blog.services.user_service import create_user, find_user, login

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["auth"])

AUTH_COOKIE = "access_token"


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> Optional[UserRecord]:
    token = request.cookies.get(AUTH_COOKIE)
    if not token:
        return None

    user_id = decode_token(token)
    if not user_id:
        return None

    try:
        return find_user(db, user_id)
    except NotFoundError:
        return None


def get_current_user(user: Optional[UserRecord] = Depends(get_optional_user)) -> UserRecord:
    # gate for every route that mutates pages
    if user is None:
        raise LoginRequired("log in required")
    return user


@router.get("/sign_up/")
def sign_up_form(request: Request):
    return render(request, "sign_up")


@router.post("/create")
def sign_up(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db)
):
    """Create a user from the sign-up form"""
    if not username or not password:
        raise ValidationError("Username or password were empty, try again")

    result = create_user(db, username, password)
    if not result.created:
        return render(
            request, "sign_up",
            status_code=status.HTTP_409_CONFLICT,
            error="Username already taken",
            username=username
        )

    return RedirectResponse(PagePaths.INDEX, status_code=status.HTTP_302_FOUND)


@router.get("/log_in/")
def log_in_form(request: Request):
    return render(request, "log_in")


@router.post("/authenticate/")
def authenticate(
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db)
):
    """Check credentials and hand back a signed cookie"""
    if not username or not password:
        raise AuthError("Username or password were empty, try again")

    user = login(db, username, password)

    response = RedirectResponse(PagePaths.INDEX, status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        AUTH_COOKIE,
        create_access_token(user.id, user.username),
        httponly=True,
        samesite="lax"
    )
    logger.info(f"User {user.id} logged in")
    return response


@router.post("/log_out/")
def log_out():
    response = RedirectResponse(PagePaths.INDEX, status_code=status.HTTP_302_FOUND)
    response.delete_cookie(AUTH_COOKIE)
    return response


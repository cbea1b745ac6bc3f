import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse, RedirectResponse

from blog.core.database import engine, Base
from blog.core.errors import AuthError, LoginRequired, NotFoundError, StorageError, ValidationError
from blog.core.log import setup_logging
from blog.core.templating import UserPaths
import blog.models.page  # noqa: F401  register tables
import blog.models.user  # noqa: F401
from blog.routers import health, auth, pages

setup_logging()
logger = logging.getLogger("blog.main")

# Init DB
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Blog",
    version="0.1.0"
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    logger.info(f"{request.method} {request.url.path} {response.status_code}")
    return response


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    return RedirectResponse(UserPaths.LOG_IN, status_code=status.HTTP_302_FOUND)


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    logger.warning(f"{request.method} {request.url.path} forbidden: {exc}")
    return PlainTextResponse("Forbidden", status_code=status.HTTP_403_FORBIDDEN)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    logger.info(f"{request.method} {request.url.path}: {exc}")
    return PlainTextResponse("Not found", status_code=status.HTTP_404_NOT_FOUND)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return PlainTextResponse(str(exc), status_code=422)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    # detail for operators only
    logger.error(f"{request.method} {request.url.path} storage failure", exc_info=exc)
    return PlainTextResponse("Internal server error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


# Routes
app.include_router(health.router, prefix="/health")
app.include_router(auth.router)
app.include_router(pages.router)

from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))


class PagePaths:
    INDEX = "/"
    VIEW = "/pages/"
    NEW = "/pages/new/"
    CREATE = "/pages/create/"
    EDIT = "/pages/edit/"
    SAVE = "/pages/save/"


class UserPaths:
    SIGN_UP = "/users/sign_up/"
    CREATE = "/users/create"
    LOG_IN = "/users/log_in/"
    AUTHENTICATE = "/users/authenticate/"
    LOG_OUT = "/users/log_out/"


class Links:
    """Route prefixes handed to every template, plus the current template name"""

    def __init__(self, current_route: str):
        self.pages = PagePaths
        self.users = UserPaths
        self.current_route = current_route


def render(request: Request, tmpl: str, status_code: int = 200, **context):
    context["links"] = Links(tmpl)
    return templates.TemplateResponse(request, f"{tmpl}.html", context, status_code=status_code)

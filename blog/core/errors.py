"""Error taxonomy shared by services and routers"""


class BlogError(Exception):
    pass


class NotFoundError(BlogError):
    """No row matches the lookup key"""


class StorageError(BlogError):
    """Connectivity, constraint or driver failure"""


class ValidationError(BlogError):
    """Missing required input or malformed identifier"""


class AuthError(BlogError):
    """Missing, empty or incorrect credentials"""


class ConfigError(BlogError):
    pass


class LoginRequired(AuthError):
    """No valid session cookie on a gated route"""

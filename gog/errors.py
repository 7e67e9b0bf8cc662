"""Error taxonomy. Every error a command can surface to the user derives from GogError."""


class GogError(Exception):
    exit_code = 1


class AuthError(GogError):
    pass


class ForbiddenError(GogError):
    pass


class NotFoundError(GogError):
    exit_code = 2


class ApiError(GogError):
    pass


class NetworkError(GogError):
    pass


class ConfigError(GogError):
    pass


class ValidationError(GogError):
    pass

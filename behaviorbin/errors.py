from typing import Dict, Optional

from starlette.exceptions import HTTPException


class BehaviorError(HTTPException):
    """An error translated straight into a plain-text HTTP response."""

    status_code = 500
    message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.message = message or self.message
        super().__init__(status_code=self.status_code, detail=self.message, headers=headers)


class RouteMismatch(BehaviorError):
    """Known prefix, wrong number of path segments."""

    status_code = 404
    message = "Not found"


class InvalidParameter(BehaviorError):
    status_code = 400
    message = "Bad Request"


class AuthRequired(BehaviorError):
    status_code = 401
    message = ""

    def __init__(self, scheme: str = "Bearer"):
        super().__init__(headers={"WWW-Authenticate": scheme})


class AssetNotFound(BehaviorError):
    status_code = 404
    message = "Not Found"


class AssetReadError(BehaviorError):
    status_code = 500
    message = "Internal Server Error"

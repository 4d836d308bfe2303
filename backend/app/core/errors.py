"""Application error type rendered by the exception handlers in app.core.middleware"""
from typing import Any, List, Optional

# Stable error kinds and the HTTP status each one maps to
ERROR_STATUS_CODES = {
    "validation_error": 400,
    "bad_request": 400,
    "unauthorized": 401,
    "forbidden": 403,
    "not_found": 404,
    "internal_error": 500,
}


class HttpError(Exception):
    """Error raised by services and routes, carries a machine-readable kind"""

    def __init__(self, kind: str, message: str, details: Optional[List[Any]] = None):
        if kind not in ERROR_STATUS_CODES:
            raise ValueError(f"Unknown error kind: {kind}")
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_CODES[self.kind]

    def to_dict(self) -> dict:
        error = {"kind": self.kind, "message": self.message}
        if self.details:
            error["details"] = self.details
        return {"error": error}

    def __repr__(self) -> str:
        return f"HttpError(kind={self.kind!r}, message={self.message!r})"

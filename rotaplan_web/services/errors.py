"""Errors raised by web services and rendered by the app error handler."""

from __future__ import annotations

from typing import Any, Dict


class ServiceError(Exception):
    """A request that cannot be served; carries the HTTP status to answer with."""

    def __init__(self, code: str, message: str, status: int = 400) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status

    def to_dict(self) -> Dict[str, Any]:
        return {"error": {"code": self.code, "message": self.message}}


def bad_request(message: str) -> ServiceError:
    return ServiceError("BAD_REQUEST", message, 400)


def not_found(message: str) -> ServiceError:
    return ServiceError("NOT_FOUND", message, 404)


def conflict(code: str, message: str) -> ServiceError:
    return ServiceError(code, message, 409)

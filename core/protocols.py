"""Shared protocol definitions."""

from typing import Protocol

from core.request_types import Principal, PreparedRequest


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard)."""

    def log_request(
        self,
        path: str,
        prepared: PreparedRequest,
        principal: Principal,
    ) -> None: ...
    def log_response(self, prepared: PreparedRequest, status: int, body: bytes) -> None: ...
    def log_error(self, code: str, status: int, message: str) -> None: ...

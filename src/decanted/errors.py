"""API error types rendered as ``{"error": ..., "detail"?: ...}``."""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException


class ApiError(HTTPException):
    """HTTP error carrying a machine-readable code."""

    def __init__(
        self,
        status_code: int,
        error: str,
        detail: Any = None,  # noqa: ANN401
        headers: dict[str, str] | None = None,
        **extra: Any,  # noqa: ANN401
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error = error
        self.error_detail = detail
        self.extra = extra

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.error_detail is not None:
            body["detail"] = self.error_detail
        body.update(self.extra)
        return body


class UpstreamError(ApiError):
    """An outbound API (Vision, Stripe) failed or returned non-2xx."""

    def __init__(self, service: str, status: int | None = None, detail: Any = None) -> None:  # noqa: ANN401
        super().__init__(502, f"{service} request failed", detail=detail, status=status)


def bad_request(detail: Any = None) -> ApiError:  # noqa: ANN401
    return ApiError(400, "BAD_REQUEST", detail)


def unauthorized(detail: str) -> ApiError:
    return ApiError(401, "UNAUTHORIZED", detail, headers={"WWW-Authenticate": "Bearer"})


def forbidden(detail: str) -> ApiError:
    return ApiError(403, "FORBIDDEN", detail)


def not_found(detail: str, **extra: Any) -> ApiError:  # noqa: ANN401
    return ApiError(404, "NOT_FOUND", detail, **extra)


def conflict(error: str, detail: str | None = None) -> ApiError:
    return ApiError(409, error, detail)

"""Helpers for consistent JSON response schema."""

from __future__ import annotations

from typing import Any

from flask import Response, jsonify


def ok(data: Any, status_code: int = 200, no_store: bool = False) -> tuple[Response, int]:
    """Success response.

    ``no_store`` marks live slot state that clients and proxies must not cache.
    """

    response = jsonify({"success": True, "data": data, "error": None})
    if no_store:
        response.headers["Cache-Control"] = "no-store"
    return response, status_code


def fail(code: str, message: str, status_code: int, details: Any | None = None) -> tuple[Response, int]:
    """Error response."""

    return (
        jsonify(
            {
                "success": False,
                "data": None,
                "error": {"code": code, "message": message, "details": details},
            }
        ),
        status_code,
    )

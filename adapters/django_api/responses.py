"""
ARL Django Adapter - Response Envelope
======================================
Stable transport shape for registry results and failures:

    {"ok": true,  "data": ...}
    {"ok": false, "error": {"code", "message", "details"}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from core.commands.rejection import RejectionReason


@dataclass(frozen=True)
class HttpApiErrorBody:
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class HttpApiResponse:
    ok: bool
    data: Any = None
    error: Optional[HttpApiErrorBody] = None

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True, "data": self.data}
        if self.error is None:
            raise ValueError("error must be set when ok is False.")
        return {"ok": False, "error": self.error.to_dict()}


def error_response(
    *,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return HttpApiResponse(
        ok=False,
        error=HttpApiErrorBody(code=code, message=message, details=details or {}),
    ).to_dict()


def success_response(data: Any) -> dict[str, Any]:
    return HttpApiResponse(ok=True, data=data).to_dict()


def rejection_response(reason: RejectionReason) -> dict[str, Any]:
    return error_response(
        code=reason.code,
        message=reason.message,
        details={"policy_name": reason.policy_name},
    )

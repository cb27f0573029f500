"""
ARL Django Adapter Views
========================
Pass-through HTTP views over the registry service.

The caller identity arrives in the X-Caller-Identity header. It is
the already-authenticated identity; authenticating it is the job of
whatever sits in front of this adapter.
"""

from __future__ import annotations

import json
from typing import Any, Callable

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from adapters.django_api.responses import (
    error_response,
    rejection_response,
    success_response,
)
from adapters.django_api.wiring import get_registry_service
from core.event_store.errors import LedgerError
from engines.adstxt.errors import RegistryPermissionError
from engines.adstxt.services import RegistryExecutionResult, RegistryService

CALLER_HEADER = "X-Caller-Identity"


def _json_error(code: str, message: str, status: int = 400) -> JsonResponse:
    return JsonResponse(
        error_response(code=code, message=message, details={}),
        status=status,
    )


def _method_not_allowed() -> JsonResponse:
    return _json_error(
        "METHOD_NOT_ALLOWED",
        "Method not allowed for this endpoint.",
        status=405,
    )


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _require_param(request: HttpRequest, name: str) -> str:
    value = request.GET.get(name)
    if value is None:
        raise ValueError(f"{name} is required.")
    return value


def _execution_data(result: RegistryExecutionResult) -> dict[str, Any]:
    if not result.applied:
        return {"applied": False, "command_id": str(result.command_id)}
    entry = result.entry
    return {
        "applied": True,
        "command_id": str(result.command_id),
        "event_type": result.event_type,
        "sequence": entry.sequence,
        "event_hash": entry.event_hash,
        "notification": {
            "name": result.notification.name,
            "args": list(result.notification.args),
        },
    }


def _dispatch_write(
    request: HttpRequest,
    operation: Callable[[RegistryService, str, dict[str, Any]], RegistryExecutionResult],
) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()

    caller = request.headers.get(CALLER_HEADER)
    if not caller:
        return _json_error("MISSING_CALLER", f"{CALLER_HEADER} header is required.")

    try:
        body = _parse_json_body(request)
        result = operation(get_registry_service(), caller, body)
    except RegistryPermissionError as exc:
        return JsonResponse(rejection_response(exc.reason), status=403)
    except LedgerError as exc:
        return _json_error("LEDGER_UNAVAILABLE", str(exc), status=503)
    except (ValueError, KeyError, TypeError) as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)

    if result.rejection is not None:
        return JsonResponse(rejection_response(result.rejection), status=409)
    return JsonResponse(success_response(_execution_data(result)))


# ── Queries ───────────────────────────────────────────────────

@csrf_exempt
def publisher_detail_view(request: HttpRequest, identity: str) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    service = get_registry_service()
    return JsonResponse(success_response({
        "publisher": service.get_publisher(identity).to_dict(),
        "registered": service.is_registered_publisher(identity),
    }))


@csrf_exempt
def domain_detail_view(request: HttpRequest, domain: str) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    service = get_registry_service()
    return JsonResponse(success_response({
        "domain": domain,
        "registered": service.is_registered_publisher_domain(domain),
        "owner": service.get_domain_owner(domain),
    }))


@csrf_exempt
def seller_lookup_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    service = get_registry_service()
    try:
        seller_domain = _require_param(request, "seller_domain")
        seller_id = _require_param(request, "seller_id")
        publisher = request.GET.get("publisher")
        publisher_domain = request.GET.get("publisher_domain")
        if (publisher is None) == (publisher_domain is None):
            raise ValueError("Exactly one of publisher or publisher_domain is required.")
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)

    if publisher is not None:
        record = service.get_seller_for_publisher(publisher, seller_domain, seller_id)
    else:
        record = service.get_seller_for_publisher_domain(
            publisher_domain, seller_domain, seller_id,
        )
    return JsonResponse(success_response({
        "seller": record.to_dict(),
        "present": not record.is_default,
    }))


# ── Writes ────────────────────────────────────────────────────

@csrf_exempt
def publisher_register_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_write(
        request,
        lambda service, caller, body: service.register_publisher(
            caller, body.get("identity"), body.get("domain"), body.get("name"),
        ),
    )


@csrf_exempt
def publisher_deregister_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_write(
        request,
        lambda service, caller, body: service.deregister_publisher(
            caller, body.get("identity"),
        ),
    )


@csrf_exempt
def seller_add_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_write(
        request,
        lambda service, caller, body: service.add_seller(
            caller,
            body["seller_domain"],
            body["seller_id"],
            body.get("relationship", 0),
            body.get("tag_id", ""),
        ),
    )


@csrf_exempt
def seller_remove_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_write(
        request,
        lambda service, caller, body: service.remove_seller(
            caller, body["seller_domain"], body["seller_id"],
        ),
    )

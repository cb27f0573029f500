"""
ARL Django Adapter Wiring
=========================
Owns the process-wide RegistryService behind the HTTP views.

This module is adapter-only glue:
- the administrator and behaviour switches come from settings.ARL_REGISTRY
- the service is built once, lazily, under a lock
- tests may install their own service with install_registry_service()
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from engines.adstxt.services import RegistryService
from engines.adstxt.settings import RegistrySettings

logger = logging.getLogger("arl.http")

_SERVICE_LOCK = threading.Lock()
_SERVICE: Optional[RegistryService] = None


def _build_from_settings() -> RegistryService:
    config = getattr(settings, "ARL_REGISTRY", None) or {}
    administrator = config.get("ADMINISTRATOR")
    if not administrator:
        raise ImproperlyConfigured("ARL_REGISTRY['ADMINISTRATOR'] must be set.")
    try:
        registry_settings = RegistrySettings.from_mapping(config)
    except ValueError as exc:
        raise ImproperlyConfigured(str(exc)) from exc
    service = RegistryService(administrator, settings=registry_settings)
    logger.info(
        f"Registry service built: administrator={administrator} "
        f"registry_id={service.registry_id} settings={registry_settings}"
    )
    return service


def get_registry_service() -> RegistryService:
    global _SERVICE
    with _SERVICE_LOCK:
        if _SERVICE is None:
            _SERVICE = _build_from_settings()
        return _SERVICE


def install_registry_service(service: Optional[RegistryService]) -> None:
    """Replace (or, with None, drop) the process-wide service."""
    global _SERVICE
    with _SERVICE_LOCK:
        _SERVICE = service

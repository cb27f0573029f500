"""
ARL Django adapter tests.

Drive the registry through the HTTP surface with Django's test
client. The registry keeps no rows in the database, so no test here
needs database access.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.test import Client

from adapters.django_api.wiring import get_registry_service, install_registry_service
from engines.adstxt.services import RegistryService
from engines.adstxt.settings import RegistrySettings

ADMIN = "0x00000000000000000000000000000000000000ad"
PUB_A = "0x000000000000000000000000000000000000000a"
STRANGER = "0x00000000000000000000000000000000000000ff"
REGISTRY_ID = uuid.uuid5(uuid.NAMESPACE_URL, "arl-http-adapter-tests")


class FixedClock:
    def __call__(self) -> datetime:
        return datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def service():
    registry = RegistryService(ADMIN, registry_id=REGISTRY_ID, clock=FixedClock())
    install_registry_service(registry)
    yield registry
    install_registry_service(None)


@pytest.fixture
def client():
    return Client()


def _post(client, path, body, caller=ADMIN):
    headers = {"HTTP_X_CALLER_IDENTITY": caller} if caller else {}
    return client.post(
        path,
        data=json.dumps(body),
        content_type="application/json",
        **headers,
    )


def _register_a(client):
    return _post(client, "/v1/registry/publishers/register", {
        "identity": PUB_A,
        "domain": "example.com",
        "name": "Example",
    })


class TestPublisherEndpoints:
    def test_register_and_read_back(self, service, client):
        response = _register_a(client)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["applied"] is True
        assert data["event_type"] == "adstxt.publisher.registered.v1"
        assert data["sequence"] == 0
        assert data["notification"] == {"name": "PublisherRegistered", "args": [PUB_A]}

        response = client.get(f"/v1/registry/publishers/{PUB_A}")
        assert response.status_code == 200
        assert response.json()["data"] == {
            "publisher": {"identity": PUB_A, "domain": "example.com", "name": "Example"},
            "registered": True,
        }

        response = client.get("/v1/registry/domains/example.com")
        assert response.json()["data"] == {
            "domain": "example.com",
            "registered": True,
            "owner": PUB_A,
        }

    def test_non_admin_register_is_forbidden(self, service, client):
        response = _post(client, "/v1/registry/publishers/register", {
            "identity": PUB_A,
            "domain": "example.com",
            "name": "Example",
        }, caller=STRANGER)

        assert response.status_code == 403
        error = response.json()["error"]
        assert error["code"] == "PERMISSION_DENIED"
        assert error["details"] == {"policy_name": "caller_must_be_administrator_policy"}
        assert service.is_registered_publisher(PUB_A) is False
        assert len(service.ledger) == 0

    @pytest.mark.parametrize("body", [
        {"identity": "", "domain": "example.com", "name": "Example"},
        {"identity": "not-an-address", "domain": "", "name": "Example"},
        {},
    ])
    def test_non_admin_with_malformed_request_is_forbidden(self, service, client, body):
        response = _post(client, "/v1/registry/publishers/register", body, caller=STRANGER)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "PERMISSION_DENIED"

        response = _post(client, "/v1/registry/publishers/deregister", body, caller=STRANGER)
        assert response.status_code == 403
        assert len(service.ledger) == 0

    def test_deregister(self, service, client):
        _register_a(client)
        response = _post(client, "/v1/registry/publishers/deregister", {"identity": PUB_A})

        assert response.status_code == 200
        assert response.json()["data"]["notification"]["name"] == "PublisherDeregistered"
        assert service.is_registered_publisher_domain("example.com") is False

    def test_unknown_publisher_reads_default(self, service, client):
        response = client.get(f"/v1/registry/publishers/{STRANGER}")
        assert response.json()["data"] == {
            "publisher": {
                "identity": "0x0000000000000000000000000000000000000000",
                "domain": "",
                "name": "",
            },
            "registered": False,
        }


class TestSellerEndpoints:
    def test_add_lookup_remove(self, service, client):
        _register_a(client)
        response = _post(client, "/v1/registry/sellers/add", {
            "seller_domain": "ssp.com",
            "seller_id": "123",
            "relationship": "DIRECT",
            "tag_id": "tag1",
        }, caller=PUB_A)
        assert response.status_code == 200
        assert response.json()["data"]["notification"]["name"] == "SellerAdded"

        response = client.get("/v1/registry/sellers", {
            "publisher_domain": "example.com",
            "seller_domain": "ssp.com",
            "seller_id": "123",
        })
        assert response.json()["data"] == {
            "seller": {
                "domain": "ssp.com",
                "seller_id": "123",
                "relationship": 0,
                "tag_id": "tag1",
            },
            "present": True,
        }

        response = _post(client, "/v1/registry/sellers/remove", {
            "seller_domain": "ssp.com",
            "seller_id": "123",
        }, caller=PUB_A)
        assert response.status_code == 200

        response = client.get("/v1/registry/sellers", {
            "publisher": PUB_A,
            "seller_domain": "ssp.com",
            "seller_id": "123",
        })
        assert response.json()["data"]["present"] is False

    def test_unregistered_caller_gets_conflict(self, service, client):
        response = _post(client, "/v1/registry/sellers/add", {
            "seller_domain": "ssp.com",
            "seller_id": "123",
        }, caller=STRANGER)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "PUBLISHER_NOT_REGISTERED"
        assert len(service.ledger) == 0

    def test_legacy_mode_reports_not_applied(self, client):
        install_registry_service(RegistryService(ADMIN, settings=RegistrySettings.legacy()))
        try:
            response = _post(client, "/v1/registry/sellers/add", {
                "seller_domain": "ssp.com",
                "seller_id": "123",
            }, caller=STRANGER)
        finally:
            install_registry_service(None)

        assert response.status_code == 200
        assert response.json()["data"]["applied"] is False

    def test_lookup_needs_exactly_one_publisher_selector(self, service, client):
        response = client.get("/v1/registry/sellers", {
            "seller_domain": "ssp.com",
            "seller_id": "123",
        })
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"


class TestRequestValidation:
    def test_missing_caller_header(self, service, client):
        response = _post(client, "/v1/registry/publishers/register", {}, caller=None)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "MISSING_CALLER"

    def test_missing_field(self, service, client):
        response = _post(client, "/v1/registry/publishers/register", {"identity": PUB_A})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_invalid_json(self, service, client):
        response = client.post(
            "/v1/registry/publishers/register",
            data="{not json",
            content_type="application/json",
            HTTP_X_CALLER_IDENTITY=ADMIN,
        )
        assert response.status_code == 400

    def test_invalid_relationship(self, service, client):
        _register_a(client)
        response = _post(client, "/v1/registry/sellers/add", {
            "seller_domain": "ssp.com",
            "seller_id": "123",
            "relationship": 5,
        }, caller=PUB_A)
        assert response.status_code == 400

    def test_wrong_method(self, service, client):
        assert client.get("/v1/registry/sellers/add").status_code == 405
        assert client.post("/v1/registry/domains/example.com").status_code == 405


class TestWiring:
    def test_builds_from_settings(self, settings):
        settings.ARL_REGISTRY = {
            "ADMINISTRATOR": ADMIN,
            "STRICT_SELLER_AUTHORIZATION": "false",
        }
        install_registry_service(None)
        try:
            service = get_registry_service()
            assert service.administrator == ADMIN
            assert service.settings.strict_seller_authorization is False
            assert service.settings.repair_stale_domain_index is True
            assert get_registry_service() is service
        finally:
            install_registry_service(None)

    def test_missing_administrator(self, settings):
        settings.ARL_REGISTRY = {}
        install_registry_service(None)
        with pytest.raises(ImproperlyConfigured):
            get_registry_service()

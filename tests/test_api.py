import pytest
from fastapi.testclient import TestClient

import config
from main import app
from sri_core.domain.models.errors import DomainError, ErrorCode
from sri_core.domain.models.identity import IdentityRecord, IdentityResolution, ResolutionState
from sri_core.infrastructure.api.routers.identity_router import get_identity_use_case


class StubUseCase:
    def __init__(self, resolution: IdentityResolution):
        self.resolution = resolution
        self.received = []

    async def execute(self, identification: str) -> IdentityResolution:
        self.received.append(identification)
        return self.resolution


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def override_resolution(resolution: IdentityResolution) -> StubUseCase:
    stub = StubUseCase(resolution)
    app.dependency_overrides[get_identity_use_case] = lambda: stub
    return stub


def failed(code: ErrorCode) -> IdentityResolution:
    return IdentityResolution(
        identification="1712345678",
        state=ResolutionState.FAILED,
        error=DomainError(code=code, message="fallo"),
    )


def test_health_check(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_cors_allows_configured_origin(client):
    origin = config.CORS_ORIGINS[0]

    response = client.options("/", headers={"Origin": origin, "Access-Control-Request-Method": "GET"})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == origin


def test_cors_rejects_unknown_origin(client):
    response = client.options(
        "/", headers={"Origin": "https://desconocido.example", "Access-Control-Request-Method": "GET"}
    )

    assert "access-control-allow-origin" not in response.headers


def test_parse_valid_invoice(client, invoice, invoice_key):
    response = client.post(
        "/api/v1/documentos/parse",
        files={"xml_file": ("factura.xml", invoice.encode("utf-8"), "application/xml")},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["access_key"] == invoice_key
    assert body["document_type"] == "INVOICE"
    assert body["document"]["header"]["ruc"] == "1790012345001"
    assert body["document"]["body"]["total_amount"] == "115.00"


def test_parse_invalid_document_returns_all_issues(client, invoice):
    broken = invoice.replace("<ambiente>1</ambiente>", "<ambiente>9</ambiente>")

    response = client.post(
        "/api/v1/documentos/parse",
        files={"xml_file": ("factura.xml", broken.encode("utf-8"), "application/xml")},
    )

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["error_code"] == "SCHEMA_VALIDATION_ERROR"
    assert detail["issues"]
    assert detail["issues"][0]["line"] > 0


def test_identity_success_returns_record(client):
    record = IdentityRecord(identification="1712345678", full_name="PEREZ MARIA JOSE")
    stub = override_resolution(IdentityResolution(
        identification="1712345678",
        state=ResolutionState.DATA_RETRIEVED,
        record=record,
    ))

    response = client.get("/api/v1/identificaciones/1712345678")

    assert response.status_code == 200
    assert response.json()["full_name"] == "PEREZ MARIA JOSE"
    assert stub.received == ["1712345678"]


@pytest.mark.parametrize("code, status", [
    (ErrorCode.INVALID_IDENTIFICATION, 400),
    (ErrorCode.NOT_FOUND, 404),
    (ErrorCode.DESERIALIZATION_ERROR, 502),
    (ErrorCode.SESSION_ERROR, 503),
    (ErrorCode.CAPTCHA_ERROR, 503),
    (ErrorCode.NETWORK_ERROR, 503),
])
def test_identity_errors_map_to_http_status(client, code, status):
    override_resolution(failed(code))

    response = client.get("/api/v1/identificaciones/1712345678")

    assert response.status_code == status
    detail = response.json()["detail"]
    assert detail["error_code"] == code.value
    assert detail["retryable"] == (code not in (ErrorCode.NOT_FOUND, ErrorCode.INVALID_IDENTIFICATION))

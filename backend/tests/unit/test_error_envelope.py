"""Every failure answers with the same {status, message, code?, errors?} shape."""

from fastapi import Depends, FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field
import pytest

from app.core.exceptions import (
    ConflictException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    SlotUnavailableException,
    UnauthorizedException,
)
from app.errors import error_envelope, register_error_handlers


class _Body(BaseModel):
    duration: int = Field(..., ge=30)


def _failing_dependency():
    raise UnauthorizedException("Not authenticated", code="NOT_AUTHENTICATED")


@pytest.fixture
def error_client() -> TestClient:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/not-found")
    def not_found():
        raise NotFoundException("Trainer not found", details={"trainer_id": "t1"})

    @app.get("/slot")
    def slot():
        raise SlotUnavailableException()

    @app.get("/service-failure")
    def service_failure():
        raise ServiceException("connection reset by peer")

    @app.get("/repository-failure")
    def repository_failure():
        raise RepositoryException("boom")

    @app.get("/converted")
    def converted():
        raise ConflictException("Already exists", code="EMAIL_EXISTS").to_http_exception()

    @app.get("/plain-http")
    def plain_http():
        raise HTTPException(status_code=404, detail="Nope")

    @app.get("/protected", dependencies=[Depends(_failing_dependency)])
    def protected():
        return {"ok": True}

    @app.post("/validate")
    def validate(body: _Body):
        return body

    @app.get("/crash")
    def crash():
        raise RuntimeError("unexpected")

    return TestClient(app, raise_server_exceptions=False)


def test_envelope_status_follows_status_code():
    assert error_envelope(status_code=404, message="x")["status"] == "fail"
    assert error_envelope(status_code=503, message="x")["status"] == "error"


def test_envelope_omits_empty_optional_fields():
    assert error_envelope(status_code=400) == {"status": "fail", "message": "Bad Request"}


def test_domain_exception_keeps_message_and_code(error_client):
    response = error_client.get("/not-found")
    assert response.status_code == 404
    body = response.json()
    assert body["status"] == "fail"
    assert body["message"] == "Trainer not found"
    assert body["code"] == "NotFoundException"
    assert body["errors"] == {"trainer_id": "t1"}


def test_slot_conflict_is_a_400(error_client):
    response = error_client.get("/slot")
    assert response.status_code == 400
    assert response.json()["message"] == "This time slot is not available"
    assert response.json()["code"] == "SLOT_UNAVAILABLE"


def test_internal_details_are_masked(error_client):
    response = error_client.get("/service-failure")
    assert response.status_code == 500
    assert response.json() == {
        "status": "error",
        "message": "Internal server error",
        "code": "ServiceException",
    }


def test_repository_failure_is_500(error_client):
    response = error_client.get("/repository-failure")
    assert response.status_code == 500
    assert response.json()["status"] == "error"
    assert "boom" not in response.text


def test_converted_domain_exception_has_same_shape(error_client):
    body = error_client.get("/converted").json()
    assert body == {"status": "fail", "message": "Already exists", "code": "EMAIL_EXISTS"}


def test_plain_http_exception(error_client):
    response = error_client.get("/plain-http")
    assert response.status_code == 404
    assert response.json() == {"status": "fail", "message": "Nope"}


def test_unauthorized_from_dependency_sets_challenge_header(error_client):
    response = error_client.get("/protected")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json()["code"] == "NOT_AUTHENTICATED"


def test_request_validation_is_400_with_field_errors(error_client):
    response = error_client.post("/validate", json={"duration": 29})
    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "fail"
    assert body["message"] == "Validation failed"
    assert body["code"] == "validation_error"
    assert body["errors"][0]["field"] == "duration"


def test_unknown_route_uses_envelope(error_client):
    response = error_client.get("/does-not-exist")
    assert response.status_code == 404
    assert response.json()["status"] == "fail"


def test_unhandled_exception_is_generic_500(error_client):
    response = error_client.get("/crash")
    assert response.status_code == 500
    assert response.json() == {"status": "error", "message": "Internal server error"}

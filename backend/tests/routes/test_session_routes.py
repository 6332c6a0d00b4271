from datetime import timedelta
from unittest.mock import Mock

from app.api.dependencies.services import get_booking_service
from app.core.exceptions import ServiceException
from app.core.timezone_utils import utc_now
from app.main import app
from app.models.training_session import SessionStatus
from app.services.booking_service import BookingService

SESSIONS_URL = "/api/v1/training/sessions"


def _cancel_url(session_id: str) -> str:
    return f"{SESSIONS_URL}/{session_id}/cancel"


class TestListSessions:
    def test_lists_own_sessions_newest_first(
        self, client, auth_headers, test_client_user, create_user, test_trainer, create_session, future_slot
    ):
        older = create_session(test_client_user, test_trainer, future_slot)
        newer = create_session(test_client_user, test_trainer, future_slot + timedelta(days=1))
        create_session(create_user(), test_trainer, future_slot + timedelta(days=2))

        response = client.get(SESSIONS_URL, headers=auth_headers)

        assert response.status_code == 200
        sessions = response.json()["data"]["sessions"]
        assert [s["id"] for s in sessions] == [newer.id, older.id]
        assert sessions[0]["trainer"]["name"] == "Alex Strong"
        assert sessions[0]["scheduledAt"].endswith("Z") or "+00:00" in sessions[0]["scheduledAt"]

    def test_status_filter(
        self, client, auth_headers, test_client_user, test_trainer, create_session, future_slot
    ):
        create_session(test_client_user, test_trainer, future_slot)
        done = create_session(
            test_client_user,
            test_trainer,
            future_slot - timedelta(days=7),
            status=SessionStatus.COMPLETED,
        )

        response = client.get(SESSIONS_URL, params={"status": "COMPLETED"}, headers=auth_headers)

        assert [s["id"] for s in response.json()["data"]["sessions"]] == [done.id]

    def test_upcoming(
        self, client, auth_headers, test_client_user, test_trainer, create_session, future_slot
    ):
        upcoming = create_session(test_client_user, test_trainer, future_slot)
        create_session(test_client_user, test_trainer, utc_now() - timedelta(days=2))

        response = client.get(SESSIONS_URL, params={"upcoming": "true"}, headers=auth_headers)

        assert [s["id"] for s in response.json()["data"]["sessions"]] == [upcoming.id]

    def test_unknown_status_is_400(self, client, auth_headers):
        response = client.get(SESSIONS_URL, params={"status": "LOST"}, headers=auth_headers)
        assert response.status_code == 400

    def test_requires_authentication(self, client):
        response = client.get(SESSIONS_URL)
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_unverified_user_rejected(self, client, create_user, make_auth_headers):
        pending = create_user(verified=False)
        response = client.get(SESSIONS_URL, headers=make_auth_headers(pending))
        assert response.status_code == 401
        assert response.json()["message"] == "Please verify your email address first"

    def test_free_user_can_still_list(self, client, free_user, make_auth_headers):
        response = client.get(SESSIONS_URL, headers=make_auth_headers(free_user))
        assert response.status_code == 200
        assert response.json()["data"]["sessions"] == []


class TestCancelSession:
    def test_cancel(self, client, auth_headers, test_client_user, test_trainer, create_session, future_slot):
        session = create_session(test_client_user, test_trainer, future_slot)

        response = client.post(_cancel_url(session.id), headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Session cancelled successfully"
        assert body["data"]["session"]["status"] == "CANCELLED"
        assert "cancelledAt" not in body["data"]["session"]

    def test_too_late(self, client, auth_headers, test_client_user, test_trainer, create_session):
        session = create_session(test_client_user, test_trainer, utc_now() + timedelta(hours=12))

        response = client.post(_cancel_url(session.id), headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot cancel within 24 hours of scheduled time"

    def test_other_users_session_is_forbidden(
        self, client, make_auth_headers, create_user, test_client_user, test_trainer, create_session, future_slot
    ):
        session = create_session(test_client_user, test_trainer, future_slot)
        stranger = create_user(email="stranger@example.com")

        response = client.post(_cancel_url(session.id), headers=make_auth_headers(stranger))

        assert response.status_code == 403
        assert response.json()["message"] == "Unauthorized to cancel this session"

    def test_already_cancelled(
        self, client, auth_headers, test_client_user, test_trainer, create_session, future_slot
    ):
        session = create_session(
            test_client_user, test_trainer, future_slot, status=SessionStatus.CANCELLED
        )
        response = client.post(_cancel_url(session.id), headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Can only cancel scheduled sessions"

    def test_missing_session(self, client, auth_headers):
        response = client.post(_cancel_url("01HF4G12ABCDEF3456789XYZAB"), headers=auth_headers)
        assert response.status_code == 404

    def test_cancel_then_rebook_same_slot(
        self, client, auth_headers, test_trainer, future_slot
    ):
        payload = {"scheduledAt": future_slot.isoformat(), "duration": 60}
        book_url = f"/api/v1/training/trainers/{test_trainer.id}/book"

        first = client.post(book_url, json=payload, headers=auth_headers).json()["data"]["session"]
        assert client.post(_cancel_url(first["id"]), headers=auth_headers).status_code == 200

        second = client.post(book_url, json=payload, headers=auth_headers)
        assert second.status_code == 201
        assert second.json()["data"]["session"]["id"] != first["id"]


class TestServerFaults:
    def test_database_failure_is_masked(self, client, auth_headers):
        service = Mock(spec=BookingService)
        service.cancel_session.side_effect = ServiceException(
            "Database operation failed: (psycopg2.OperationalError) password=hunter2 host=db"
        )
        app.dependency_overrides[get_booking_service] = lambda: service

        response = client.post(_cancel_url("01HF4G12ABCDEF3456789XYZAB"), headers=auth_headers)

        assert response.status_code == 500
        body = response.json()
        assert body["status"] == "error"
        assert body["message"] == "Internal server error"
        assert "hunter2" not in response.text

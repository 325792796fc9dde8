"""
Integration Tests for the Handover API

Drives the FastAPI app over httpx's ASGI transport with the in-memory
stores and a mocked gateway.
"""
from datetime import date

import httpx
import pytest

from mediflow.config import Settings
from mediflow.core.handover import NO_PATIENTS_MESSAGE
from mediflow.main import GENERIC_ERROR_MESSAGE, create_app
from mediflow.models.clinical import Assignment, VitalSign
from mediflow.utils import SummarizationError

NURSE = {"X-User-Id": "10"}
OTHER_NURSE = {"X-User-Id": "11"}


@pytest.fixture
def app(store, repository, gateway, now_fn):
    settings = Settings(timezone="Asia/Seoul", log_level="WARNING")
    return create_app(settings, store=store, repository=repository, gateway=gateway, now_fn=now_fn)


@pytest.fixture
async def async_client(app):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
def assigned(store, at):
    store.add_assignment(Assignment(id=1, nurse_id=10, patient_id=100, shift_id=1,
                                    assigned_date=date(2026, 3, 10)))
    store.add_records([VitalSign(id=1, patient_id=100, measured_at=at(10, 0), systolic_bp=150)])


async def _save(client, body="요약 본문", headers=NURSE, **params):
    query = {"departmentId": 1, "fromShiftId": 1, "toShiftId": 2, **params}
    return await client.post(
        "/api/handovers",
        params=query,
        content=body.encode("utf-8"),
        headers={**headers, "Content-Type": "text/plain"},
    )


@pytest.mark.asyncio
class TestHealthEndpoint:

    async def test_health(self, async_client):
        """Test /health endpoint."""
        response = await async_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
class TestAiSummaryEndpoint:
    """Tests for POST /api/handovers/ai-summary."""

    async def test_generates_summary(self, async_client, assigned, gateway):
        """Test AI summary generation for an assigned patient."""
        response = await async_client.post(
            "/api/handovers/ai-summary", params={"fromShiftId": 1}, headers=NURSE
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"] == gateway.generate_text.return_value
        (prompt,), _ = gateway.generate_text.call_args
        assert "BP 150/-" in prompt

    async def test_no_patients(self, async_client, gateway):
        """No assigned patients returns the sentinel without calling Gemini."""
        response = await async_client.post(
            "/api/handovers/ai-summary", params={"fromShiftId": 1}, headers=NURSE
        )

        assert response.status_code == 200
        assert response.json()["data"] == NO_PATIENTS_MESSAGE
        gateway.generate_text.assert_not_awaited()

    async def test_requires_caller_identity(self, async_client):
        """A request without X-User-Id returns 401."""
        response = await async_client.post("/api/handovers/ai-summary", params={"fromShiftId": 1})

        assert response.status_code == 401
        assert response.json()["success"] is False

    async def test_missing_shift_param(self, async_client):
        """Missing fromShiftId returns 400 naming the field."""
        response = await async_client.post("/api/handovers/ai-summary", headers=NURSE)

        assert response.status_code == 400
        assert response.json()["message"].startswith("fromShiftId:")

    async def test_unknown_shift(self, async_client):
        """An unknown shift raises InvalidShiftError."""
        response = await async_client.post(
            "/api/handovers/ai-summary", params={"fromShiftId": 999}, headers=NURSE
        )

        assert response.status_code == 404
        assert response.json() == {"success": False, "data": None, "message": "shift 999 not found"}

    async def test_gateway_failure_hides_provider_error(self, async_client, assigned, gateway):
        """Gateway failures return 502 without provider details."""
        gateway.generate_text.side_effect = SummarizationError("API key sk-secret rejected")

        response = await async_client.post(
            "/api/handovers/ai-summary", params={"fromShiftId": 1}, headers=NURSE
        )

        assert response.status_code == 502
        assert "sk-secret" not in response.text
        assert response.json()["message"] == SummarizationError.public_message


@pytest.mark.asyncio
class TestHandoverEndpoints:
    """Tests for save / list / delete."""

    async def test_save_and_list_round_trip(self, async_client):
        """A saved handover lists back in camelCase."""
        saved = await _save(async_client)
        assert saved.status_code == 200
        assert saved.json()["data"]["handoverId"] == 1

        response = await async_client.get("/api/handovers/department/1")

        assert response.status_code == 200
        items = response.json()["data"]
        assert len(items) == 1
        item = items[0]
        assert item["departmentName"] == "내과"
        assert item["fromShiftType"] == "DAY"
        assert item["toShiftType"] == "EVENING"
        assert item["createdByName"] == "김간호"
        assert item["aiSummary"] == "요약 본문"
        assert item["handoverDate"] == "2026-03-10"

    async def test_save_json_body(self, async_client):
        """A JSON body with additionalNotes is accepted."""
        response = await async_client.post(
            "/api/handovers",
            params={"departmentId": 1, "fromShiftId": 1, "toShiftId": 2},
            json={"aiSummary": "JSON 요약", "additionalNotes": "낙상 주의"},
            headers=NURSE,
        )

        assert response.status_code == 200
        assert response.json()["data"]["additionalNotes"] == "낙상 주의"

    async def test_save_json_missing_summary(self, async_client):
        """A JSON body without aiSummary returns 400."""
        response = await async_client.post(
            "/api/handovers",
            params={"departmentId": 1, "fromShiftId": 1, "toShiftId": 2},
            json={"additionalNotes": "only notes"},
            headers=NURSE,
        )

        assert response.status_code == 400
        assert response.json()["message"].startswith("aiSummary:")

    async def test_save_blank_summary(self, async_client):
        """A blank text body returns 400."""
        response = await _save(async_client, body="   ")

        assert response.status_code == 400
        assert response.json()["message"] == "aiSummary: must not be blank"

    async def test_save_unknown_department(self, async_client):
        """Saving to an unknown department returns 404."""
        response = await _save(async_client, departmentId=77)

        assert response.status_code == 404

    async def test_delete_by_non_author_is_forbidden(self, async_client):
        """Another nurse gets 403 and the record stays."""
        await _save(async_client)

        response = await async_client.delete("/api/handovers/1", headers=OTHER_NURSE)

        assert response.status_code == 403
        listed = await async_client.get("/api/handovers/department/1")
        assert len(listed.json()["data"]) == 1

    async def test_delete_by_author(self, async_client):
        """The author can delete over HTTP."""
        await _save(async_client)

        response = await async_client.delete("/api/handovers/1", headers=NURSE)

        assert response.status_code == 200
        listed = await async_client.get("/api/handovers/department/1")
        assert listed.json()["data"] == []

    async def test_delete_missing(self, async_client):
        """Deleting a missing handover returns 404."""
        response = await async_client.delete("/api/handovers/5", headers=NURSE)
        assert response.status_code == 404


@pytest.mark.asyncio
class TestAiAskEndpoint:
    """Tests for POST /api/ai/ask."""

    async def test_ask(self, async_client, gateway):
        """/api/ai/ask returns the question and answer."""
        gateway.generate_text.return_value = "답변"

        response = await async_client.post("/api/ai/ask", json={"question": "질문"})

        assert response.status_code == 200
        assert response.json()["data"] == {"question": "질문", "answer": "답변"}

    async def test_unexpected_error_is_generic(self, app, gateway):
        """Unexpected errors return a generic 500 message."""
        gateway.generate_text.side_effect = RuntimeError("db password=hunter2")

        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app, raise_app_exceptions=False),
            base_url="http://test",
        ) as client:
            response = await client.post("/api/ai/ask", json={"question": "질문"})

        assert response.status_code == 500
        assert response.json()["message"] == GENERIC_ERROR_MESSAGE
        assert "hunter2" not in response.text

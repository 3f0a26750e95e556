"""
CareNotes Backend: API Endpoint Tests
=======================================

What:  End-to-end tests over HTTP for patients, voice notes and summaries.
How:   HTTPX AsyncClient against a fresh app bound to a temporary SQLite file.

What we test:
    ✅ Create / read / update / delete round trips with camelCase bodies
    ✅ Status codes and error envelopes for every failure class
    ✅ Cascading deletes observed through the API
    ✅ Voice note filtering by patientId
    ✅ Unmatched routes answer {"error": "Not found"}
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from app.repositories import PatientRepository

JOHN = {"name": "John Doe", "dateOfBirth": "1990-01-01", "medicalRecordNumber": "MRN001"}
JANE = {"name": "Jane Doe", "dateOfBirth": "1985-06-15", "medicalRecordNumber": "MRN002"}


async def create_patient(client, headers, body=JOHN):
    response = await client.post("/api/patients", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def create_voice_note(client, headers, patient_id, title="Consultation Note",
                            recorded_at="2024-01-01T10:00:00Z"):
    response = await client.post(
        "/api/voice-notes",
        json={
            "patientId": patient_id,
            "title": title,
            "duration": 300,
            "recordedAt": recorded_at,
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def create_summary(client, headers, voice_note_id):
    return await client.post(
        "/api/summaries",
        json={
            "voiceNoteId": voice_note_id,
            "content": "Patient reports mild headache.",
            "keyPoints": ["Headache", "Follow up in 2 weeks"],
        },
        headers=headers,
    )


class TestPatientEndpoints:

    @pytest.mark.asyncio
    async def test_create_patient(self, test_client, api_headers):
        response = await test_client.post("/api/patients", json=JOHN, headers=api_headers)

        assert response.status_code == 201
        data = response.json()["data"]
        assert uuid.UUID(data["id"])
        assert data["name"] == "John Doe"
        assert data["dateOfBirth"] == "1990-01-01"
        assert data["medicalRecordNumber"] == "MRN001"
        assert data["createdAt"] == data["updatedAt"]
        assert data["createdAt"].endswith("Z")

    @pytest.mark.asyncio
    async def test_get_is_idempotent(self, test_client, api_headers):
        created = await create_patient(test_client, api_headers)

        first = await test_client.get(f"/api/patients/{created['id']}", headers=api_headers)
        second = await test_client.get(f"/api/patients/{created['id']}", headers=api_headers)

        assert first.status_code == 200
        assert first.json() == second.json() == {"data": created}

    @pytest.mark.asyncio
    async def test_list_newest_first(self, test_client, api_headers):
        john = await create_patient(test_client, api_headers, JOHN)
        jane = await create_patient(test_client, api_headers, JANE)

        response = await test_client.get("/api/patients", headers=api_headers)

        assert response.status_code == 200
        assert [p["id"] for p in response.json()["data"]] == [jane["id"], john["id"]]

    @pytest.mark.asyncio
    async def test_list_empty(self, test_client, api_headers):
        response = await test_client.get("/api/patients", headers=api_headers)
        assert response.json() == {"data": []}

    @pytest.mark.asyncio
    async def test_duplicate_mrn_is_409(self, test_client, api_headers):
        await create_patient(test_client, api_headers)

        response = await test_client.post(
            "/api/patients", json={**JANE, "medicalRecordNumber": "MRN001"}, headers=api_headers
        )

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "conflict"
        assert body["message"] == "Medical record number already exists"

    @pytest.mark.asyncio
    async def test_invalid_body_is_400_with_field_details(self, test_client, api_headers):
        response = await test_client.post(
            "/api/patients",
            json={"name": "John Doe", "dateOfBirth": "01/01/1990"},
            headers=api_headers,
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"] == "Validation failed"
        assert {d["field"] for d in body["details"]} == {"dateOfBirth", "medicalRecordNumber"}
        assert body["request_id"]

    @pytest.mark.asyncio
    async def test_missing_body_is_400(self, test_client, api_headers):
        response = await test_client.post("/api/patients", headers=api_headers)
        assert response.status_code == 400
        assert response.json()["details"] == [
            {"field": "body", "message": "Request body must be a JSON object"}
        ]

    @pytest.mark.asyncio
    async def test_malformed_json_is_400(self, test_client, api_headers):
        response = await test_client.post(
            "/api/patients",
            content=b"{not json",
            headers={**api_headers, "content-type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_patch_updates_given_fields(self, test_client, api_headers):
        created = await create_patient(test_client, api_headers)

        response = await test_client.patch(
            f"/api/patients/{created['id']}", json={"name": "Johnny Doe"}, headers=api_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Johnny Doe"
        assert data["medicalRecordNumber"] == "MRN001"
        assert data["createdAt"] == created["createdAt"]
        assert data["updatedAt"] >= created["updatedAt"]

    @pytest.mark.asyncio
    async def test_patch_empty_body_is_400(self, test_client, api_headers):
        created = await create_patient(test_client, api_headers)

        response = await test_client.patch(
            f"/api/patients/{created['id']}", json={}, headers=api_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "No fields to update"
        fetched = await test_client.get(f"/api/patients/{created['id']}", headers=api_headers)
        assert fetched.json()["data"]["updatedAt"] == created["updatedAt"]

    @pytest.mark.asyncio
    async def test_patch_to_taken_mrn_is_409(self, test_client, api_headers):
        await create_patient(test_client, api_headers, JOHN)
        jane = await create_patient(test_client, api_headers, JANE)

        response = await test_client.patch(
            f"/api/patients/{jane['id']}", json={"medicalRecordNumber": "MRN001"},
            headers=api_headers,
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    @pytest.mark.parametrize("patient_id", [str(uuid.uuid4()), "not-a-uuid"])
    async def test_unknown_patient_is_404(self, test_client, api_headers, patient_id):
        for method in ("get", "delete"):
            response = await getattr(test_client, method)(
                f"/api/patients/{patient_id}", headers=api_headers
            )
            assert response.status_code == 404
            assert response.json()["error"] == "not_found"
            assert response.json()["message"] == "Patient not found"

        response = await test_client.patch(
            f"/api/patients/{patient_id}", json={"name": "X"}, headers=api_headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_then_get_is_404(self, test_client, api_headers):
        created = await create_patient(test_client, api_headers)

        response = await test_client.delete(f"/api/patients/{created['id']}", headers=api_headers)
        assert response.status_code == 204
        assert response.content == b""

        response = await test_client.get(f"/api/patients/{created['id']}", headers=api_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_storage_failure_is_generic_500(self, test_client, api_headers):
        failure = OperationalError("SELECT", {}, Exception("secret driver detail"))
        with patch.object(PatientRepository, "list_all", AsyncMock(side_effect=failure)):
            response = await test_client.get("/api/patients", headers=api_headers)

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "server_error"
        assert body["message"] == "Internal server error"
        assert "secret driver detail" not in response.text


class TestVoiceNoteEndpoints:

    @pytest.mark.asyncio
    async def test_create_and_get(self, test_client, api_headers):
        patient = await create_patient(test_client, api_headers)
        note = await create_voice_note(test_client, api_headers, patient["id"])

        assert note["patientId"] == patient["id"]
        assert note["duration"] == 300
        assert note["recordedAt"] == "2024-01-01T10:00:00Z"

        response = await test_client.get(f"/api/voice-notes/{note['id']}", headers=api_headers)
        assert response.json() == {"data": note}

    @pytest.mark.asyncio
    async def test_unknown_patient_is_404(self, test_client, api_headers):
        response = await test_client.post(
            "/api/voice-notes",
            json={
                "patientId": str(uuid.uuid4()),
                "title": "Consultation Note",
                "duration": 300,
                "recordedAt": "2024-01-01T10:00:00Z",
            },
            headers=api_headers,
        )

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "reference_not_found"
        assert body["message"] == "Patient not found"
        assert body["details"]["field"] == "patientId"

        listed = await test_client.get("/api/voice-notes", headers=api_headers)
        assert listed.json() == {"data": []}

    @pytest.mark.asyncio
    async def test_invalid_fields_are_400(self, test_client, api_headers):
        response = await test_client.post(
            "/api/voice-notes",
            json={"patientId": "nope", "title": "", "duration": 0, "recordedAt": "2024-01-01"},
            headers=api_headers,
        )

        assert response.status_code == 400
        fields = {d["field"] for d in response.json()["details"]}
        assert fields == {"patientId", "title", "duration", "recordedAt"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("duration", [2**31, 2**63, 10**30])
    async def test_out_of_range_duration_is_400(self, test_client, api_headers, duration):
        patient = await create_patient(test_client, api_headers)

        response = await test_client.post(
            "/api/voice-notes",
            json={
                "patientId": patient["id"],
                "title": "Consultation Note",
                "duration": duration,
                "recordedAt": "2024-01-01T10:00:00Z",
            },
            headers=api_headers,
        )

        assert response.status_code == 400
        assert [d["field"] for d in response.json()["details"]] == ["duration"]
        listed = await test_client.get("/api/voice-notes", headers=api_headers)
        assert listed.json() == {"data": []}

    @pytest.mark.asyncio
    async def test_list_filtered_by_patient_and_ordered(self, test_client, api_headers):
        john = await create_patient(test_client, api_headers, JOHN)
        jane = await create_patient(test_client, api_headers, JANE)
        early = await create_voice_note(test_client, api_headers, john["id"],
                                        recorded_at="2024-01-01T08:00:00Z")
        late = await create_voice_note(test_client, api_headers, john["id"],
                                       recorded_at="2024-01-02T08:00:00Z")
        janes = await create_voice_note(test_client, api_headers, jane["id"])

        response = await test_client.get(
            "/api/voice-notes", params={"patientId": john["id"]}, headers=api_headers
        )
        assert [n["id"] for n in response.json()["data"]] == [late["id"], early["id"]]

        response = await test_client.get("/api/voice-notes", headers=api_headers)
        assert {n["id"] for n in response.json()["data"]} == {early["id"], late["id"], janes["id"]}

    @pytest.mark.asyncio
    async def test_malformed_patient_filter_is_empty_list(self, test_client, api_headers):
        patient = await create_patient(test_client, api_headers)
        await create_voice_note(test_client, api_headers, patient["id"])

        response = await test_client.get(
            "/api/voice-notes", params={"patientId": "garbage"}, headers=api_headers
        )
        assert response.status_code == 200
        assert response.json() == {"data": []}

    @pytest.mark.asyncio
    async def test_delete_removes_summary(self, test_client, api_headers):
        patient = await create_patient(test_client, api_headers)
        note = await create_voice_note(test_client, api_headers, patient["id"])
        summary = (await create_summary(test_client, api_headers, note["id"])).json()["data"]

        response = await test_client.delete(f"/api/voice-notes/{note['id']}", headers=api_headers)
        assert response.status_code == 204

        response = await test_client.get(f"/api/summaries/{summary['id']}", headers=api_headers)
        assert response.status_code == 404
        response = await test_client.get(f"/api/patients/{patient['id']}", headers=api_headers)
        assert response.status_code == 200


class TestSummaryEndpoints:

    @pytest.mark.asyncio
    async def test_create_returns_joined_view(self, test_client, api_headers):
        patient = await create_patient(test_client, api_headers)
        note = await create_voice_note(test_client, api_headers, patient["id"], title="Follow-up")

        response = await create_summary(test_client, api_headers, note["id"])

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["voiceNoteId"] == note["id"]
        assert data["voiceNoteTitle"] == "Follow-up"
        assert data["patientId"] == patient["id"]
        assert data["keyPoints"] == ["Headache", "Follow up in 2 weeks"]

        fetched = await test_client.get(f"/api/summaries/{data['id']}", headers=api_headers)
        assert fetched.json() == {"data": data}

        listed = await test_client.get("/api/summaries", headers=api_headers)
        assert listed.json() == {"data": [data]}

    @pytest.mark.asyncio
    async def test_second_summary_is_409(self, test_client, api_headers):
        patient = await create_patient(test_client, api_headers)
        note = await create_voice_note(test_client, api_headers, patient["id"])
        await create_summary(test_client, api_headers, note["id"])

        response = await create_summary(test_client, api_headers, note["id"])

        assert response.status_code == 409
        assert response.json()["error"] == "already_exists"
        assert response.json()["message"] == "Summary already exists for this voice note"

        listed = await test_client.get("/api/summaries", headers=api_headers)
        assert len(listed.json()["data"]) == 1

    @pytest.mark.asyncio
    async def test_unknown_voice_note_is_404(self, test_client, api_headers):
        response = await create_summary(test_client, api_headers, str(uuid.uuid4()))

        assert response.status_code == 404
        assert response.json()["message"] == "Voice note not found"
        assert response.json()["details"]["field"] == "voiceNoteId"

    @pytest.mark.asyncio
    async def test_empty_key_points_is_400(self, test_client, api_headers):
        response = await test_client.post(
            "/api/summaries",
            json={"voiceNoteId": str(uuid.uuid4()), "content": "x", "keyPoints": []},
            headers=api_headers,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_delete_summary(self, test_client, api_headers):
        patient = await create_patient(test_client, api_headers)
        note = await create_voice_note(test_client, api_headers, patient["id"])
        summary = (await create_summary(test_client, api_headers, note["id"])).json()["data"]

        response = await test_client.delete(f"/api/summaries/{summary['id']}", headers=api_headers)
        assert response.status_code == 204

        response = await test_client.delete(f"/api/summaries/{summary['id']}", headers=api_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Summary not found"


class TestCascadeThroughApi:

    @pytest.mark.asyncio
    async def test_deleting_patient_removes_everything_recorded(self, test_client, api_headers):
        patient = await create_patient(test_client, api_headers)
        note = await create_voice_note(test_client, api_headers, patient["id"])
        summary = (await create_summary(test_client, api_headers, note["id"])).json()["data"]

        response = await test_client.delete(f"/api/patients/{patient['id']}", headers=api_headers)
        assert response.status_code == 204

        for path in (f"/api/voice-notes/{note['id']}", f"/api/summaries/{summary['id']}"):
            response = await test_client.get(path, headers=api_headers)
            assert response.status_code == 404

        response = await test_client.get("/api/summaries", headers=api_headers)
        assert response.json() == {"data": []}


class TestUnmatchedRoutes:

    @pytest.mark.asyncio
    async def test_unknown_api_path(self, test_client, api_headers):
        response = await test_client.get("/api/unknown", headers=api_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "Not found"

    @pytest.mark.asyncio
    async def test_unknown_public_path(self, test_client):
        response = await test_client.get("/nowhere")
        assert response.status_code == 404
        assert response.json()["error"] == "Not found"

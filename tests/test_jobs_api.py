# tests/test_jobs_api.py
"""
Job API tests
Tests: Start, status, history over HTTP
"""

import asyncio

import pytest
from fastapi import status

TARGET = "https://example.com"


class TestStartJob:

    @pytest.mark.asyncio
    async def test_start_returns_running_job(self, client, auth_headers):
        response = await client.post("/api/v1/jobs", headers=auth_headers, json={
            "targetUrl": TARGET,
            "testType": "security",
            "depth": "basic",
        })

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["jobId"].startswith("job_")
        assert data["status"] == "running"
        assert data["message"] == "Job started"

    @pytest.mark.asyncio
    async def test_empty_target_rejected(self, client, auth_headers):
        response = await client.post("/api/v1/jobs", headers=auth_headers, json={"target": ""})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["kind"] == "InvalidTarget"

        history = await client.get("/api/v1/jobs", headers=auth_headers)
        assert history.json()["total"] == 0

    @pytest.mark.asyncio
    async def test_unknown_profile_rejected(self, client, auth_headers):
        response = await client.post("/api/v1/jobs", headers=auth_headers, json={
            "target": TARGET,
            "profile": "exhaustive",
        })

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_start_requires_token(self, client):
        response = await client.post("/api/v1/jobs", json={"target": TARGET})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_dispatch_failure_reported_as_failed(self, monkeypatch, app, client, auth_headers):
        async def unavailable(ticket, runner):
            raise RuntimeError("queue unavailable")

        monkeypatch.setattr(app.state.orchestrator.dispatcher, "submit", unavailable)

        response = await client.post("/api/v1/jobs", headers=auth_headers, json={"target": TARGET})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "failed"
        job = await client.get(f"/api/v1/jobs/{data['jobId']}", headers=auth_headers)
        assert job.json()["status"] == "failed"


class TestJobStatus:

    @pytest.mark.asyncio
    async def test_running_job_has_no_result(self, app, client, auth_headers, fake_engine):
        fake_engine.release = asyncio.Event()
        started = await client.post("/api/v1/jobs", headers=auth_headers, json={"target": TARGET})
        job_id = started.json()["jobId"]

        response = await client.get(f"/api/v1/jobs/{job_id}", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["jobId"] == job_id
        assert data["status"] == "running"
        assert 0 <= data["progress"] < 100
        assert "result" not in data
        assert "findings" not in data

        fake_engine.release.set()
        await app.state.dispatcher.drain()

    @pytest.mark.asyncio
    async def test_completed_job_has_result(self, app, client, auth_headers):
        started = await client.post("/api/v1/jobs", headers=auth_headers, json={"target": TARGET})
        job_id = started.json()["jobId"]
        await app.state.dispatcher.drain()

        response = await client.get(f"/api/v1/jobs/{job_id}", headers=auth_headers)

        data = response.json()
        assert data["status"] == "completed"
        assert data["progress"] == 100
        assert data["result"]["score"] == "B"
        assert data["result"]["totalTests"] == 12
        assert data["result"]["summary"] == {"critical": 0, "high": 1, "medium": 0, "low": 0}
        assert data["findings"][0]["severity"] == "high"
        assert data["findings"][0]["type"] == "SQL Injection"
        assert "completedAt" in data
        assert "error" not in data

    @pytest.mark.asyncio
    async def test_foreign_job_indistinguishable_from_missing(
        self, app, client, auth_headers, make_tenant, headers_for
    ):
        started = await client.post("/api/v1/jobs", headers=auth_headers, json={"target": TARGET})
        job_id = started.json()["jobId"]
        await app.state.dispatcher.drain()
        other = headers_for(await make_tenant(email="other@example.com"))

        foreign = await client.get(f"/api/v1/jobs/{job_id}", headers=other)
        missing = await client.get("/api/v1/jobs/job_unknown", headers=other)

        assert foreign.status_code == status.HTTP_404_NOT_FOUND
        assert foreign.json() == missing.json()
        assert foreign.json()["error"]["kind"] == "NotFound"


class TestHistory:

    @pytest.mark.asyncio
    async def test_history_newest_first(self, app, client, auth_headers):
        ids = []
        for _ in range(3):
            started = await client.post("/api/v1/jobs", headers=auth_headers, json={"target": TARGET})
            ids.append(started.json()["jobId"])
            await app.state.dispatcher.drain()

        response = await client.get("/api/v1/jobs", params={"limit": 2}, headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 3
        assert data["limit"] == 2
        assert data["offset"] == 0
        assert [j["jobId"] for j in data["jobs"]] == [ids[2], ids[1]]
        assert data["jobs"][0]["vulnerabilities"] == 1
        assert data["jobs"][0]["score"] == "B"

    @pytest.mark.asyncio
    async def test_history_limit_is_capped(self, client, auth_headers):
        response = await client.get("/api/v1/jobs", params={"limit": 1000}, headers=auth_headers)

        assert response.json()["limit"] == 100

    @pytest.mark.asyncio
    async def test_history_rejects_zero_limit(self, client, auth_headers):
        response = await client.get("/api/v1/jobs", params={"limit": 0}, headers=auth_headers)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_running_job_scores_na(self, app, client, auth_headers, fake_engine):
        fake_engine.release = asyncio.Event()
        await client.post("/api/v1/jobs", headers=auth_headers, json={"target": TARGET})

        response = await client.get("/api/v1/jobs", headers=auth_headers)

        job = response.json()["jobs"][0]
        assert job["status"] == "running"
        assert job["score"] == "N/A"
        assert job.get("completedAt") is None

        fake_engine.release.set()
        await app.state.dispatcher.drain()

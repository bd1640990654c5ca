"""Tests for events API: batch processing, per-processor results, status lookup."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_process_single_event(async_client: AsyncClient, make_event):
    """POST /events/process with `event` returns one result per processor."""
    event = make_event("donation.completed", {"campaignId": "camp-1", "amount": 20, "userId": "u-1"})
    r = await async_client.post("/events/process", json={"event": event})
    assert r.status_code == 200
    data = r.json()
    assert data["success"] is True
    assert data["processed"] == 1
    assert [res["processor"] for res in data["results"]] == ["analytics", "notifications", "cache", "projections"]
    assert all(res["success"] for res in data["results"])


@pytest.mark.asyncio
async def test_process_batch_drops_malformed(async_client: AsyncClient, make_event):
    events = [
        make_event("user.logged_in", {"userId": "u-1"}),
        {"id": "broken", "payload": {}},
        make_event("user.logged_in", {"userId": "u-2"}),
    ]
    r = await async_client.post("/events/process", json={"events": events})
    assert r.status_code == 200
    assert r.json()["processed"] == 2
    assert len(r.json()["results"]) == 8


@pytest.mark.asyncio
async def test_processor_failure_reported_in_results(async_client: AsyncClient, store, make_event):
    """A failing processor is a result with an error, not an HTTP error."""
    store.fail_campaign_analytics = True
    event = make_event("donation.completed", {"campaignId": "camp-1", "amount": 20})
    r = await async_client.post("/events/process", json={"event": event})
    assert r.status_code == 200
    analytics = r.json()["results"][0]
    assert analytics["processor"] == "analytics"
    assert analytics["success"] is False
    assert analytics["error"]


@pytest.mark.asyncio
async def test_empty_batch_returns_400(async_client: AsyncClient):
    r = await async_client.post("/events/process", json={"events": []})
    assert r.status_code == 400
    assert "detail" in r.json()


@pytest.mark.asyncio
async def test_missing_event_returns_400(async_client: AsyncClient):
    r = await async_client.post("/events/process", json={})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_malformed_json_returns_422(async_client: AsyncClient):
    r = await async_client.post(
        "/events/process",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_event_status_lists_ledger_rows(async_client: AsyncClient, make_event):
    event = make_event("user.logged_in", {"userId": "u-1"})
    await async_client.post("/events/process", json={"event": event})

    r = await async_client.get(f"/events/{event['id']}/status")
    assert r.status_code == 200
    rows = r.json()
    assert sorted(row["processorName"] for row in rows) == ["analytics", "cache", "notifications", "projections"]
    assert {row["status"] for row in rows} == {"completed"}
    assert all(row["eventId"] == event["id"] for row in rows)


@pytest.mark.asyncio
async def test_event_status_unknown_event_is_empty(async_client: AsyncClient):
    r = await async_client.get("/events/never-seen/status")
    assert r.status_code == 200
    assert r.json() == []

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from pulse.catalog import CatalogError, EventCatalog, parse_events
from pulse.main import NO_EVENTS_MESSAGE, NO_PLANS_MESSAGE, app


def _catalog() -> EventCatalog:
    return EventCatalog(
        parse_events(
            [
                {
                    "id": "gallery",
                    "title": "Gallery Night",
                    "category": "ART",
                    "venueName": "Museum of Contemporary Art Denver",
                    "address": "1485 Delgany St",
                    "neighborhood": "LoDo",
                    "startTime": "2026-10-24T18:00:00Z",
                    "priceRange": "Free",
                    "ratingScore": 4.5,
                },
                {
                    "id": "dinner",
                    "title": "Chef's Table",
                    "category": "RESTAURANT",
                    "venueName": "Work & Class",
                    "address": "2500 Larimer St",
                    "neighborhood": "RiNo",
                    "startTime": "2026-10-24T19:30:00Z",
                    "priceRange": "$40-$60",
                    "ratingScore": 4.8,
                },
                {
                    "id": "nightcap",
                    "title": "Nightcap",
                    "category": "BARS",
                    "venueName": "Death & Co Denver",
                    "address": "1280 25th St",
                    "neighborhood": "RiNo",
                    "startTime": "2026-10-24T22:00:00Z",
                    "priceRange": "$18",
                    "ratingScore": None,
                },
                {
                    "id": "next-week",
                    "title": "Next Week Show",
                    "category": "LIVE_MUSIC",
                    "venueName": "Globe Hall",
                    "address": "4483 Logan St",
                    "startTime": "2026-11-02T20:00:00Z",
                    "priceRange": "$15",
                },
            ]
        )
    )


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(app.state, "catalog", _catalog())
    return TestClient(app)


def _generate_payload(**overrides) -> dict:
    payload = {
        "companionMode": "DATE",
        "dateStart": "2026-10-24T00:00:00Z",
        "dateEnd": "2026-10-24T23:59:59Z",
    }
    payload.update(overrides)
    return payload


def test_generate_endpoint_returns_plans(client):
    response = client.post("/api/plans/generate", json=_generate_payload())

    assert response.status_code == 200
    body = response.json()
    names = [plan["name"] for plan in body["plans"]]
    assert names == ["Perfect Date Night", "Budget-Friendly Option", "Adventure Mix"]

    best = body["plans"][0]
    assert [activity["id"] for activity in best["activities"]] == ["gallery", "dinner", "nightcap"]
    assert best["estimatedCost"] == "Under $100"
    assert best["neighborhoods"] == ["LoDo", "RiNo"]
    assert best["archetype"] == "DATE_NIGHT"
    assert best["activities"][0]["venueName"] == "Museum of Contemporary Art Denver"
    assert best["activities"][0]["startTime"].startswith("2026-10-24T18:00:00")


def test_generate_endpoint_accepts_legacy_field_names(client):
    response = client.post(
        "/api/plans/generate",
        json={
            "goingWith": "DATE",
            "dateStart": "2026-10-24",
            "dateEnd": "2026-10-25",
            "planType": "CUSTOM",
        },
    )

    assert response.status_code == 200
    assert response.json()["plans"][0]["name"] == "Your Custom Plan"


def test_generate_endpoint_empty_range(client):
    response = client.post(
        "/api/plans/generate",
        json=_generate_payload(dateStart="2027-01-01T00:00:00Z", dateEnd="2027-01-02T00:00:00Z"),
    )

    assert response.status_code == 200
    assert response.json() == {"plans": [], "message": NO_EVENTS_MESSAGE}


def test_generate_endpoint_single_event_has_no_plans(client):
    response = client.post(
        "/api/plans/generate",
        json=_generate_payload(dateStart="2026-11-01T00:00:00Z", dateEnd="2026-11-03T00:00:00Z"),
    )

    assert response.status_code == 200
    assert response.json() == {"plans": [], "message": NO_PLANS_MESSAGE}


@pytest.mark.parametrize(
    "overrides",
    [
        {"companionMode": "COWORKERS"},
        {"archetype": "BRUNCH_CLUB"},
        {"dateStart": "2026-10-25T00:00:00Z", "dateEnd": "2026-10-24T00:00:00Z"},
        {"dateStart": "next friday"},
    ],
)
def test_generate_endpoint_rejects_invalid_payload(client, overrides):
    response = client.post("/api/plans/generate", json=_generate_payload(**overrides))

    assert response.status_code == 422


def test_preview_endpoint(client):
    response = client.post(
        "/api/plans/preview",
        json={
            "name": "Our night out",
            "companionMode": "DATE",
            "planType": "DATE_NIGHT",
            "eventIds": ["nightcap", "unknown", "dinner"],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert [activity["id"] for activity in body["activities"]] == ["nightcap", "dinner"]
    assert body["missingIds"] == ["unknown"]
    assert body["estimatedCost"] == "Under $100"
    assert body["neighborhoods"] == ["RiNo"]
    assert body["archetype"] == "DATE_NIGHT"


def test_preview_endpoint_unknown_ids(client):
    response = client.post(
        "/api/plans/preview",
        json={"name": "Ghost plan", "companionMode": "SOLO", "activityIds": ["nope"]},
    )

    assert response.status_code == 404


def test_events_endpoint_lists_window(client):
    response = client.get(
        "/api/events",
        params={"start": "2026-10-24T19:00:00Z", "end": "2026-10-24T23:00:00Z"},
    )

    assert response.status_code == 200
    assert [event["id"] for event in response.json()["events"]] == ["dinner", "nightcap"]


def test_healthz(client):
    response = client.get("/healthz")

    assert response.json() == {"status": "ok", "events": 4}


def test_startup_loads_remote_feed(monkeypatch):
    monkeypatch.setattr(app.state, "catalog", EventCatalog())
    monkeypatch.setenv("PULSE_EVENTS_URL", "https://feed.example.com/events.json")
    remote = list(_catalog().by_ids(["gallery", "dinner"]).values())
    fetch = AsyncMock(return_value=remote)
    monkeypatch.setattr("pulse.main.fetch_remote_events", fetch)

    with TestClient(app) as client:
        assert client.get("/healthz").json()["events"] == 2

    fetch.assert_awaited_once_with("https://feed.example.com/events.json")


def test_startup_keeps_local_catalog_when_feed_fails(monkeypatch):
    local = _catalog()
    monkeypatch.setattr(app.state, "catalog", local)
    monkeypatch.setenv("PULSE_EVENTS_URL", "https://feed.example.com/events.json")
    monkeypatch.setattr(
        "pulse.main.fetch_remote_events",
        AsyncMock(side_effect=CatalogError("feed down")),
    )

    with TestClient(app) as client:
        assert client.get("/healthz").json()["events"] == 4

    assert app.state.catalog is local

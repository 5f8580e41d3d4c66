from __future__ import annotations

from fastapi.testclient import TestClient

from cookmate.analytics.aggregator import compute_analytics
from cookmate.analytics.store import clear_events, get_events, record_event
from cookmate.app import app
from cookmate.waitlist.queue import clear_waitlist

client = TestClient(app)


def _login_admin(c):
    c.post("/auth/login", json={"email": "admin@cookmate.app", "password": "admin123"})


def _recipe_id(name: str) -> str:
    items = client.get("/recipes", params={"search": name}).json()["data"]["items"]
    return next(r["id"] for r in items if r["name"] == name)


def test_compute_analytics_empty():
    assert compute_analytics([]) == {
        "total_events": 0,
        "events_by_type": {},
        "avg_response_time_ms": 0.0,
        "top_ingredients": [],
        "top_viewed_recipes": [],
        "waitlist_by_referral": {},
    }


def test_compute_analytics_aggregates_events():
    events = [
        {"type": "ingredient_search", "ingredients": ["tomato", "onion"], "response_time_ms": 10.0},
        {"type": "ingredient_search", "ingredients": ["tomato"], "response_time_ms": 20.0},
        {"type": "recipe_view", "recipe_id": "a", "recipe_name": "Vada Pav"},
        {"type": "recipe_view", "recipe_id": "a", "recipe_name": "Vada Pav"},
        {"type": "recipe_view", "recipe_id": "b", "recipe_name": "Mishti Doi"},
        {"type": "waitlist_join", "referral_source": "friend", "cooking_experience": "beginner"},
    ]
    result = compute_analytics(events)

    assert result["total_events"] == 6
    assert result["events_by_type"] == {"recipe_view": 3, "ingredient_search": 2, "waitlist_join": 1}
    assert result["avg_response_time_ms"] == 15.0
    assert result["top_ingredients"] == [{"name": "tomato", "count": 2}, {"name": "onion", "count": 1}]
    assert result["top_viewed_recipes"][0] == {"name": "Vada Pav", "count": 2}
    assert result["waitlist_by_referral"] == {"friend": 1}


def test_get_events_returns_a_copy():
    clear_events()
    record_event("recipe_view", {"recipe_name": "Vada Pav"})
    get_events().clear()
    assert len(get_events()) == 1
    clear_events()


def test_analytics_returns_empty_initially():
    clear_events()
    _login_admin(client)
    resp = client.get("/analytics")
    assert resp.status_code == 200
    body = resp.json()["data"]
    assert body["total_events"] == 0
    assert body["avg_response_time_ms"] == 0.0


def test_analytics_tracks_ingredient_searches():
    clear_events()
    client.post("/recipes/by-ingredients", json={"ingredients": ["Potato"]})
    client.post("/recipes/by-ingredients", json={"ingredients": ["potato", "onion"]})
    _login_admin(client)
    body = client.get("/analytics").json()["data"]
    assert body["events_by_type"]["ingredient_search"] == 2
    assert body["top_ingredients"][0] == {"name": "potato", "count": 2}
    assert body["avg_response_time_ms"] >= 0


def test_analytics_tracks_views_and_waitlist_joins():
    clear_waitlist()
    clear_events()
    recipe_id = _recipe_id("Vada Pav")
    clear_events()
    client.get(f"/recipes/{recipe_id}")
    client.post("/waitlist", json={"email": "fan@example.com", "referral_source": "instagram"})
    _login_admin(client)
    body = client.get("/analytics").json()["data"]
    assert body["top_viewed_recipes"] == [{"name": "Vada Pav", "count": 1}]
    assert body["waitlist_by_referral"] == {"instagram": 1}
    clear_waitlist()

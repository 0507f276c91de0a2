"""User directory: profiles, self-service updates, per-user listings."""

from datetime import datetime


def test_list_and_detail(client, make_user, make_event, upload):
    a_user, a = make_user(name="Alice")
    _, b = make_user(name="Bob")
    private = make_event(a, name="Private")
    public = make_event(a, name="Public", isPublicGallery=True)
    upload(a, private["id"])
    upload(a, public["id"])

    users = client.get("/api/users", headers=b).json()
    assert [u["name"] for u in users] == ["Alice", "Bob"]
    assert users[0]["counts"]["createdEvents"] == 2
    assert "email" not in users[0]

    detail = client.get(f"/api/users/{a_user['id']}", headers=b).json()
    assert [e["id"] for e in detail["createdEvents"]] == [public["id"]]
    assert [m["event"]["id"] for m in detail["recentUploads"]] == [public["id"]]

    assert client.get("/api/users/usr_missing", headers=b).status_code == 404


def test_update_self_only(client, make_user):
    a_user, a = make_user(name="Alice")
    b_user, b = make_user()

    r = client.patch(f"/api/users/{a_user['id']}", json={"name": "Mallory"}, headers=b)
    assert r.status_code == 403

    r = client.patch(f"/api/users/{a_user['id']}", json={}, headers=a)
    assert r.status_code == 400

    r = client.patch(f"/api/users/{a_user['id']}", json={"avatarUrl": "https://x/y.png"}, headers=a)
    assert r.status_code == 200
    assert r.json()["avatarUrl"] == "https://x/y.png"
    assert r.json()["name"] == "Alice"


def test_delete_self_cascades(client, make_user, make_event, upload):
    a_user, a = make_user()
    _, b = make_user()
    own = make_event(a, allowJoining=True)
    other = make_event(b, allowJoining=True)
    client.post(f"/api/events/{other['id']}/join", headers=a)
    upload(a, other["id"])

    assert client.delete(f"/api/users/{a_user['id']}", headers=b).status_code == 403

    r = client.delete(f"/api/users/{a_user['id']}", headers=a)
    assert r.status_code == 200
    assert client.get(f"/api/events/{own['id']}", headers=b).status_code == 404
    assert client.get(f"/api/images/event/{other['id']}", headers=b).json()["count"] == 0
    assert client.get(f"/api/events/{other['id']}", headers=b).json()["participantCount"] == 1
    assert client.get("/api/auth/me", headers=a).status_code == 401


def test_user_events_and_images(client, make_user, make_event, upload):
    a_user, a = make_user()
    _, b = make_user()
    private = make_event(a, name="Private")
    public = make_event(a, name="Public", isPublicGallery=True)
    upload(a, private["id"])

    events = client.get(f"/api/users/{a_user['id']}/events", headers=b).json()
    assert [e["id"] for e in events] == [public["id"]]
    assert len(client.get(f"/api/users/{a_user['id']}/events", headers=a).json()) == 2

    assert client.get(f"/api/users/{a_user['id']}/images", headers=b).json() == []
    assert len(client.get(f"/api/users/{a_user['id']}/images", headers=a).json()) == 1


def test_created_and_joined_lists(client, make_user, make_event):
    _, a = make_user()
    _, b = make_user()
    mine = make_event(a)
    theirs = make_event(b, allowJoining=True)
    client.post(f"/api/events/{theirs['id']}/join", headers=a)

    assert [e["id"] for e in client.get("/api/users/me/events/created", headers=a).json()] == [mine["id"]]
    assert [e["id"] for e in client.get("/api/users/me/events/joined", headers=a).json()] == [theirs["id"]]


def test_profile_stats_and_activities(client, make_user, make_event, upload):
    a_user, a = make_user()
    _, b = make_user()
    own = make_event(a, name="Own")
    theirs = make_event(b, allowJoining=True)
    client.post(f"/api/events/{theirs['id']}/join", headers=a)
    client.post(f"/api/events/{theirs['id']}/leave", headers=a)
    upload(a, own["id"])
    upload(a, own["id"], content=b"v", content_type="video/mp4", filename="v.mp4")

    profile = client.get(f"/api/users/{a_user['id']}/profile", headers=b).json()
    assert profile["email"] == a_user["email"]
    stats = {s["status"]: s["count"] for s in profile["participationStats"]}
    assert stats == {"JOINED": 1, "LEFT": 1}

    media = client.get(f"/api/users/{a_user['id']}/media-stats", headers=b).json()
    assert media["totalUploads"] == 2
    assert {m["mediaType"]: m["count"] for m in media["mediaByType"]} == {"image": 1, "video": 1}
    assert media["eventsWithMedia"] == [{"id": own["id"], "name": "Own", "count": 2}]
    assert media["latestUpload"] is not None

    feed = client.get(f"/api/users/{a_user['id']}/activities", headers=b).json()
    kinds = [item["type"] for item in feed]
    assert kinds.count("participation") == 2
    assert kinds.count("upload") == 2
    assert kinds.count("event_creation") == 1
    timestamps = [datetime.fromisoformat(item["timestamp"].replace("Z", "+00:00")) for item in feed]
    assert timestamps == sorted(timestamps, reverse=True)

"""Event registry: create, read rule, updates, participants, deletion."""

from scrapbook.config import settings


def test_create_event_defaults(client, make_user, make_event):
    user, headers = make_user(name="Alice")
    event = make_event(headers, description="Class of 2004", location="Gym")

    assert event["id"].startswith("evt_")
    assert event["visibility"] == "PRIVATE"
    assert event["isPublicGallery"] is False
    assert event["allowJoining"] is False
    assert event["galleryStyle"] == "SCRAPBOOK"
    assert event["features"] == []
    assert event["creator"]["id"] == user["id"]
    assert event["participantCount"] == 1
    assert event["mediaCount"] == 0

    r = client.get(f"/api/events/{event['id']}/participants", headers=headers)
    assert r.status_code == 200
    [creator] = r.json()
    assert creator["user"]["id"] == user["id"]
    assert creator["status"] == "JOINED"
    assert creator["role"] == "ADMIN"


def test_create_event_validation(client, make_user):
    _, headers = make_user()
    r = client.post("/api/events", json={"name": "   "}, headers=headers)
    assert r.status_code == 400

    r = client.post("/api/events", json={"name": "X", "maxAttendees": 0}, headers=headers)
    assert r.status_code == 400

    r = client.post("/api/events", json={
        "name": "X",
        "startDate": "2024-06-02T10:00:00Z",
        "endDate": "2024-06-01T10:00:00Z",
    }, headers=headers)
    assert r.status_code == 400

    r = client.post("/api/events", json={"name": "X"})
    assert r.status_code == 401


def test_duplicate_join_code_conflicts(client, make_user, make_event):
    _, headers = make_user()
    make_event(headers, joinCode="SECRET")
    r = client.post("/api/events", json={"name": "Other", "joinCode": "SECRET"}, headers=headers)
    assert r.status_code == 409


def test_private_event_read_rule(client, make_user, make_event):
    _, a = make_user()
    _, b = make_user()
    event = make_event(a)

    assert client.get(f"/api/events/{event['id']}", headers=a).status_code == 200
    r = client.get(f"/api/events/{event['id']}", headers=b)
    assert r.status_code == 403
    assert r.json()["message"] == "You do not have permission to view this event"
    assert client.get(f"/api/events/{event['id']}").status_code == 403
    assert client.get(f"/api/events/{event['id']}/participants", headers=b).status_code == 403


def test_public_gallery_readable_by_anyone(client, make_user, make_event):
    _, a = make_user()
    event = make_event(a, isPublicGallery=True)

    r = client.get(f"/api/events/{event['id']}")
    assert r.status_code == 200
    assert r.json()["membershipStatus"] is None
    assert [e["id"] for e in client.get("/api/events").json()] == [event["id"]]


def test_visibility_enum_alone_does_not_grant_read(client, make_user, make_event):
    _, a = make_user()
    _, b = make_user()
    event = make_event(a, visibility="PUBLIC")
    assert client.get(f"/api/events/{event['id']}", headers=b).status_code == 403


def test_list_events_filters_by_access(client, make_user, make_event):
    _, a = make_user()
    _, b = make_user()
    private = make_event(a, name="Private")
    public = make_event(a, name="Public", isPublicGallery=True)
    own = make_event(b, name="Mine")

    ids = {e["id"] for e in client.get("/api/events", headers=b).json()}
    assert ids == {public["id"], own["id"]}
    assert private["id"] not in ids


def test_join_code_only_shown_to_creator(client, make_user, make_event):
    _, a = make_user()
    _, b = make_user()
    event = make_event(a, joinCode="ABC123", isPublicGallery=True)
    assert event["joinCode"] == "ABC123"

    r = client.get(f"/api/events/{event['id']}", headers=b)
    assert r.json()["joinCode"] is None


def test_update_event_creator_only(client, make_user, make_event):
    _, a = make_user()
    _, b = make_user()
    event = make_event(a, description="old", location="Hall")

    r = client.patch(f"/api/events/{event['id']}", json={"name": "Hacked"}, headers=b)
    assert r.status_code == 403
    assert r.json()["message"] == "Only the event creator can update the event"

    r = client.patch(f"/api/events/{event['id']}", json={
        "description": None,
        "allowJoining": True,
        "features": ["music"],
    }, headers=a)
    assert r.status_code == 200
    body = r.json()
    assert body["name"] == "Reunion"
    assert body["description"] is None
    assert body["location"] == "Hall"
    assert body["allowJoining"] is True
    assert body["features"] == ["music"]

    r = client.put(f"/api/events/{event['id']}", json={"galleryStyle": "GRID"}, headers=a)
    assert r.status_code == 200
    assert r.json()["galleryStyle"] == "GRID"


def test_update_visibility(client, make_user, make_event):
    _, a = make_user()
    _, b = make_user()
    event = make_event(a)

    r = client.patch(f"/api/events/{event['id']}/visibility", json={"isPublicGallery": True}, headers=b)
    assert r.status_code == 403

    r = client.patch(f"/api/events/{event['id']}/visibility",
                     json={"visibility": "INVITE_ONLY", "isPublicGallery": True}, headers=a)
    assert r.status_code == 200
    assert r.json()["visibility"] == "INVITE_ONLY"
    assert client.get(f"/api/events/{event['id']}", headers=b).status_code == 200


def test_cover_image(client, cdn, make_user, make_event):
    _, a = make_user()
    _, b = make_user()
    event = make_event(a)
    files = {"coverImage": ("cover.png", b"\x89PNG", "image/png")}

    assert client.post(f"/api/events/{event['id']}/cover-image", files=files, headers=b).status_code == 403

    r = client.post(f"/api/events/{event['id']}/cover-image",
                    files={"coverImage": ("c.txt", b"text", "text/plain")}, headers=a)
    assert r.status_code == 400

    r = client.post(f"/api/events/{event['id']}/cover-image", files=files, headers=a)
    assert r.status_code == 200
    url = r.json()["coverImageUrl"]
    assert cdn.uploads[-1]["folder"] == "scrapbook_events/covers"
    assert client.get(f"/api/events/{event['id']}", headers=a).json()["coverImageUrl"] == url


def test_my_events(client, make_user, make_event):
    _, a = make_user()
    _, b = make_user()
    created = make_event(a, allowJoining=True)
    other = make_event(b, name="B's party")
    client.post(f"/api/events/{other['id']}/join", headers=a)

    body = client.get("/api/events/mine", headers=a).json()
    assert [e["id"] for e in body["created"]] == [created["id"]]
    assert body["joined"] == []

    client.patch(f"/api/events/{other['id']}", json={"allowJoining": True}, headers=b)
    client.post(f"/api/events/{other['id']}/join", headers=a)
    body = client.get("/api/events/mine", headers=a).json()
    assert [e["id"] for e in body["joined"]] == [other["id"]]


def test_update_participant_role(client, make_user, make_event):
    _, a = make_user()
    b_user, b = make_user()
    c_user, c = make_user()
    event = make_event(a, allowJoining=True)
    client.post(f"/api/events/{event['id']}/join", headers=b)
    url = f"/api/events/{event['id']}/participants"

    r = client.patch(f"{url}/{b_user['id']}", json={"role": "MODERATOR"}, headers=b)
    assert r.status_code == 403

    r = client.patch(f"{url}/{b_user['id']}", json={"role": "MODERATOR"}, headers=a)
    assert r.status_code == 200
    assert r.json()["role"] == "MODERATOR"

    r = client.patch(f"{url}/{c_user['id']}", json={"role": "MODERATOR"}, headers=a)
    assert r.status_code == 404

    creator_id = event["creator"]["id"]
    r = client.patch(f"{url}/{creator_id}", json={"role": "ATTENDEE"}, headers=a)
    assert r.status_code == 400

    r = client.patch(f"{url}/{b_user['id']}", json={"role": "OWNER"}, headers=a)
    assert r.status_code == 400


def test_delete_event_cascades(client, make_user, make_event, upload):
    _, a = make_user()
    _, b = make_user()
    event = make_event(a, allowJoining=True)
    client.post(f"/api/events/{event['id']}/join", headers=b)
    media_id = upload(b, event["id"]).json()["id"]

    assert client.delete(f"/api/events/{event['id']}", headers=b).status_code == 403

    r = client.delete(f"/api/events/{event['id']}", headers=a)
    assert r.status_code == 200
    assert client.get(f"/api/events/{event['id']}", headers=a).status_code == 404
    assert client.delete(f"/api/images/{media_id}", headers=b).status_code == 404
    assert client.get("/api/auth/me", headers=b).json()["counts"]["joinedEvents"] == 0


def test_unknown_event_is_404(client, make_user):
    _, a = make_user()
    r = client.get("/api/events/evt_missing", headers=a)
    assert r.status_code == 404
    assert r.json()["message"] == "Event not found"


def test_cover_image_respects_upload_ceiling(client, cdn, monkeypatch, make_user, make_event):
    _, a = make_user()
    event = make_event(a)
    monkeypatch.setattr(settings, "max_upload_bytes", 10)

    r = client.post(f"/api/events/{event['id']}/cover-image",
                    files={"coverImage": ("big.jpg", b"x" * 50, "image/jpeg")}, headers=a)
    assert r.status_code == 413
    assert cdn.uploads == []
    assert client.get(f"/api/events/{event['id']}", headers=a).json()["coverImageUrl"] is None

import hashlib


async def _register(client, username: str) -> dict:
    resp = await client.post("/users/", json={"username": username, "email": f"{username}@Example.com"})
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _chop(client, user_id: int, text: str) -> dict:
    resp = await client.post("/chops/", json={"user_id": user_id, "chops_name": text})
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# ── Users & profiles ───────────────────────────────────────────────────────

async def test_register_user(client):
    resp = await client.post("/users/", json={"username": "  tolu ", "email": " Tolu@Example.com"})
    assert resp.status_code == 201, resp.text
    user = resp.json()
    assert user["username"] == "tolu"
    assert user["email"] == "tolu@example.com"
    assert user["profile_state"] is False
    assert user["image_uri"] is None


async def test_register_rejects_duplicates(client):
    await _register(client, "tolu")

    resp = await client.post("/users/", json={"username": "tolu", "email": "other@example.com"})
    assert resp.status_code == 409
    assert "Username" in resp.json()["detail"]

    resp = await client.post("/users/", json={"username": "tolu2", "email": "TOLU@example.com"})
    assert resp.status_code == 409
    assert "Email" in resp.json()["detail"]


async def test_register_validates_input(client):
    resp = await client.post("/users/", json={"username": "ab", "email": "ab@example.com"})
    assert resp.status_code == 422
    resp = await client.post("/users/", json={"username": "abc", "email": "not-an-email"})
    assert resp.status_code == 422


async def test_complete_profile_sets_flag_and_gravatar(client):
    user = await _register(client, "kemi")

    resp = await client.put(
        f"/users/{user['id']}/profile",
        json={"firstname": " Kemi ", "location": "Lagos", "best_food": "amala"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["profile_state"] is True
    assert body["firstname"] == "Kemi"
    digest = hashlib.md5(b"kemi@example.com").hexdigest()
    assert body["image_uri"] == f"http://www.gravatar.com/avatar/{digest}?d=mm&s=120"

    # Editing again keeps the profile completed and the avatar as-is
    resp = await client.put(f"/users/{user['id']}/profile", json={"location": "Abuja"})
    assert resp.json()["profile_state"] is True
    assert resp.json()["location"] == "Abuja"
    assert resp.json()["image_uri"] == body["image_uri"]


async def test_custom_avatar_survives_profile_completion(client):
    user = await _register(client, "ngozi")
    resp = await client.put(f"/users/{user['id']}/avatar", json={"image_uri": "https://img.example.com/n.png"})
    assert resp.status_code == 200

    resp = await client.put(f"/users/{user['id']}/profile", json={"gender": "female"})
    assert resp.json()["image_uri"] == "https://img.example.com/n.png"


async def test_unknown_user_is_404(client):
    assert (await client.get("/users/999")).status_code == 404
    assert (await client.put("/users/999/profile", json={})).status_code == 404


async def test_follow_and_unfollow(client):
    a = await _register(client, "aaa")
    b = await _register(client, "bbb")

    for _ in range(2):
        resp = await client.post("/users/follow", json={"follower_id": a["id"], "followee_id": b["id"]})
        assert resp.status_code == 204

    assert (await client.get(f"/users/{a['id']}/following")).json()["following"] == [b["id"]]
    assert (await client.get(f"/users/{b['id']}/followers")).json()["followers"] == [a["id"]]

    resp = await client.post("/users/unfollow", json={"follower_id": a["id"], "followee_id": b["id"]})
    assert resp.status_code == 204
    assert (await client.get(f"/users/{a['id']}/following")).json()["following"] == []


async def test_follow_rejects_self_and_unknown(client):
    a = await _register(client, "aaa")

    resp = await client.post("/users/follow", json={"follower_id": a["id"], "followee_id": a["id"]})
    assert resp.status_code == 400

    resp = await client.post("/users/follow", json={"follower_id": a["id"], "followee_id": 404})
    assert resp.status_code == 404


# ── Home feed & leaderboard ────────────────────────────────────────────────

async def test_home_returns_feed_and_leaderboard(client):
    v = await _register(client, "viewer")
    a = await _register(client, "author")
    s = await _register(client, "stranger")
    await client.post("/users/follow", json={"follower_id": v["id"], "followee_id": a["id"]})

    await _chop(client, a["id"], "first from author")
    await _chop(client, a["id"], "second from author")
    await _chop(client, s["id"], "hidden")
    mine = await _chop(client, v["id"], "mine")

    resp = await client.get("/", params={"user_id": v["id"]})
    assert resp.status_code == 200
    body = resp.json()

    assert body["user"]["id"] == v["id"]
    texts = [c["chops_name"] for c in body["chops"]]
    assert set(texts) == {"first from author", "second from author", "mine"}
    assert body["chops"][0]["id"] == mine["id"]
    assert body["chops"][0]["username"] == "viewer"

    board = [(e["user"]["username"], e["chop_count"]) for e in body["top_users"]]
    assert board == [("author", 2), ("viewer", 1), ("stranger", 1)]


async def test_home_unknown_viewer(client):
    resp = await client.get("/", params={"user_id": 31337})
    assert resp.status_code == 404


async def test_leaderboard_endpoint(client):
    a = await _register(client, "aaa")
    b = await _register(client, "bbb")
    await _chop(client, b["id"], "one")
    await _chop(client, b["id"], "two")
    await _chop(client, a["id"], "three")

    resp = await client.get("/users/top", params={"limit": 1})
    assert resp.status_code == 200
    assert [(e["user"]["username"], e["chop_count"]) for e in resp.json()] == [("bbb", 2)]

    resp = await client.get("/users/top", params={"limit": 0})
    assert resp.status_code == 400


# ── Chops, favourites, comments ────────────────────────────────────────────

async def test_create_and_get_chop(client):
    a = await _register(client, "aaa")
    chop = await _chop(client, a["id"], "  pepper soup  ")
    assert chop["chops_name"] == "pepper soup"
    assert chop["likes"] == 0
    assert chop["username"] == "aaa"

    resp = await client.get(f"/chops/{chop['id']}")
    assert resp.status_code == 200
    assert resp.json()["chops_name"] == "pepper soup"

    assert (await client.get("/chops/999")).status_code == 404
    resp = await client.post("/chops/", json={"user_id": 999, "chops_name": "orphan"})
    assert resp.status_code == 404


async def test_favourite_endpoint_is_idempotent(client):
    a = await _register(client, "aaa")
    b = await _register(client, "bbb")
    chop = await _chop(client, a["id"], "suya")

    url = f"/chops/favourite/{chop['id']}"
    assert (await client.post(url, json={"user_id": b["id"]})).json() == {"count": 1}
    assert (await client.post(url, json={"user_id": b["id"]})).json() == {"count": 1}
    assert (await client.post(url, json={"user_id": a["id"]})).json() == {"count": 2}

    assert (await client.get(f"/chops/{chop['id']}")).json()["likes"] == 2


async def test_favourite_unknown_chop(client):
    a = await _register(client, "aaa")
    resp = await client.post("/chops/favourite/999", json={"user_id": a["id"]})
    assert resp.status_code == 404
    assert "Chop" in resp.json()["detail"]


async def test_comments_listed_oldest_first(client):
    a = await _register(client, "aaa")
    b = await _register(client, "bbb")
    chop = await _chop(client, a["id"], "moi moi")

    for user, text in ((b, "first!"), (a, "thanks"), (b, "recipe?")):
        resp = await client.post(f"/chops/{chop['id']}/comments", json={"user_id": user["id"], "body": text})
        assert resp.status_code == 201

    resp = await client.get(f"/chops/{chop['id']}/comments")
    assert resp.status_code == 200
    assert [(c["username"], c["body"]) for c in resp.json()] == [
        ("bbb", "first!"),
        ("aaa", "thanks"),
        ("bbb", "recipe?"),
    ]

    resp = await client.post("/chops/999/comments", json={"user_id": a["id"], "body": "lost"})
    assert resp.status_code == 404

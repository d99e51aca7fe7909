def test_react_increments_ghost_count(client):
    r = client.post("/api/dead-games/react", json={"deadGameId": "anthem", "incrementBy": 250})
    assert r.status_code == 200
    assert r.json()["data"]["newReactionCount"] == 250

    r = client.get("/api/dead-games/anthem/ghost-count")
    assert r.json() == {"success": True, "data": {"deadGameId": "anthem", "ghostCount": 250}}


def test_react_rejects_non_positive_increment(client):
    r = client.post("/api/dead-games/react", json={"deadGameId": "anthem", "incrementBy": -1})
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_unknown_dead_game_has_zero_count(client):
    r = client.get("/api/dead-games/never-reacted/ghost-count")
    assert r.json()["data"]["ghostCount"] == 0


def test_react_is_rate_limited(client, limiter):
    for _ in range(100):
        assert client.post("/api/dead-games/react", json={"deadGameId": "x"}).status_code == 200
    r = client.post("/api/dead-games/react", json={"deadGameId": "x"})
    assert r.status_code == 429
    assert r.headers["X-RateLimit-Remaining"] == "0"
    assert limiter.tracked() == 1

def test_total_dislikes_starts_at_zero(client):
    r = client.get("/api/stats/total-dislikes")
    assert r.status_code == 200
    assert r.json() == {"success": True, "data": {"totalDislikes": 0}}


def test_total_dislikes_sums_every_game(client):
    client.post("/api/games/dislike", json={"igdbId": 1, "incrementBy": 4})
    client.post("/api/games/dislike", json={"igdbId": 2, "incrementBy": 6})
    client.post("/api/games/emoji-reaction", json={"gameId": 1, "emojiName": "bug"})
    client.post("/api/dead-games/react", json={"deadGameId": "anthem", "incrementBy": 3})

    r = client.get("/api/stats/total-dislikes")
    assert r.json()["data"]["totalDislikes"] == 10

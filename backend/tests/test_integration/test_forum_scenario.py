"""
End-to-end moderation scenario through the HTTP API.

1. alice downvotes a score-0 topic: rejected, score stays 0
2. bob upvotes it: score 1; bob upvotes again: score 0
3. alice reports bob for harassment: pending report
4. alice reports bob again right away: rejected with ~20 minutes remaining
"""

from fastapi.testclient import TestClient


def test_vote_and_report_scenario(
    client: TestClient, make_user, make_topic, test_user, other_user, headers_of
):
    carol = make_user("carol")
    t1 = make_topic(carol, title="t1")
    alice = headers_of(test_user)
    bob = headers_of(other_user)

    response = client.post(
        f"/api/topics/{t1.id}/vote", json={"vote_type": "down"}, headers=alice
    )
    assert response.status_code == 400
    assert client.get(f"/api/topics/{t1.id}").json()["score"] == 0

    response = client.post(
        f"/api/topics/{t1.id}/vote", json={"vote_type": "up"}, headers=bob
    )
    assert response.status_code == 200
    assert response.json()["topic"]["score"] == 1

    response = client.post(
        f"/api/topics/{t1.id}/vote", json={"vote_type": "up"}, headers=bob
    )
    assert response.status_code == 200
    assert response.json()["action"] == "remove"
    assert response.json()["topic"]["score"] == 0

    report = {"reported_username": "bob", "reason": "harassment"}
    response = client.post("/api/reports", json=report, headers=alice)
    assert response.status_code == 201
    assert response.json()["status"] == "pending"

    response = client.post("/api/reports", json=report, headers=alice)
    assert response.status_code == 429
    remaining = response.json()["remaining_ms"]
    assert 1_190_000 < remaining <= 1_200_000
    assert response.headers["Retry-After"] == "1200"

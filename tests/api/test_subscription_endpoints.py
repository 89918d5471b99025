"""
Integration tests for subscription endpoints
"""


class TestSubscriptionEndpoints:
    """Trial start and cancellation over HTTP"""

    def test_free_user_subscription(self, client, make_user, login):
        make_user("owner")
        data = client.get("/api/subscription", headers=login("owner")).json()
        assert data["plan"] == "Free"
        assert data["subscription_status"] == "inactive"
        assert data["has_valid_subscription"] is False

    def test_start_trial(self, client, make_user, login):
        make_user("owner")
        headers = login("owner")

        response = client.post("/api/subscription/trial", json={"plan": "Pro"}, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["plan"] == "Pro"
        assert data["subscription_status"] == "trial"
        assert data["has_valid_subscription"] is True

        trial = client.get("/api/user/trial", headers=headers).json()
        assert trial["is_trial"] is True
        assert trial["days_left"] == 14

    def test_trial_only_once(self, client, make_user, login):
        make_user("owner")
        headers = login("owner")
        client.post("/api/subscription/trial", json={}, headers=headers)
        client.post("/api/subscription/cancel", headers=headers)

        response = client.post("/api/subscription/trial", json={}, headers=headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Trial already used"

    def test_free_plan_has_no_trial(self, client, make_user, login):
        make_user("owner")
        response = client.post("/api/subscription/trial", json={"plan": "Free"}, headers=login("owner"))
        assert response.status_code == 400

    def test_cancel(self, client, make_user, login):
        make_user("owner", plan="Pro", subscription_status="active")
        headers = login("owner")
        response = client.post("/api/subscription/cancel", headers=headers)
        assert response.status_code == 200
        assert response.json()["subscription_status"] == "canceled"

        response = client.post("/api/subscription/cancel", headers=headers)
        assert response.status_code == 400

    def test_requires_auth(self, client):
        assert client.get("/api/subscription").status_code == 401
        assert client.post("/api/subscription/trial", json={}).status_code == 401

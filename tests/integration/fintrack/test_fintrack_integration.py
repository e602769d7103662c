"""End-to-end tests against a real MongoDB."""

import pytest
from bson import Decimal128

pytestmark = pytest.mark.integration


def _register_and_login(client, email="a@x.com", username="a", password="secret"):
    client.post("/signup", json={"email": email, "username": username, "password": password})
    data = client.post("/login", json={"email": email, "password": password}).json()["data"]
    return {"Authorization": f"Bearer {data['token']}"}, data["user"]["id"]


class TestAccounts:
    def test_signup_login_scenario(self, client):
        signup = client.post("/signup", json={"email": "a@x.com", "username": "a", "password": "secret"})
        assert signup.status_code == 200
        assert "password" not in signup.json()["data"]

        wrong = client.post("/login", json={"email": "a@x.com", "password": "wrong"})
        assert wrong.status_code == 401

        ok = client.post("/login", json={"email": "a@x.com", "password": "secret"}).json()["data"]
        assert ok["user"]["id"] == signup.json()["data"]["id"]

    def test_duplicate_email_hits_unique_index(self, client):
        client.post("/signup", json={"email": "a@x.com", "username": "a", "password": "secret"})

        second = client.post("/signup", json={"email": "A@X.com", "username": "b", "password": "other"})

        assert second.status_code == 409

    def test_password_hash_is_stored(self, client, mongo):
        client.post("/signup", json={"email": "a@x.com", "username": "a", "password": "secret"})

        doc = mongo["fintrack_test"]["users"].find_one({"email": "a@x.com"})

        assert doc["password_hash"] != "secret"
        assert "password" not in doc


class TestCategories:
    def test_round_trip_and_uniqueness(self, client):
        headers, _ = _register_and_login(client)
        other, _ = _register_and_login(client, email="b@x.com", username="b")

        created = client.post("/api/categories", json={"name": "Transport"}, headers=headers).json()["data"]
        assert created["name"] == "transport"

        assert client.post("/api/categories", json={"name": " TRANSPORT"}, headers=headers).status_code == 409
        assert client.post("/api/categories", json={"name": "Transport"}, headers=other).status_code == 200

        listed = client.get("/api/categories", headers=headers).json()["data"]
        assert [c["id"] for c in listed] == [created["id"]]

    def test_delete_twice(self, client):
        headers, _ = _register_and_login(client)
        created = client.post("/api/categories", json={"name": "Food"}, headers=headers).json()["data"]

        assert client.delete(f"/api/categories/{created['id']}", headers=headers).status_code == 200
        assert client.delete(f"/api/categories/{created['id']}", headers=headers).status_code == 404


class TestExpenses:
    def test_ordering_and_summary(self, client):
        headers, _ = _register_and_login(client)
        for amount, day in [(10, "2024-05-02"), (5, "2024-04-30"), (20, "2024-05-31")]:
            client.post("/api/expenses", json={"amount": amount, "category": "food", "date": day}, headers=headers)

        listed = client.get("/api/expenses", headers=headers).json()["data"]
        assert [e["amount"] for e in listed] == [20, 10, 5]

        summary = client.get("/api/expenses/summary?year=2024&month=5", headers=headers).json()["data"]
        assert summary["total"] == 35
        assert summary["monthTotal"] == 30
        assert summary["byDay"] == [
            {"day": "2024-05-02", "total": 10, "count": 1},
            {"day": "2024-05-31", "total": 20, "count": 1},
        ]

    def test_clearing_last_category_reference_is_rejected(self, client, mongo):
        headers, _ = _register_and_login(client)
        expense = client.post(
            "/api/expenses", json={"amount": 3, "category": "food"}, headers=headers
        ).json()["data"]

        response = client.put(f"/api/expenses/{expense['id']}", json={"category": None}, headers=headers)

        assert response.status_code == 400
        assert mongo["fintrack_test"]["expenses"].find_one({})["category"] == "food"


class TestGoals:
    def test_progress_is_bounded_in_the_store(self, client, mongo):
        headers, _ = _register_and_login(client)
        goal = client.post(
            "/api/goals", json={"title": "Bike", "targetAmount": 100, "currentAmount": 90}, headers=headers
        ).json()["data"]

        overflow = client.post(f"/api/goals/{goal['id']}/progress", json={"amount": 20}, headers=headers)
        assert overflow.status_code == 400

        doc = mongo["fintrack_test"]["goals"].find_one({"title": "Bike"})
        assert doc["current_amount"] == Decimal128("90")

        done = client.post(f"/api/goals/{goal['id']}/progress", json={"amount": 10}, headers=headers).json()
        assert done["data"]["completed"] is True
        assert client.post(
            f"/api/goals/{goal['id']}/progress", json={"amount": 1}, headers=headers
        ).status_code == 400

    def test_decimal_progress_reaches_target_in_the_store(self, client, mongo):
        headers, _ = _register_and_login(client)
        goal = client.post(
            "/api/goals", json={"title": "Jar", "targetAmount": 0.3}, headers=headers
        ).json()["data"]

        client.post(f"/api/goals/{goal['id']}/progress", json={"amount": 0.1}, headers=headers)
        done = client.post(f"/api/goals/{goal['id']}/progress", json={"amount": 0.2}, headers=headers)

        assert done.status_code == 200
        assert done.json()["data"]["completed"] is True
        doc = mongo["fintrack_test"]["goals"].find_one({"title": "Jar"})
        assert doc["current_amount"] == Decimal128("0.3")

    def test_pinned_goals_first(self, client):
        headers, _ = _register_and_login(client)
        first = client.post("/api/goals", json={"title": "First", "targetAmount": 1}, headers=headers).json()["data"]
        client.post("/api/goals", json={"title": "Second", "targetAmount": 1}, headers=headers)

        client.post(f"/api/goals/{first['id']}/pin", headers=headers)

        titles = [g["title"] for g in client.get("/api/goals", headers=headers).json()["data"]]
        assert titles == ["First", "Second"]

    def test_goals_are_isolated(self, client):
        alice, _ = _register_and_login(client)
        bob, _ = _register_and_login(client, email="b@x.com", username="b")
        goal = client.post("/api/goals", json={"title": "Bike", "targetAmount": 5}, headers=alice).json()["data"]

        assert client.get("/api/goals", headers=bob).json()["data"] == []
        assert client.delete(f"/api/goals/{goal['id']}", headers=bob).status_code == 404

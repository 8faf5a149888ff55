"""
Integration tests for API endpoints.
"""

from uuid import uuid4

from fastapi.testclient import TestClient


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class TestHealthAPI:
    def test_health_reports_database(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] is True

    def test_request_id_is_echoed(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"


class TestGenerateAPI:
    def test_generate_requires_auth(self, client: TestClient):
        response = client.post("/v1/paths/generate", json={"query": "chess"})
        assert response.status_code == 401

    def test_generate_template_path(self, auth_client: TestClient, test_user_id):
        response = auth_client.post("/v1/paths/generate", json={"query": "chess"})
        assert response.status_code == 201

        data = response.json()
        assert data["title"] == "Complete Beginner's Guide to Chess"
        assert data["created_by"] == str(test_user_id)
        assert data["total_nodes"] > 0

        detail = auth_client.get(f"/v1/paths/{data['id']}").json()
        assert len(detail["nodes"]) == data["total_nodes"]
        assert [n["order_index"] for n in detail["nodes"]] == list(
            range(1, data["total_nodes"] + 1)
        )

    def test_generate_unknown_topic(self, auth_client: TestClient):
        response = auth_client.post(
            "/v1/paths/generate",
            json={"query": "underwater basket weaving", "duration": 12},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["total_nodes"] == 4
        assert data["estimated_duration"] == 12

    def test_generate_rejects_empty_query(self, auth_client: TestClient):
        response = auth_client.post("/v1/paths/generate", json={"query": ""})
        assert response.status_code == 422


class TestPathsAPI:
    def test_create_and_list(self, auth_client: TestClient, sample_path_data):
        created = auth_client.post("/v1/paths", json=sample_path_data)
        assert created.status_code == 201
        assert created.json()["total_nodes"] == 2

        listing = auth_client.get("/v1/paths")
        assert listing.status_code == 200
        assert [p["title"] for p in listing.json()["items"]] == ["Knife Skills Basics"]

    def test_list_own_private_paths(self, auth_client: TestClient, sample_path_data):
        sample_path_data["is_public"] = False
        auth_client.post("/v1/paths", json=sample_path_data)

        assert auth_client.get("/v1/paths").json()["items"] == []
        mine = auth_client.get("/v1/paths?mine=true").json()["items"]
        assert [p["title"] for p in mine] == ["Knife Skills Basics"]

    def test_get_missing_path(self, client: TestClient):
        response = client.get(f"/v1/paths/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_add_nodes(self, auth_client: TestClient, sample_path_data):
        path_id = auth_client.post("/v1/paths", json=sample_path_data).json()["id"]

        response = auth_client.post(
            f"/v1/paths/{path_id}/nodes",
            json={
                "nodes": [
                    {"title": "Julienne", "content_type": "exercise", "order_index": 1}
                ]
            },
        )
        assert response.status_code == 201
        assert response.json()[0]["order_index"] == 3

        detail = auth_client.get(f"/v1/paths/{path_id}").json()
        assert detail["total_nodes"] == 3
        assert detail["nodes"][-1]["title"] == "Julienne"

    def test_similar_and_analytics(self, auth_client: TestClient, sample_path_data):
        path_id = auth_client.post("/v1/paths", json=sample_path_data).json()["id"]
        sample_path_data["title"] = "Knife Sharpening"
        other_id = auth_client.post("/v1/paths", json=sample_path_data).json()["id"]

        similar = auth_client.get(f"/v1/paths/{path_id}/similar").json()["items"]
        assert [p["id"] for p in similar] == [other_id]

        analytics = auth_client.get(f"/v1/paths/{path_id}/analytics")
        assert analytics.status_code == 200
        assert analytics.json()["total_users"] == 0

    def test_private_path_is_owner_only(
        self, client: TestClient, test_jwt_token, other_jwt_token, sample_path_data
    ):
        sample_path_data["is_public"] = False
        path_id = client.post(
            "/v1/paths", json=sample_path_data, headers=auth(test_jwt_token)
        ).json()["id"]

        owner = client.get(f"/v1/paths/{path_id}", headers=auth(test_jwt_token))
        assert owner.status_code == 200
        assert len(owner.json()["nodes"]) == 2

        for suffix in ("", "/similar", "/analytics"):
            anonymous = client.get(f"/v1/paths/{path_id}{suffix}")
            assert anonymous.status_code == 404
            assert anonymous.json()["error"]["code"] == "NOT_FOUND"
            stranger = client.get(
                f"/v1/paths/{path_id}{suffix}", headers=auth(other_jwt_token)
            )
            assert stranger.status_code == 404


class TestDeleteAPI:
    def test_non_owner_delete_is_forbidden(
        self, client: TestClient, test_jwt_token, other_jwt_token, sample_path_data
    ):
        path_id = client.post(
            "/v1/paths", json=sample_path_data, headers=auth(test_jwt_token)
        ).json()["id"]

        response = client.delete(f"/v1/paths/{path_id}", headers=auth(other_jwt_token))

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "NOT_AUTHORIZED"
        assert client.get(f"/v1/paths/{path_id}").status_code == 200

    def test_owner_delete_is_accepted(self, auth_client: TestClient, sample_path_data):
        path_id = auth_client.post("/v1/paths", json=sample_path_data).json()["id"]
        auth_client.get(f"/v1/paths/{path_id}")

        response = auth_client.delete(f"/v1/paths/{path_id}")

        assert response.status_code == 202
        assert response.json() == {"id": path_id, "status": "accepted"}
        assert auth_client.get(f"/v1/paths/{path_id}").status_code == 404
        assert auth_client.get("/v1/paths").json()["items"] == []

    def test_delete_missing_path(self, auth_client: TestClient):
        response = auth_client.delete(f"/v1/paths/{uuid4()}")
        assert response.status_code == 404


class TestSearchAPI:
    def test_search_ranks_public_paths(self, auth_client: TestClient, sample_path_data):
        sample_path_data.update(
            title="Machine Learning Foundations", topic="ai-ml", estimated_duration=10
        )
        auth_client.post("/v1/paths", json=sample_path_data)

        response = auth_client.get("/v1/search", params={"q": "machine learning"})

        assert response.status_code == 200
        data = response.json()
        assert [p["title"] for p in data["paths"]] == ["Machine Learning Foundations"]
        assert data["paths"][0]["relevance_score"] > 0
        assert data["suggested_topics"][0] == "ai-ml"
        assert 0 <= data["confidence"] <= 1

    def test_search_rejects_inverted_duration(self, client: TestClient):
        response = client.get(
            "/v1/search", params={"q": "x", "min_duration": 10, "max_duration": 2}
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_FAILED"

    def test_search_requires_query(self, client: TestClient):
        assert client.get("/v1/search").status_code == 422


class TestProgressAPI:
    def test_update_and_read_progress(self, auth_client: TestClient, sample_path_data):
        path_id = auth_client.post("/v1/paths", json=sample_path_data).json()["id"]
        node_id = auth_client.get(f"/v1/paths/{path_id}").json()["nodes"][0]["id"]

        response = auth_client.post(
            "/v1/progress",
            json={
                "path_id": path_id,
                "node_id": node_id,
                "status": "completed",
                "progress_percentage": 100,
                "time_spent": 20,
            },
        )
        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert response.json()["completed_at"] is not None

        items = auth_client.get(f"/v1/progress/{path_id}").json()["items"]
        assert [i["node_id"] for i in items] == [node_id]

        analytics = auth_client.get(f"/v1/paths/{path_id}/analytics").json()
        assert analytics["total_users"] == 1
        assert analytics["completion_rate"] == 100.0

    def test_progress_on_private_path_of_another_user(
        self, client: TestClient, test_jwt_token, other_jwt_token, sample_path_data
    ):
        sample_path_data["is_public"] = False
        path_id = client.post(
            "/v1/paths", json=sample_path_data, headers=auth(test_jwt_token)
        ).json()["id"]
        node_id = client.get(
            f"/v1/paths/{path_id}", headers=auth(test_jwt_token)
        ).json()["nodes"][0]["id"]

        response = client.post(
            "/v1/progress",
            json={"path_id": path_id, "node_id": node_id, "status": "in_progress"},
            headers=auth(other_jwt_token),
        )
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_progress_requires_auth(self, client: TestClient):
        assert client.get(f"/v1/progress/{uuid4()}").status_code == 401


class TestCacheAPI:
    def test_force_refresh(self, auth_client: TestClient):
        assert auth_client.post("/v1/cache/refresh").status_code == 204

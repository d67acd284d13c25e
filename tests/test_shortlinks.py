from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from linkpage_app.models.analytics import AnalyticsEvent, Shortlink


class TestShortlinksAPI:
    """Shortlink endpoints and redirects"""

    def test_create_with_custom_code(self, client: TestClient, headers):
        response = client.post(
            "/api/v1/shortlinks/",
            json={"target_url": "https://www.github.com/", "code": "gh-1"},
            headers=headers()
        )
        assert response.status_code == 201

        data = response.json()
        assert data["code"] == "gh-1"
        assert data["target_url"] == "https://www.github.com/"
        assert data["clicks"] == 0
        assert data["short_url"].endswith("/s/gh-1")

    def test_create_with_generated_code(self, client: TestClient, headers):
        response = client.post(
            "/api/v1/shortlinks/", json={"target_url": "https://www.python.org/"}, headers=headers()
        )
        assert response.status_code == 201
        assert len(response.json()["code"]) == 6

    def test_generated_codes_differ(self, client: TestClient, headers):
        codes = {
            client.post(
                "/api/v1/shortlinks/", json={"target_url": "https://www.test.com/"}, headers=headers()
            ).json()["code"]
            for _ in range(2)
        }
        assert len(codes) == 2

    def test_duplicate_code_is_409(self, client: TestClient, headers):
        payload = {"target_url": "https://www.github.com/", "code": "taken"}
        client.post("/api/v1/shortlinks/", json=payload, headers=headers())

        response = client.post("/api/v1/shortlinks/", json=payload, headers=headers("bob"))
        assert response.status_code == 409

    def test_invalid_url_is_422(self, client: TestClient, headers):
        response = client.post(
            "/api/v1/shortlinks/", json={"target_url": "not-a-valid-url"}, headers=headers()
        )
        assert response.status_code == 422

    def test_cannot_attach_to_someone_elses_page(self, client: TestClient, headers):
        page = client.post(
            "/api/v1/pages/", json={"title": "A", "slug": "a"}, headers=headers()
        ).json()

        response = client.post(
            "/api/v1/shortlinks/",
            json={"target_url": "https://x.com/", "page_id": page["id"]},
            headers=headers("bob")
        )
        assert response.status_code == 403

    def test_list_by_page(self, client: TestClient, headers):
        page = client.post(
            "/api/v1/pages/", json={"title": "A", "slug": "a"}, headers=headers()
        ).json()
        client.post(
            "/api/v1/shortlinks/",
            json={"target_url": "https://x.com/", "code": "onpage", "page_id": page["id"]},
            headers=headers()
        )
        client.post(
            "/api/v1/shortlinks/",
            json={"target_url": "https://y.com/", "code": "loose"},
            headers=headers()
        )

        all_codes = [s["code"] for s in client.get("/api/v1/shortlinks/", headers=headers()).json()]
        page_codes = [
            s["code"] for s in client.get(
                f"/api/v1/shortlinks/?page_id={page['id']}", headers=headers()
            ).json()
        ]
        assert all_codes == ["onpage", "loose"]
        assert page_codes == ["onpage"]

    def test_redirect(self, client: TestClient, headers):
        client.post(
            "/api/v1/shortlinks/",
            json={"target_url": "https://www.github.com/", "code": "ghub"},
            headers=headers()
        )

        response = client.get("/s/ghub", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "https://www.github.com/"

    def test_redirect_counts_click_and_records_event(self, client: TestClient, headers, db_session):
        page = client.post(
            "/api/v1/pages/", json={"title": "A", "slug": "a"}, headers=headers()
        ).json()
        created = client.post(
            "/api/v1/shortlinks/",
            json={"target_url": "https://shop.example.com/", "code": "shop",
                  "page_id": page["id"], "block_id": 7},
            headers=headers()
        ).json()

        client.get("/s/shop", follow_redirects=False)
        client.get("/s/shop", follow_redirects=False)

        db_session.expire_all()
        shortlink = db_session.query(Shortlink).filter(Shortlink.code == "shop").one()
        assert shortlink.clicks == 2

        events = db_session.query(AnalyticsEvent).all()
        assert len(events) == 2
        assert events[0].event_type == "click"
        assert events[0].shortlink_id == created["id"]
        assert events[0].page_id == page["id"]
        assert events[0].block_id == 7

    def test_redirect_unknown_code_is_404(self, client: TestClient):
        response = client.get("/s/nothing", follow_redirects=False)
        assert response.status_code == 404

    def test_expired_shortlink_is_404(self, client: TestClient, headers):
        expired = (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat()
        client.post(
            "/api/v1/shortlinks/",
            json={"target_url": "https://old.example.com/", "code": "old", "expires_at": expired},
            headers=headers()
        )

        response = client.get("/s/old", follow_redirects=False)
        assert response.status_code == 404

    def test_delete_shortlink(self, client: TestClient, headers):
        client.post(
            "/api/v1/shortlinks/",
            json={"target_url": "https://www.python.org/", "code": "pyorg"},
            headers=headers()
        )
        # Warm the cache first
        client.get("/s/pyorg", follow_redirects=False)

        response = client.delete("/api/v1/shortlinks/pyorg", headers=headers())
        assert response.status_code == 204

        response = client.get("/s/pyorg", follow_redirects=False)
        assert response.status_code == 404

        response = client.delete("/api/v1/shortlinks/pyorg", headers=headers())
        assert response.status_code == 404

    def test_delete_other_users_shortlink_is_403(self, client: TestClient, headers):
        client.post(
            "/api/v1/shortlinks/",
            json={"target_url": "https://www.python.org/", "code": "pyorg"},
            headers=headers()
        )

        response = client.delete("/api/v1/shortlinks/pyorg", headers=headers("bob"))
        assert response.status_code == 403

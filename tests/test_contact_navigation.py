"""
Public site: contact form and navigation helpers
"""
from alcozero.models.contact import ContactMessage
from alcozero.utils.navigation import breadcrumb_trail, build_breadcrumbs

CONTACT = {"name": "Sam Lee", "email": "sam@example.com", "message": "Do you ship to Canada?"}


class TestContact:
    def test_submit_without_auth(self, client, test_db):
        response = client.post("/api/v1/contact/", json=CONTACT)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "new"
        assert data["phone"] is None
        assert test_db.query(ContactMessage).count() == 1

    def test_required_fields(self, client):
        response = client.post("/api/v1/contact/", json={**CONTACT, "message": "   "})
        assert response.status_code == 422

    def test_email_format(self, client):
        response = client.post("/api/v1/contact/", json={**CONTACT, "email": "sam-at-example"})
        assert response.status_code == 422

    def test_list_newest_first(self, client, admin_token):
        client.post("/api/v1/contact/", json={**CONTACT, "name": "First"})
        client.post("/api/v1/contact/", json={**CONTACT, "name": "Second"})

        response = client.get("/api/v1/contact/", headers={"Authorization": admin_token})

        body = response.json()
        assert [m["name"] for m in body["data"]] == ["Second", "First"]
        assert body["meta"]["total"] == 2

    def test_list_needs_permission(self, client, viewer_token):
        response = client.get("/api/v1/contact/", headers={"Authorization": viewer_token})
        assert response.status_code == 403


class TestBreadcrumbs:
    def test_dashboard_path(self):
        crumbs = build_breadcrumbs("/dashboard/devices")

        assert crumbs == [
            {"label": "Home", "href": "/", "current": False},
            {"label": "Dashboard", "href": "/dashboard", "current": False},
            {"label": "Devices", "href": "/dashboard/devices", "current": True},
        ]

    def test_unknown_segment_kept_raw(self):
        assert breadcrumb_trail("/dashboard/device/ALCH-001") == "Home / Dashboard / device / ALCH-001"

    def test_root_is_only_home(self):
        assert build_breadcrumbs("/") == [{"label": "Home", "href": "/", "current": True}]

    def test_endpoint(self, client):
        data = client.get("/api/v1/navigation/breadcrumbs", params={"path": "/dashboard/events"}).json()["data"]

        assert data["trail"] == "Home / Dashboard / Event Log"
        assert data["items"][-1]["href"] == "/dashboard/events"

    def test_routes(self, client):
        data = client.get("/api/v1/navigation/routes").json()["data"]

        assert {"path": "/dashboard/monitor", "label": "Monitor"} in data["dashboard"]
        assert data["public"][0]["path"] == "/"


class TestHealth:
    def test_root_and_health(self, client):
        assert client.get("/").json()["message"] == "Welcome to AlcoZero API"
        assert client.get("/health").status_code == 200

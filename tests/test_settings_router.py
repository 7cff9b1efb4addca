"""
Profile, preferences, and data export / import / clear
"""
import json

from alcozero.models.device import Device
from alcozero.models.user_settings import UserSettings
from tests.conftest import bearer_for, make_admin


class TestProfile:
    def test_get_profile(self, client, admin_token):
        data = client.get("/api/v1/settings/profile", headers={"Authorization": admin_token}).json()["data"]

        assert data == {
            "name": "Test Admin",
            "email": "admin@alcozero.com",
            "organization": "AlcoZero Labs",
            "role": "admin",
            "phone": "+10000000000",
        }

    def test_update_profile(self, client, admin_token):
        response = client.put(
            "/api/v1/settings/profile",
            json={"name": "Dana Ops", "organization": "Northwind", "role": "Operator"},
            headers={"Authorization": admin_token},
        )

        data = response.json()["data"]
        assert data["name"] == "Dana Ops"
        assert data["organization"] == "Northwind"
        assert data["role"] == "operator"

    def test_role_change_ignored_for_non_admin(self, client, viewer_token):
        data = client.put(
            "/api/v1/settings/profile", json={"role": "admin", "name": "Sneaky"}, headers={"Authorization": viewer_token}
        ).json()["data"]

        assert data["role"] == "viewer"
        assert data["name"] == "Sneaky"

    def test_email_taken(self, client, admin_token, viewer_user):
        response = client.put(
            "/api/v1/settings/profile", json={"email": viewer_user.email}, headers={"Authorization": admin_token}
        )

        assert response.status_code == 409
        assert response.json()["detail"]["error_code"] == "EMAIL_EXISTS"

    def test_null_name_is_rejected(self, client, admin_token, test_db, test_admin):
        """Required profile fields cannot be cleared with null"""
        response = client.put("/api/v1/settings/profile", json={"name": None}, headers={"Authorization": admin_token})

        assert response.status_code == 422
        test_db.refresh(test_admin)
        assert test_admin.name == "Test Admin"

    def test_null_email_is_rejected(self, client, admin_token):
        response = client.put("/api/v1/settings/profile", json={"email": None}, headers={"Authorization": admin_token})
        assert response.status_code == 422

    def test_null_optional_field_clears_it(self, client, admin_token):
        data = client.put(
            "/api/v1/settings/profile", json={"phone": None}, headers={"Authorization": admin_token}
        ).json()["data"]

        assert data["phone"] is None
        assert data["name"] == "Test Admin"


class TestPreferences:
    def test_defaults(self, client, viewer_token):
        data = client.get("/api/v1/settings/preferences", headers={"Authorization": viewer_token}).json()["data"]

        assert data["theme"] == "dark"
        assert data["language"] == "en"
        assert data["timezone"] == "UTC"
        assert data["date_format"] == "MM/DD/YYYY"
        assert data["notifications"] == {"email": True, "push": True, "alerts": True, "reports": False}
        assert data["dashboard"] == {"auto_refresh": True, "refresh_interval": 30, "default_view": "monitor"}

    def test_nested_merge(self, client, viewer_token):
        """Updating one nested key keeps its siblings"""
        headers = {"Authorization": viewer_token}
        client.put("/api/v1/settings/preferences", json={"notifications": {"reports": True}}, headers=headers)
        data = client.put("/api/v1/settings/preferences", json={"theme": "light"}, headers=headers).json()["data"]

        assert data["theme"] == "light"
        assert data["notifications"] == {"email": True, "push": True, "alerts": True, "reports": True}


class TestDataTransfer:
    def _create_device(self, test_db, admin, device_id="ALCH-001"):
        device = Device(admin_id=admin.admin_id, device_id=device_id, name=f"Unit {device_id}", captured_images=[])
        test_db.add(device)
        test_db.commit()
        return device

    def test_export(self, client, admin_token, test_db, test_admin):
        self._create_device(test_db, test_admin)

        response = client.get("/api/v1/settings/export", headers={"Authorization": admin_token})

        assert response.status_code == 200
        assert 'filename="alchozero-data-' in response.headers["content-disposition"]
        payload = json.loads(response.content)
        assert set(payload) == {"profile", "devices", "logs", "alerts", "settings", "exported_at"}
        assert payload["devices"][0]["device_id"] == "ALCH-001"
        assert payload["settings"]["security"]["audit_logging"] is True

    def test_import_round_trip_into_another_account(self, client, admin_token, test_db, test_admin):
        self._create_device(test_db, test_admin)
        exported = json.loads(client.get("/api/v1/settings/export", headers={"Authorization": admin_token}).content)
        exported["settings"]["preferences"]["theme"] = "light"

        other = make_admin(test_db, "second@alcozero.com", name="Second")
        response = client.post("/api/v1/settings/import", json=exported, headers={"Authorization": bearer_for(other)})

        assert response.status_code == 200
        counts = response.json()["data"]
        assert counts["devices_imported"] == 1
        assert counts["settings_merged"] == 2
        assert test_db.query(Device).filter_by(admin_id=other.admin_id).count() == 1

        test_db.refresh(other)
        assert other.name == "Test Admin"

    def test_import_skips_existing_devices(self, client, admin_token, test_db, test_admin):
        self._create_device(test_db, test_admin)
        payload = {"devices": [{"device_id": "ALCH-001", "name": "dup"}, {"device_id": "", "name": "bad"}]}

        counts = client.post("/api/v1/settings/import", json=payload, headers={"Authorization": admin_token}).json()["data"]

        assert counts["devices_imported"] == 0
        assert counts["devices_skipped"] == 2

    def test_import_rejects_garbage(self, client, admin_token):
        response = client.post(
            "/api/v1/settings/import",
            content=b"not json at all",
            headers={"Authorization": admin_token, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "INVALID_IMPORT"

    def test_import_rejects_invalid_settings(self, client, admin_token, test_db, test_admin):
        """Bad setting values fail the whole import before anything is written"""
        payload = {
            "devices": [{"device_id": "ALCH-050", "name": "Imported"}],
            "settings": {"security": {"session_timeout": "abc"}},
        }

        response = client.post("/api/v1/settings/import", json=payload, headers={"Authorization": admin_token})

        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "INVALID_IMPORT"
        assert test_db.query(Device).filter_by(admin_id=test_admin.admin_id).count() == 0

    def test_import_merges_only_given_settings(self, client, admin_token):
        payload = {"settings": {"security": {"session_timeout": 45, "auto_lock": None}}}

        counts = client.post("/api/v1/settings/import", json=payload, headers={"Authorization": admin_token}).json()["data"]

        assert counts["settings_merged"] == 1
        security = client.get("/api/v1/security/settings", headers={"Authorization": admin_token}).json()["data"]
        assert security["session_timeout"] == 45
        assert security["auto_lock"] is True

    def test_clear_data(self, client, admin_token, test_db, test_admin):
        response = client.delete("/api/v1/settings/data", headers={"Authorization": admin_token})

        assert response.status_code == 200
        assert test_db.query(UserSettings).filter_by(admin_id=test_admin.admin_id).count() == 0
        test_db.refresh(test_admin)
        assert test_admin.name == "admin"
        assert test_admin.organization is None
        assert test_admin.phone is None

        # the account keeps working with default settings
        prefs = client.get("/api/v1/settings/preferences", headers={"Authorization": admin_token})
        assert prefs.json()["data"]["theme"] == "dark"

    def test_clear_requires_admin_role(self, client, operator_token):
        response = client.delete("/api/v1/settings/data", headers={"Authorization": operator_token})

        assert response.status_code == 403
        assert response.json()["detail"]["error_code"] == "FORBIDDEN"

"""
Device registry: CRUD, search, driver ids, readings and images
"""
import re
from datetime import timedelta

import pytest

from alcozero.crud.device_log import create_log
from alcozero.core.severity import LogStatus
from alcozero.models.device import Device
from alcozero.models.security_log import SecurityLog
from alcozero.services.image_service import ImageUploadError, image_service
from common_utils import utcnow
from tests.conftest import bearer_for, make_admin

DEVICES_URL = "/api/v1/devices/"


def device_payload(**overrides):
    payload = {
        "name": "Car Alcohol Detector #1",
        "device_id": "ALCH-001",
        "driver_name": "John Smith",
        "driver_age": 35,
        "location": "Downtown Area",
        "vehicle_name": "Toyota Camry",
        "vehicle_number": "ABC-1234",
    }
    payload.update(overrides)
    return payload


def create_device(client, token, **overrides):
    response = client.post(DEVICES_URL, json=device_payload(**overrides), headers={"Authorization": token})
    assert response.status_code == 201, response.json()
    return response.json()["data"]["device"]


@pytest.fixture
def fake_upload(monkeypatch):
    uploads = []

    async def upload(filename, content, content_type):
        uploads.append(filename)
        n = len(uploads)
        return {"url": f"https://res.cloudinary.com/demo/image/upload/v1/img{n}.jpg", "public_id": f"img{n}"}

    monkeypatch.setattr(image_service, "upload_image", upload)
    return uploads


class TestDeviceCreate:
    def test_create_generates_driver_id(self, client, admin_token, test_db, test_admin):
        """A device without a driver id gets DRV-{year}-{NNNN}"""
        device = create_device(client, admin_token)

        assert re.match(r"^DRV-\d{4}-0001$", device["driver_id"])
        assert device["admin_id"] == test_admin.admin_id
        assert device["captured_images"] == []
        assert test_db.query(SecurityLog).filter_by(event="device_create").count() == 1

    def test_driver_ids_increment(self, client, admin_token):
        first = create_device(client, admin_token)
        second = create_device(client, admin_token, device_id="ALCH-002")

        assert first["driver_id"].endswith("-0001")
        assert second["driver_id"].endswith("-0002")

    def test_supplied_driver_id_kept(self, client, admin_token):
        device = create_device(client, admin_token, driver_id="DRV-CUSTOM-7")
        assert device["driver_id"] == "DRV-CUSTOM-7"

    def test_vehicle_fields_optional(self, client, admin_token):
        """Blank vehicle details are stored as null instead of failing"""
        device = create_device(client, admin_token, vehicle_name="", vehicle_number="   ")
        assert device["vehicle_name"] is None
        assert device["vehicle_number"] is None

    def test_name_and_device_id_required(self, client, admin_token):
        response = client.post(
            DEVICES_URL, json=device_payload(name="  "), headers={"Authorization": admin_token}
        )
        assert response.status_code == 422

    def test_duplicate_hardware_id(self, client, admin_token):
        create_device(client, admin_token)
        response = client.post(DEVICES_URL, json=device_payload(), headers={"Authorization": admin_token})

        assert response.status_code == 409
        assert response.json()["detail"]["error_code"] == "DUPLICATE_RESOURCE"

    def test_viewer_cannot_create(self, client, viewer_token):
        response = client.post(DEVICES_URL, json=device_payload(), headers={"Authorization": viewer_token})

        assert response.status_code == 403
        assert response.json()["detail"]["error_code"] == "FORBIDDEN"

    def test_next_driver_id_endpoint(self, client, admin_token):
        response = client.post("/api/v1/devices/driver-id", headers={"Authorization": admin_token})

        assert response.status_code == 200
        assert re.match(r"^DRV-\d{4}-\d{4}$", response.json()["data"]["driver_id"])


class TestDeviceList:
    def test_search_and_status_filter(self, client, admin_token):
        create_device(client, admin_token, name="Truck Sensor", device_id="ALCH-001")
        create_device(client, admin_token, name="Van Sensor", device_id="ALCH-002", status="offline")
        create_device(client, admin_token, name="Bus Unit", device_id="BUS-9")
        headers = {"Authorization": admin_token}

        by_name = client.get(DEVICES_URL, params={"search": "sensor"}, headers=headers).json()["data"]
        assert by_name["total"] == 2

        by_id = client.get(DEVICES_URL, params={"search": "bus-9"}, headers=headers).json()["data"]
        assert [d["device_id"] for d in by_id["items"]] == ["BUS-9"]

        offline = client.get(DEVICES_URL, params={"status": "offline"}, headers=headers).json()["data"]
        assert [d["device_id"] for d in offline["items"]] == ["ALCH-002"]

    def test_stats_cover_all_devices(self, client, admin_token):
        """Stats ignore the active filter"""
        create_device(client, admin_token, device_id="A-1")
        create_device(client, admin_token, device_id="A-2", status="offline")

        data = client.get(DEVICES_URL, params={"search": "A-1"}, headers={"Authorization": admin_token}).json()["data"]
        assert data["total"] == 1
        assert data["stats"] == {"total": 2, "active": 1, "offline": 1}

    def test_newest_first(self, client, admin_token):
        create_device(client, admin_token, device_id="OLD-1")
        create_device(client, admin_token, device_id="NEW-1")

        items = client.get(DEVICES_URL, headers={"Authorization": admin_token}).json()["data"]["items"]
        assert [d["device_id"] for d in items] == ["NEW-1", "OLD-1"]

    def test_invalid_status_filter(self, client, admin_token):
        response = client.get(DEVICES_URL, params={"status": "broken"}, headers={"Authorization": admin_token})

        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "VALIDATION_ERROR"

    def test_only_own_devices_listed(self, client, admin_token, test_db):
        other = make_admin(test_db, "other@alcozero.com")
        create_device(client, bearer_for(other), device_id="OTHER-1")
        create_device(client, admin_token, device_id="MINE-1")

        items = client.get(DEVICES_URL, headers={"Authorization": admin_token}).json()["data"]["items"]
        assert [d["device_id"] for d in items] == ["MINE-1"]


class TestDeviceDetail:
    def test_get_update_delete(self, client, admin_token, test_db):
        headers = {"Authorization": admin_token}
        device = create_device(client, headers["Authorization"])
        url = f"{DEVICES_URL}{device['id']}"

        assert client.get(url, headers=headers).json()["data"]["device"]["name"] == device["name"]

        updated = client.put(url, json={"location": "Depot 4", "battery_level": 60}, headers=headers)
        assert updated.status_code == 200
        body = updated.json()["data"]["device"]
        assert body["location"] == "Depot 4"
        assert body["battery_level"] == 60
        assert body["driver_name"] == "John Smith"

        assert client.delete(url, headers=headers).status_code == 200
        assert test_db.query(Device).count() == 0
        assert client.get(url, headers=headers).json()["detail"]["error_code"] == "DEVICE_NOT_FOUND"

    def test_other_admins_device_is_not_found(self, client, admin_token, test_db):
        other = make_admin(test_db, "other@alcozero.com")
        device = create_device(client, bearer_for(other), device_id="OTHER-1")

        response = client.get(f"{DEVICES_URL}{device['id']}", headers={"Authorization": admin_token})
        assert response.status_code == 404

    def test_operator_can_update_not_delete(self, client, admin_token, test_db, test_admin):
        device = create_device(client, admin_token)
        operator = make_admin(test_db, "op@alcozero.com", role="operator")
        # move the device to the operator so ownership passes
        row = test_db.get(Device, device["id"])
        row.admin_id = operator.admin_id
        test_db.commit()
        headers = {"Authorization": bearer_for(operator)}

        assert client.put(f"{DEVICES_URL}{device['id']}", json={"name": "Renamed"}, headers=headers).status_code == 200
        assert client.delete(f"{DEVICES_URL}{device['id']}", headers=headers).status_code == 403

    @pytest.mark.parametrize("field", ["name", "device_id", "status", "battery_level", "firmware_version"])
    def test_null_on_required_field_is_rejected(self, client, admin_token, test_db, field):
        """Required columns cannot be cleared with an explicit null"""
        device = create_device(client, admin_token)

        response = client.put(f"{DEVICES_URL}{device['id']}", json={field: None}, headers={"Authorization": admin_token})

        assert response.status_code == 422
        assert test_db.get(Device, device["id"]).name == device["name"]

    def test_null_on_optional_field_clears_it(self, client, admin_token):
        device = create_device(client, admin_token)

        response = client.put(f"{DEVICES_URL}{device['id']}", json={"driver_name": None}, headers={"Authorization": admin_token})

        assert response.status_code == 200
        assert response.json()["data"]["device"]["driver_name"] is None

    def test_logs_and_statistics(self, client, admin_token, test_db):
        device = create_device(client, admin_token)
        now = utcnow()
        for level in (0.1, 0.2, 0.35):
            create_log(test_db, device_id="ALCH-001", alcohol_level=level, engine="ON", status=LogStatus.SAFE, timestamp=now)
        create_log(test_db, device_id="ALCH-001", alcohol_level=0.5, engine="ON", status=LogStatus.ALERT,
                   timestamp=now - timedelta(days=30))
        create_log(test_db, device_id="OTHER", alcohol_level=0.9, engine="ON", status=LogStatus.ALERT, timestamp=now)
        test_db.commit()
        headers = {"Authorization": admin_token}

        logs = client.get(f"{DEVICES_URL}{device['id']}/logs", headers=headers).json()["data"]["items"]
        assert len(logs) == 4
        assert {log["device_id"] for log in logs} == {"ALCH-001"}

        stats = client.get(f"{DEVICES_URL}{device['id']}/statistics", params={"days": 7}, headers=headers).json()["data"]
        assert stats["total_readings"] == 3
        assert stats["alert_count"] == 1
        assert stats["critical_readings"] == 1
        assert stats["warning_readings"] == 1
        assert stats["safe_readings"] == 1
        assert stats["max_bac"] == pytest.approx(0.35)


class TestDeviceImages:
    def test_driver_photo(self, client, admin_token, fake_upload):
        device = create_device(client, admin_token)
        response = client.post(
            f"{DEVICES_URL}{device['id']}/driver-photo",
            files={"file": ("driver.jpg", b"\xff\xd8\xff", "image/jpeg")},
            headers={"Authorization": admin_token},
        )

        assert response.status_code == 200
        body = response.json()["data"]["device"]
        assert body["driver_photo"].endswith("img1.jpg")
        assert body["driver_photo_thumbnail"] == "https://res.cloudinary.com/demo/image/upload/w_150,h_150,c_fill,q_auto/v1/img1.jpg"

    def test_captured_images_newest_first_and_capped(self, client, admin_token, fake_upload, monkeypatch):
        from alcozero.config import settings
        monkeypatch.setattr(settings, "MAX_CAPTURED_IMAGES", 2)
        device = create_device(client, admin_token)
        url = f"{DEVICES_URL}{device['id']}/images"

        for name in ("a.png", "b.png", "c.png"):
            response = client.post(url, files={"file": (name, b"\x89PNG", "image/png")}, headers={"Authorization": admin_token})
            assert response.status_code == 201

        images = response.json()["data"]["device"]["captured_images"]
        assert [img["public_id"] for img in images] == ["img3", "img2"]
        assert images[0]["thumbnail_url"] == "https://res.cloudinary.com/demo/image/upload/w_300,h_300,c_fill,q_auto/v1/img3.jpg"

    def test_remove_captured_image(self, client, admin_token, fake_upload):
        device = create_device(client, admin_token)
        headers = {"Authorization": admin_token}
        client.post(f"{DEVICES_URL}{device['id']}/images", files={"file": ("a.png", b"x", "image/png")}, headers=headers)

        missing = client.delete(f"{DEVICES_URL}{device['id']}/images/5", headers=headers)
        assert missing.json()["detail"]["error_code"] == "IMAGE_NOT_FOUND"

        removed = client.delete(f"{DEVICES_URL}{device['id']}/images/0", headers=headers)
        assert removed.json()["data"]["device"]["captured_images"] == []

    def test_non_image_rejected(self, client, admin_token, fake_upload):
        device = create_device(client, admin_token)
        response = client.post(
            f"{DEVICES_URL}{device['id']}/driver-photo",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers={"Authorization": admin_token},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "INVALID_FILE"
        assert fake_upload == []

    def test_upload_failure_reported(self, client, admin_token, monkeypatch):
        async def failing(filename, content, content_type):
            raise ImageUploadError("Upload preset not found")

        monkeypatch.setattr(image_service, "upload_image", failing)
        device = create_device(client, admin_token)
        response = client.post(
            f"{DEVICES_URL}{device['id']}/driver-photo",
            files={"file": ("driver.jpg", b"\xff", "image/jpeg")},
            headers={"Authorization": admin_token},
        )

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["error_code"] == "UPLOAD_FAILED"
        assert "Upload preset not found" in detail["message"]

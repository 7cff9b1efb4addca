"""
Device logs and alerts
"""
from datetime import timedelta

from alcozero.crud.alert import create_alert
from alcozero.models.alert import Alert, AlertTypeEnum
from alcozero.models.device_log import DeviceLog
from common_utils import epoch_millis, utcnow


def seed_alerts(db, levels, device_id="Car123"):
    for level in levels:
        create_alert(
            db,
            device_id=device_id,
            alcohol_level=level,
            engine="ON",
            alert_type=AlertTypeEnum.MANUAL,
            message=f"level {level}",
        )
    db.commit()


class TestDeviceLogs:
    def test_manual_log_status(self, client, operator_token, test_db):
        """Manual logs are flagged ALERT strictly above 0.3"""
        headers = {"Authorization": operator_token}
        safe = client.post("/api/v1/logs/", json={"alcohol_level": 0.3, "engine": "ON"}, headers=headers)
        alert = client.post("/api/v1/logs/", json={"alcohol_level": 0.31, "engine": "OFF"}, headers=headers)

        assert safe.status_code == 201
        assert safe.json()["data"]["log"]["status"] == "SAFE"
        assert safe.json()["data"]["log"]["device_id"] == "Car123"
        assert alert.json()["data"]["log"]["status"] == "ALERT"

    def test_timestamp_accepts_epoch_millis(self, client, operator_token):
        ts = utcnow() - timedelta(hours=2)
        response = client.post(
            "/api/v1/logs/",
            json={"device_id": "ALCH-002", "alcohol_level": 0.05, "timestamp": epoch_millis(ts)},
            headers={"Authorization": operator_token},
        )

        assert response.status_code == 201
        assert response.json()["data"]["log"]["timestamp"].startswith(ts.strftime("%Y-%m-%dT%H:%M"))

    def test_bad_timestamp(self, client, operator_token, test_db):
        response = client.post(
            "/api/v1/logs/",
            json={"alcohol_level": 0.05, "timestamp": "yesterday-ish"},
            headers={"Authorization": operator_token},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "VALIDATION_ERROR"
        assert test_db.query(DeviceLog).count() == 0

    def test_out_of_range_epoch_timestamp(self, client, operator_token, test_db):
        response = client.post(
            "/api/v1/logs/",
            json={"alcohol_level": 0.1, "timestamp": 10**20},
            headers={"Authorization": operator_token},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "VALIDATION_ERROR"
        assert test_db.query(DeviceLog).count() == 0

    def test_batch_with_out_of_range_timestamp_saves_nothing(self, client, operator_token, test_db):
        batch = {"logs": [{"alcohol_level": 0.01}, {"alcohol_level": 0.1, "timestamp": 10**20}]}

        response = client.post("/api/v1/logs/batch", json=batch, headers={"Authorization": operator_token})

        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "VALIDATION_ERROR"
        assert test_db.query(DeviceLog).count() == 0

    def test_batch_and_list(self, client, operator_token):
        headers = {"Authorization": operator_token}
        batch = {"logs": [{"device_id": "ALCH-001", "alcohol_level": level / 100} for level in range(5)]}

        response = client.post("/api/v1/logs/batch", json=batch, headers=headers)
        assert response.status_code == 201
        assert response.json()["data"]["count"] == 5

        items = client.get("/api/v1/logs/", params={"limit": 3}, headers=headers).json()["data"]["items"]
        assert len(items) == 3

    def test_viewer_cannot_write(self, client, viewer_token):
        response = client.post("/api/v1/logs/", json={"alcohol_level": 0.1}, headers={"Authorization": viewer_token})
        assert response.status_code == 403


class TestAlertList:
    def test_severity_filters(self, client, viewer_token, test_db):
        """critical > 0.3, warning in (0.15, 0.3], info <= 0.15"""
        seed_alerts(test_db, [0.1, 0.15, 0.2, 0.3, 0.31, 0.5])
        headers = {"Authorization": viewer_token}

        def levels(severity):
            data = client.get("/api/v1/alerts/", params={"severity": severity}, headers=headers).json()["data"]
            return sorted(item["alcohol_level"] for item in data["items"])

        assert levels("critical") == [0.31, 0.5]
        assert levels("warning") == [0.2, 0.3]
        assert levels("info") == [0.1, 0.15]
        assert len(levels("all")) == 6

    def test_derived_severity_fields(self, client, viewer_token, test_db):
        seed_alerts(test_db, [0.45])
        item = client.get("/api/v1/alerts/", headers={"Authorization": viewer_token}).json()["data"]["items"][0]

        assert item["severity"] == "critical"
        assert item["severity_label"] == "CRITICAL"
        assert item["status"] == "new"

    def test_recent_count_is_last_24_hours(self, client, viewer_token, test_db):
        seed_alerts(test_db, [0.2, 0.4])
        old = test_db.query(Alert).first()
        old.timestamp = utcnow() - timedelta(days=2)
        test_db.commit()

        data = client.get("/api/v1/alerts/", headers={"Authorization": viewer_token}).json()["data"]
        assert len(data["items"]) == 2
        assert data["recent_count"] == 1

    def test_invalid_severity(self, client, viewer_token):
        response = client.get("/api/v1/alerts/", params={"severity": "loud"}, headers={"Authorization": viewer_token})

        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "VALIDATION_ERROR"

    def test_limit_and_device_filter(self, client, viewer_token, test_db):
        seed_alerts(test_db, [0.2] * 5, device_id="ALCH-001")
        seed_alerts(test_db, [0.2] * 2, device_id="ALCH-002")
        headers = {"Authorization": viewer_token}

        limited = client.get("/api/v1/alerts/", params={"limit": 3}, headers=headers).json()["data"]["items"]
        assert len(limited) == 3

        by_device = client.get("/api/v1/alerts/", params={"device_id": "ALCH-002"}, headers=headers).json()["data"]["items"]
        assert len(by_device) == 2


class TestAlertTrigger:
    def test_manual_alert_with_explicit_values(self, client, operator_token, operator_user):
        response = client.post(
            "/api/v1/alerts/trigger",
            json={"device_id": "ALCH-003", "alcohol_level": 0.4, "engine": "OFF"},
            headers={"Authorization": operator_token},
        )

        assert response.status_code == 201
        alert = response.json()["data"]["alert"]
        assert alert["alert_type"] == "MANUAL"
        assert alert["message"] == "Manual alert triggered for device ALCH-003"
        assert alert["triggered_by"] == operator_user.admin_id
        assert alert["priority"] is None

    def test_values_taken_from_live_status(self, client, operator_token, fake_rtdb):
        fake_rtdb["deviceStatus/Car123"] = {"alcoholLevel": 0.22, "engine": "ON", "timestamp": 1}

        response = client.post("/api/v1/alerts/trigger", json={}, headers={"Authorization": operator_token})

        alert = response.json()["data"]["alert"]
        assert alert["device_id"] == "Car123"
        assert alert["alcohol_level"] == 0.22
        assert alert["engine"] == "ON"

    def test_live_status_unavailable(self, client, operator_token):
        """Without the live store the alert still goes in with defaults"""
        response = client.post("/api/v1/alerts/trigger", json={"device_id": "X"}, headers={"Authorization": operator_token})

        assert response.status_code == 201
        alert = response.json()["data"]["alert"]
        assert alert["alcohol_level"] == 0.0
        assert alert["engine"] == "UNKNOWN"

    def test_viewer_cannot_trigger(self, client, viewer_token):
        response = client.post("/api/v1/alerts/trigger", json={}, headers={"Authorization": viewer_token})
        assert response.status_code == 403


class TestAlertStatus:
    def test_acknowledge(self, client, operator_token, test_db):
        seed_alerts(test_db, [0.4])
        alert_id = test_db.query(Alert).first().alert_id

        response = client.patch(
            f"/api/v1/alerts/{alert_id}/status", json={"status": "acknowledged"}, headers={"Authorization": operator_token}
        )

        assert response.status_code == 200
        body = response.json()["data"]["alert"]
        assert body["status"] == "acknowledged"
        assert body["status_updated_at"] is not None

    def test_unknown_alert(self, client, operator_token):
        response = client.patch(
            "/api/v1/alerts/999/status", json={"status": "resolved"}, headers={"Authorization": operator_token}
        )
        assert response.status_code == 404
        assert response.json()["detail"]["error_code"] == "ALERT_NOT_FOUND"

    def test_invalid_status_value(self, client, operator_token, test_db):
        seed_alerts(test_db, [0.4])
        alert_id = test_db.query(Alert).first().alert_id

        response = client.patch(
            f"/api/v1/alerts/{alert_id}/status", json={"status": "snoozed"}, headers={"Authorization": operator_token}
        )
        assert response.status_code == 422

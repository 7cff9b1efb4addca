"""
Live device status, the status stream and the telemetry rules
"""
import asyncio
import json

import pytest

from alcozero.firebase.device_status import DeviceStatusStore, FirebaseUnavailableError
from alcozero.models.alert import Alert
from alcozero.models.device import Device
from alcozero.models.device_log import DeviceLog
from alcozero.models.engine_log import EngineLog
from alcozero.routes.monitor_router import status_events

NODE = "deviceStatus/Car123"


class TestMonitorRead:
    def test_missing_node_is_disconnected(self, client, viewer_token, fake_rtdb):
        response = client.get("/api/v1/monitor/", headers={"Authorization": viewer_token})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["device_id"] == "Car123"
        assert data["connected"] is False
        assert data["engine"] == "UNKNOWN"
        assert data["status"] == "DISCONNECTED"

    @pytest.mark.parametrize("level,expected", [
        (0.05, "SAFE"),
        (0.2, "WARNING"),
        (0.31, "ALERT - HIGH LEVEL"),
    ])
    def test_present_node_is_connected(self, client, viewer_token, fake_rtdb, level, expected):
        """A node without a connected flag counts as connected"""
        fake_rtdb["deviceStatus/ALCH-001"] = {"alcoholLevel": level, "engine": "ON", "timestamp": 1700000000000}

        data = client.get("/api/v1/monitor/ALCH-001", headers={"Authorization": viewer_token}).json()["data"]

        assert data["connected"] is True
        assert data["alcohol_level"] == level
        assert data["timestamp"] == 1700000000000
        assert data["status"] == expected

    def test_explicitly_disconnected(self, client, viewer_token, fake_rtdb):
        fake_rtdb[NODE] = {"alcoholLevel": 0.5, "engine": "ON", "connected": False}

        data = client.get("/api/v1/monitor/Car123", headers={"Authorization": viewer_token}).json()["data"]
        assert data["status"] == "DISCONNECTED"

    def test_read_failure_reports_error_status(self, client, viewer_token):
        """No initialized live store: engine ERROR and disconnected, not a 5xx"""
        data = client.get("/api/v1/monitor/Car123", headers={"Authorization": viewer_token}).json()["data"]

        assert data["engine"] == "ERROR"
        assert data["connected"] is False


class TestStatusUpdate:
    def test_first_detection_logs_and_alerts(self, client, operator_token, fake_rtdb, notifier, test_db):
        """A device with no live node yet counts as level 0, so its first reading over 0.03 alerts"""
        assert NODE not in fake_rtdb

        response = client.put(
            "/api/v1/monitor/Car123/status",
            json={"alcohol_level": 0.05, "engine": "on"},
            headers={"Authorization": operator_token},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["log_id"] is not None
        assert data["alert_id"] is not None
        assert data["snapshot"]["engine"] == "ON"

        assert fake_rtdb[NODE]["alcoholLevel"] == 0.05
        assert fake_rtdb[NODE]["engine"] == "ON"

        log = test_db.query(DeviceLog).one()
        assert log.status.value == "ALERT"
        assert log.source == "telemetry"

        alert = test_db.query(Alert).one()
        assert alert.alert_type.value == "AUTO"
        assert alert.priority.value == "HIGH"
        assert alert.message == "ALERT: High alcohol level detected (0.050 BAC)"
        notifier.notify_alert_triggered.assert_called_once()

    def test_staying_above_threshold_does_not_realert(self, client, operator_token, fake_rtdb, notifier, test_db):
        fake_rtdb[NODE] = {"alcoholLevel": 0.05, "engine": "ON", "timestamp": 1}

        client.put("/api/v1/monitor/Car123/status", json={"alcohol_level": 0.09}, headers={"Authorization": operator_token})

        assert test_db.query(DeviceLog).count() == 1
        assert test_db.query(Alert).count() == 0
        notifier.notify_alert_triggered.assert_not_called()

    def test_unchanged_level_is_not_logged(self, client, operator_token, fake_rtdb, notifier, test_db):
        fake_rtdb[NODE] = {"alcoholLevel": 0.01, "engine": "ON", "timestamp": 1}

        client.put("/api/v1/monitor/Car123/status", json={"alcohol_level": 0.01}, headers={"Authorization": operator_token})

        assert test_db.query(DeviceLog).count() == 0

    def test_engine_lock(self, client, operator_token, fake_rtdb, notifier, test_db):
        """ON -> OFF is logged as LOCKED and sends the lock notice"""
        fake_rtdb[NODE] = {"alcoholLevel": 0.12, "engine": "ON", "timestamp": 1}

        data = client.put(
            "/api/v1/monitor/Car123/status", json={"engine": "OFF"}, headers={"Authorization": operator_token}
        ).json()["data"]

        assert data["engine_action"] == "LOCKED"
        entry = test_db.query(EngineLog).one()
        assert (entry.previous_status, entry.new_status, entry.action) == ("ON", "OFF", "LOCKED")
        notifier.notify_engine_locked.assert_called_once_with("Car123", 0.12)

    def test_first_engine_report_is_not_a_change(self, client, operator_token, fake_rtdb, notifier, test_db):
        client.put("/api/v1/monitor/Car123/status", json={"engine": "ON"}, headers={"Authorization": operator_token})

        assert test_db.query(EngineLog).count() == 0

    def test_refreshes_last_seen(self, client, admin_token, fake_rtdb, notifier, test_db, test_admin):
        device = Device(admin_id=test_admin.admin_id, device_id="Car123", name="Demo car", captured_images=[])
        test_db.add(device)
        test_db.commit()

        client.put("/api/v1/monitor/Car123/status", json={"alcohol_level": 0.0}, headers={"Authorization": admin_token})

        test_db.refresh(device)
        assert device.last_seen is not None

    def test_store_unavailable(self, client, operator_token, test_db):
        response = client.put(
            "/api/v1/monitor/Car123/status", json={"alcohol_level": 0.2}, headers={"Authorization": operator_token}
        )

        assert response.status_code == 503
        assert response.json()["detail"]["error_code"] == "FIREBASE_UNAVAILABLE"
        assert test_db.query(DeviceLog).count() == 0

    def test_viewer_cannot_update(self, client, viewer_token, fake_rtdb):
        response = client.put("/api/v1/monitor/Car123/status", json={"engine": "OFF"}, headers={"Authorization": viewer_token})
        assert response.status_code == 403


class TestEngineHistory:
    def test_newest_first(self, client, viewer_token, test_db):
        test_db.add_all([
            EngineLog(device_id="Car123", previous_status="ON", new_status="OFF", action="LOCKED"),
            EngineLog(device_id="Car123", previous_status="OFF", new_status="ON", action="UNLOCKED"),
            EngineLog(device_id="Other", previous_status="ON", new_status="OFF", action="LOCKED"),
        ])
        test_db.commit()

        response = client.get("/api/v1/monitor/Car123/engine-logs", headers={"Authorization": viewer_token})

        assert response.status_code == 200
        items = response.json()["data"]["items"]
        assert [i["action"] for i in items] == ["UNLOCKED", "LOCKED"]

    def test_requires_auth(self, client):
        assert client.get("/api/v1/monitor/Car123/engine-logs").status_code == 401


class TestTelemetryPush:
    def test_push_reading(self, client, operator_token, fake_rtdb, notifier, test_db):
        response = client.post(
            "/api/v1/telemetry/ALCH-009",
            json={"alcohol_level": 0.1, "engine": "ON"},
            headers={"Authorization": operator_token},
        )

        assert response.status_code == 202
        assert fake_rtdb["deviceStatus/ALCH-009"]["connected"] is True
        alert = test_db.query(Alert).one()
        assert alert.priority.value == "CRITICAL"

    def test_level_required(self, client, operator_token, fake_rtdb):
        response = client.post("/api/v1/telemetry/ALCH-009", json={"engine": "ON"}, headers={"Authorization": operator_token})
        assert response.status_code == 422


class FakeStore:
    def __init__(self, snapshots):
        self.snapshots = list(snapshots)

    def get_status(self, device_id):
        if len(self.snapshots) > 1:
            return self.snapshots.pop(0)
        return self.snapshots[0]


class TestStatusStream:
    def _collect(self, store, max_events):
        async def run():
            return [event async for event in status_events("Car123", store, 0, max_events=max_events)]
        return asyncio.run(run())

    def test_emits_only_on_change(self):
        first = {"device_id": "Car123", "alcohol_level": 0.0, "engine": "ON", "timestamp": 1, "connected": True, "status": "SAFE"}
        second = {**first, "alcohol_level": 0.2, "timestamp": 2, "status": "WARNING"}
        store = FakeStore([first, first, first, second])

        events = self._collect(store, max_events=2)

        assert len(events) == 2
        assert events[0].startswith("event: status\ndata: ")
        payload = json.loads(events[1].split("data: ", 1)[1])
        assert payload["status"] == "WARNING"
        assert store.snapshots == [second]

    def test_disconnected_timestamp_churn_is_ignored(self):
        """A missing node is re-stamped on every read; that alone is no change"""
        gone = {"device_id": "Car123", "alcohol_level": 0.0, "engine": "UNKNOWN", "connected": False, "status": "DISCONNECTED"}
        back = {**gone, "connected": True, "engine": "ON", "timestamp": 9, "status": "SAFE"}
        store = FakeStore([{**gone, "timestamp": 1}, {**gone, "timestamp": 2}, {**gone, "timestamp": 3}, back])

        events = self._collect(store, max_events=2)

        assert json.loads(events[1].split("data: ", 1)[1])["engine"] == "ON"


class TestDeviceStatusStore:
    def test_uninitialized_sdk(self):
        with pytest.raises(FirebaseUnavailableError):
            DeviceStatusStore().get_raw("Car123")

from database import get_activity_logs, get_alerts, get_readings


class TestSubmitReading:
    def test_critical_reading_stores_reading_and_alert(self, client, login, submit):
        # Arrange
        login("agent")

        # Act
        response = submit(pH=9.5, temperature=24.0)

        # Assert
        assert response.status_code == 201
        body = response.get_json()
        assert body["status"] == "critical"
        assert body["parameter_status"] == {"pH": "critical", "temperature": "normal"}
        assert body["alerts_generated"] is True
        assert len(body["alerts"]) == 1
        alert = body["alerts"][0]
        assert alert["severity"] == "high"
        assert "9.5" in alert["message"] and "8.5" in alert["message"]

        stored, total = get_readings(site_id="site-1")
        assert total == 1 and stored[0]["id"] == body["id"]
        alerts, _ = get_alerts(site_id="site-1")
        assert [a["id"] for a in alerts] == [alert["id"]]

    def test_warning_reading_raises_medium_alert(self, login, submit):
        login("agent")

        body = submit(pH=8.6).get_json()

        assert body["status"] == "warning"
        assert body["alerts"][0]["severity"] == "medium"

    def test_normal_reading_raises_no_alert(self, login, submit):
        login("admin")

        body = submit(site_id="site-2", pH=7.2, conductivity=750, turbidity=1.2).get_json()

        assert body["status"] == "normal"
        assert body["alerts_generated"] is False
        assert body["alerts"] == []

    def test_one_alert_per_breached_parameter(self, login, submit):
        login("agent")

        body = submit(pH=9.5, conductivity=850, dissolved_oxygen=3.0, turbidity=2.0).get_json()

        severities = {alert["parameter"]: alert["severity"] for alert in body["alerts"]}
        assert severities == {"pH": "high", "conductivity": "medium", "dissolved_oxygen": "high"}

    def test_non_numeric_value_rejected(self, login, submit):
        login("agent")

        response = submit(pH="abc")

        assert response.status_code == 400
        assert "pH" in response.get_json()["errors"]
        assert get_readings()[1] == 0

    def test_empty_submission_rejected(self, login, submit):
        login("agent")
        assert submit().status_code == 400

    def test_unknown_site(self, login, submit):
        login("admin")
        assert submit(site_id="site-99", pH=7.0).status_code == 404

    def test_agent_cannot_submit_for_other_site(self, login, submit):
        login("agent")
        assert submit(site_id="site-2", pH=7.0).status_code == 403

    def test_roles_without_data_entry_are_refused(self, login, submit):
        for account in ("professor", "external", "director"):
            login(account)
            assert submit(pH=7.0).status_code == 403
        assert get_readings()[1] == 0

    def test_submission_is_logged(self, login, submit, users):
        login("agent")
        submit(pH=7.0)

        logs = get_activity_logs(action_filter="CREATE")
        assert logs[0]["status"] == "Success"
        assert logs[0]["user_name"] == "Site Agent"

    def test_updated_threshold_applies_to_next_reading(self, client, login, submit):
        login("admin")
        client.put("/api/sites/site-1/thresholds/conductivity", json={"min": None, "max": 1000})

        body = submit(conductivity=900).get_json()

        assert body["status"] == "normal"


class TestListReadings:
    def _seed(self, login, submit):
        login("admin")
        submit(timestamp="2026-02-01T09:00:00", pH=7.0)
        submit(timestamp="2026-02-02T09:00:00", pH=8.8)
        submit(site_id="site-2", timestamp="2026-02-03T09:00:00", pH=9.9)

    def test_admin_sees_all_sites(self, client, login, submit):
        self._seed(login, submit)

        body = client.get("/api/data").get_json()

        assert body["pagination"]["total"] == 3
        assert [r["timestamp"] for r in body["data"]] == [
            "2026-02-03 09:00:00", "2026-02-02 09:00:00", "2026-02-01 09:00:00"
        ]

    def test_agent_only_sees_own_sites(self, client, login, submit):
        self._seed(login, submit)
        login("agent")

        body = client.get("/api/data").get_json()

        assert {r["site_id"] for r in body["data"]} == {"site-1"}
        assert client.get("/api/data?site_id=site-2").status_code == 403

    def test_filters_and_pagination(self, client, login, submit):
        self._seed(login, submit)

        body = client.get("/api/data?status=warning").get_json()
        assert [r["parameters"]["pH"] for r in body["data"]] == [8.8]

        body = client.get("/api/data?start_date=2026-02-02&end_date=2026-02-02").get_json()
        assert body["pagination"]["total"] == 1

        body = client.get("/api/data?limit=2&offset=2").get_json()
        assert len(body["data"]) == 1
        assert body["pagination"] == {"total": 3, "limit": 2, "offset": 2, "pages": 2}

    def test_bad_query_arguments(self, client, login):
        login("admin")
        assert client.get("/api/data?status=bad").status_code == 400
        assert client.get("/api/data?limit=abc").status_code == 400
        assert client.get("/api/data?start_date=someday").status_code == 400

    def test_get_single_reading(self, client, login, submit):
        login("admin")
        reading_id = submit(site_id="site-2", pH=9.9).get_json()["id"]

        body = client.get(f"/api/data/{reading_id}").get_json()
        assert body["site_name"] == "Tambacounda Mine"
        assert body["collector_name"] == "Admin User"
        assert len(body["alerts"]) == 1

        login("agent")
        assert client.get(f"/api/data/{reading_id}").status_code == 403
        assert client.get("/api/data/does-not-exist").status_code == 404


class TestAlertShape:
    def test_extreme_value_is_stored_with_its_alert(self, client, login, submit):
        login("agent")

        response = submit(turbidity=1e28)

        assert response.status_code == 201
        body = response.get_json()
        assert body["status"] == "critical"
        assert body["alerts"][0]["message"].startswith(f"Turbidity 1{'0' * 28}.0 NTU")
        assert get_readings(site_id="site-1")[1] == 1

    def test_same_alert_shape_from_every_endpoint(self, client, login, submit):
        login("agent")
        body = submit(pH=9.5).get_json()
        created = body["alerts"][0]

        listed = client.get("/api/alerts").get_json()["alerts"][0]
        detailed = client.get(f"/api/data/{body['id']}").get_json()["alerts"][0]
        acknowledged = client.put(f"/api/alerts/{created['id']}/acknowledge").get_json()["alert"]

        assert set(created) == set(listed) == set(detailed) == set(acknowledged)
        assert created["parameter"] == listed["parameter"] == "pH"
        assert created["reading_id"] == listed["reading_id"] == body["id"]
        assert "type" not in listed and "data_id" not in listed

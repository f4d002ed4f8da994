from tests.web.conftest import create_client_in_db, create_facility_in_db


def _override_url(client_uuid: str, facility_uuid: str, year: int = 2027, month: int = 4) -> str:
    return f"/clients/{client_uuid}/facilities/{facility_uuid}/overrides/{year}/{month}"


class TestOverrideUpsert:
    def test_set_pause_window(self, client, test_engine, headers):
        acme = create_client_in_db(test_engine)
        facility = create_facility_in_db(test_engine, acme.id)

        response = client.put(
            _override_url(acme.uuid, facility.uuid),
            json={"pause_start_day": 10, "pause_end_day": 20, "override_notes": "Renovation"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["pause_start_day"] == 10

        preview = client.get(f"/clients/{acme.uuid}/billing-preview?year=2027&month=4", headers=headers).json()
        line = preview["line_items"][0]
        assert line["is_overridden"] is True
        assert line["is_pro_rated"] is True
        assert line["active_days"] == 15
        assert line["line_subtotal"] == "681.82"

    def test_replace_override(self, client, test_engine, headers):
        acme = create_client_in_db(test_engine)
        facility = create_facility_in_db(test_engine, acme.id)
        url = _override_url(acme.uuid, facility.uuid)

        client.put(url, json={"override_rate": "1200.00"}, headers=headers)
        response = client.put(url, json={"override_status": "PAUSED"}, headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["override_status"] == "PAUSED"
        assert data["override_rate"] is None

    def test_half_window_rejected(self, client, test_engine, headers):
        acme = create_client_in_db(test_engine)
        facility = create_facility_in_db(test_engine, acme.id)

        response = client.put(_override_url(acme.uuid, facility.uuid), json={"pause_start_day": 10}, headers=headers)

        assert response.status_code == 400

    def test_inverted_window_rejected(self, client, test_engine, headers):
        acme = create_client_in_db(test_engine)
        facility = create_facility_in_db(test_engine, acme.id)

        response = client.put(
            _override_url(acme.uuid, facility.uuid),
            json={"pause_start_day": 20, "pause_end_day": 10},
            headers=headers,
        )

        assert response.status_code == 400

    def test_negative_frequency_rejected(self, client, test_engine, headers):
        acme = create_client_in_db(test_engine)
        facility = create_facility_in_db(test_engine, acme.id)

        response = client.put(
            _override_url(acme.uuid, facility.uuid), json={"override_frequency": -1}, headers=headers
        )

        assert response.status_code == 422
        preview = client.get(f"/clients/{acme.uuid}/billing-preview?year=2027&month=4", headers=headers).json()
        assert preview["line_items"][0]["is_overridden"] is False

    def test_bad_month_rejected(self, client, test_engine, headers):
        acme = create_client_in_db(test_engine)
        facility = create_facility_in_db(test_engine, acme.id)

        response = client.put(_override_url(acme.uuid, facility.uuid, month=13), json={}, headers=headers)

        assert response.status_code == 400

    def test_unknown_facility(self, client, test_engine, headers):
        acme = create_client_in_db(test_engine)

        response = client.put(_override_url(acme.uuid, "nope"), json={}, headers=headers)

        assert response.status_code == 404
        assert response.json() == {"error": "Facility not found"}

    def test_facility_of_other_client(self, client, test_engine, headers):
        acme = create_client_in_db(test_engine)
        other = create_client_in_db(test_engine, name="Globex")
        facility = create_facility_in_db(test_engine, other.id)

        response = client.put(_override_url(acme.uuid, facility.uuid), json={}, headers=headers)

        assert response.status_code == 404


class TestOverrideDelete:
    def test_delete(self, client, test_engine, headers):
        acme = create_client_in_db(test_engine)
        facility = create_facility_in_db(test_engine, acme.id)
        url = _override_url(acme.uuid, facility.uuid)
        client.put(url, json={"override_rate": "1200.00"}, headers=headers)

        assert client.delete(url, headers=headers).status_code == 204
        assert client.delete(url, headers=headers).status_code == 404

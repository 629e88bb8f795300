# backend/tests/routes/test_availability_routes.py
from datetime import time, timedelta

PROBLEM_JSON = "application/problem+json"


def _query(client, target_date, *operation_ids):
    params = [("date", target_date.isoformat())] + [("operation_ids", op) for op in operation_ids]
    return client.get("/api/v1/availability", params=params)


class TestGetAvailability:
    def test_returns_windows_for_each_working_window(self, client, garage, booking_date):
        response = _query(client, booking_date, "oil-change")

        assert response.status_code == 200
        body = response.json()
        assert body["date"] == booking_date.isoformat()
        assert body["operation_ids"] == ["oil-change"]
        staff_a = [(w["start"], w["end"]) for w in body["windows"] if w["staff_id"] == "staff-a"]
        assert staff_a == [
            ("08:00:00", "09:00:00"),
            ("09:00:00", "10:00:00"),
            ("10:00:00", "11:00:00"),
            ("11:00:00", "12:00:00"),
        ]

    def test_operation_set_is_canonicalised(self, client, garage, booking_date):
        response = _query(client, booking_date, "tire-rotation", "oil-change", "oil-change")

        assert response.status_code == 200
        assert response.json()["operation_ids"] == ["oil-change", "tire-rotation"]

    def test_closed_day_returns_no_windows(self, client, garage, booking_date):
        garage.closure(booking_date)

        response = _query(client, booking_date, "oil-change")

        assert response.status_code == 200
        assert response.json()["windows"] == []

    def test_day_without_opening_hours_returns_no_windows(self, client, garage, booking_date):
        tuesday = booking_date + timedelta(days=1)
        garage.staff("staff-tue", [(tuesday.weekday(), time(8, 0), time(12, 0))])

        response = _query(client, tuesday, "oil-change")

        assert response.status_code == 200
        assert response.json()["windows"] == []

    def test_date_in_the_past_is_rejected(self, client, garage, today):
        response = _query(client, today - timedelta(days=1), "oil-change")

        assert response.status_code == 400
        assert response.headers["content-type"].startswith(PROBLEM_JSON)
        assert response.json()["code"] == "INVALID_DATE_RANGE"

    def test_date_beyond_horizon_is_rejected(self, client, garage, today):
        response = _query(client, today + timedelta(days=15), "oil-change")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_DATE_RANGE"

    def test_unknown_operation_is_not_found(self, client, garage, booking_date):
        response = _query(client, booking_date, "oil-change", "teleport")

        assert response.status_code == 404
        assert response.json()["code"] == "UNKNOWN_OPERATION"

    def test_empty_operation_set_is_rejected(self, client, garage, booking_date):
        response = _query(client, booking_date)

        assert response.status_code == 400
        assert response.json()["code"] == "EMPTY_OPERATION_LIST"

    def test_missing_date_is_a_validation_error(self, client, garage):
        response = client.get("/api/v1/availability", params={"operation_ids": "oil-change"})

        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"

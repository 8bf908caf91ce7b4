def create_period(client, school, headers, **overrides):
    payload = {"name": "Period 1", "start_time": "08:00", "end_time": "08:40", "sort_order": 1}
    payload.update(overrides)
    return client.post(f"/api/schools/{school['id']}/timetable/periods", json=payload, headers=headers)


def test_periods_are_listed_in_sort_order(client, school, admin_headers):
    assert create_period(client, school, admin_headers, name="Period 2", start_time="08:40", end_time="09:20", sort_order=2).status_code == 201
    assert create_period(client, school, admin_headers).status_code == 201

    response = client.get(f"/api/schools/{school['id']}/timetable/periods", headers=admin_headers)
    assert response.status_code == 200
    assert [period["name"] for period in response.json()] == ["Period 1", "Period 2"]


def test_overlapping_period_is_rejected_but_touching_is_allowed(client, school, admin_headers):
    first = create_period(client, school, admin_headers).json()

    overlapping = create_period(client, school, admin_headers, name="Break", start_time="08:30", end_time="08:50", sort_order=2)
    assert overlapping.status_code == 409
    body = overlapping.json()
    assert body["message"] == "Time overlaps with an existing period."
    assert body["details"]["conflicts"] == [
        {"dimension": "period", "entityId": first["id"], "label": "Period 1 (08:00-08:40)"}
    ]

    touching = create_period(client, school, admin_headers, name="Break", start_time="08:40", end_time="09:00", sort_order=2, is_break=True)
    assert touching.status_code == 201
    assert touching.json()["is_break"] is True


def test_duplicate_name_or_order_is_a_conflict(client, school, admin_headers):
    assert create_period(client, school, admin_headers).status_code == 201

    response = create_period(client, school, admin_headers, name="period 1", start_time="10:00", end_time="10:40")
    assert response.status_code == 409
    assert set(response.json()["details"]["fieldErrors"]) == {"name", "sort_order"}


def test_invalid_period_times_are_bad_requests(client, school, admin_headers):
    response = create_period(client, school, admin_headers, start_time="08:40", end_time="08:00")
    assert response.status_code == 400
    assert response.json()["details"]["fieldErrors"] == {"end_time": ["End time must be after start time"]}

    trailing_newline = create_period(client, school, admin_headers, end_time="08:40\n")
    assert trailing_newline.status_code == 400
    assert trailing_newline.json()["details"]["fieldErrors"] == {"end_time": ["Time must be in HH:MM 24-hour format"]}


def test_update_merges_stored_times_and_excludes_itself(client, school, admin_headers):
    period = create_period(client, school, admin_headers).json()
    create_period(client, school, admin_headers, name="Period 2", start_time="09:00", end_time="09:40", sort_order=2)
    url = f"/api/schools/{school['id']}/timetable/periods/{period['id']}"

    renamed = client.put(url, json={"name": "First Period"}, headers=admin_headers)
    assert renamed.status_code == 200
    assert renamed.json()["start_time"] == "08:00"

    stretched = client.put(url, json={"end_time": "09:00"}, headers=admin_headers)
    assert stretched.status_code == 200
    assert stretched.json()["end_time"] == "09:00"

    too_long = client.put(url, json={"end_time": "09:10"}, headers=admin_headers)
    assert too_long.status_code == 409

    reversed_times = client.put(url, json={"start_time": "09:30"}, headers=admin_headers)
    assert reversed_times.status_code == 400


def test_delete_period(client, school, admin_headers):
    period = create_period(client, school, admin_headers).json()
    url = f"/api/schools/{school['id']}/timetable/periods/{period['id']}"
    assert client.delete(url, headers=admin_headers).json() == {"success": True}
    assert client.get(f"/api/schools/{school['id']}/timetable/periods", headers=admin_headers).json() == []

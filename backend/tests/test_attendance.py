def register(academics, records, **overrides):
    payload = {
        "class_id": academics["class"]["id"],
        "attendance_date": "2026-02-02",
        "academic_year": "2026-2027",
        "term": "FIRST_TERM",
        "records": records,
    }
    payload.update(overrides)
    return payload


def test_daily_register_is_saved_and_listed(client, school, admin_headers, academics, pupils):
    url = f"/api/schools/{school['id']}/attendance/daily"
    saved = client.put(
        url,
        json=register(
            academics,
            [
                {"student_id": pupils["baraka"]["id"], "status": "PRESENT"},
                {"student_id": pupils["akinyi"]["id"], "status": "LATE", "remarks": "Matatu delay"},
            ],
        ),
        headers=admin_headers,
    )
    assert saved.status_code == 200
    assert len(saved.json()) == 2

    listed = client.get(
        url, params={"class_id": academics["class"]["id"], "attendance_date": "2026-02-02"}, headers=admin_headers
    )
    assert listed.status_code == 200
    assert [(row["student_id"], row["status"], row["remarks"]) for row in listed.json()] == [
        (pupils["akinyi"]["id"], "LATE", "Matatu delay"),
        (pupils["baraka"]["id"], "PRESENT", None),
    ]

    other_day = client.get(
        url, params={"class_id": academics["class"]["id"], "attendance_date": "2026-02-03"}, headers=admin_headers
    )
    assert other_day.json() == []


def test_resubmitting_a_day_overwrites_statuses(client, school, admin_headers, academics, pupils):
    url = f"/api/schools/{school['id']}/attendance/daily"
    client.put(url, json=register(academics, [{"student_id": pupils["baraka"]["id"], "status": "ABSENT"}]), headers=admin_headers)
    client.put(
        url,
        json=register(academics, [{"student_id": pupils["baraka"]["id"], "status": "EXCUSED", "remarks": "Clinic"}]),
        headers=admin_headers,
    )

    rows = client.get(
        url, params={"class_id": academics["class"]["id"], "attendance_date": "2026-02-02"}, headers=admin_headers
    ).json()
    assert len(rows) == 1
    assert rows[0]["status"] == "EXCUSED"
    assert rows[0]["remarks"] == "Clinic"


def test_register_rejects_students_outside_the_class(client, school, admin_headers, academics, pupils):
    url = f"/api/schools/{school['id']}/attendance/daily"
    response = client.put(
        url,
        json=register(
            academics,
            [
                {"student_id": pupils["baraka"]["id"], "status": "PRESENT"},
                {"student_id": pupils["otieno"]["id"], "status": "PRESENT"},
                {"student_id": pupils["baraka"]["id"], "status": "ABSENT"},
            ],
        ),
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["details"]["fieldErrors"] == {
        "records.1.student_id": ["Student is not in this class."],
        "records.2.student_id": ["Student appears more than once."],
    }
    rows = client.get(
        url, params={"class_id": academics["class"]["id"], "attendance_date": "2026-02-02"}, headers=admin_headers
    ).json()
    assert rows == []


def test_register_validates_the_envelope(client, school, admin_headers, academics, pupils):
    url = f"/api/schools/{school['id']}/attendance/daily"
    record = [{"student_id": pupils["baraka"]["id"], "status": "PRESENT"}]

    future = client.put(url, json=register(academics, record, attendance_date="2999-01-01"), headers=admin_headers)
    assert future.status_code == 400
    assert future.json()["details"]["fieldErrors"] == {"attendance_date": ["Date cannot be in the future."]}

    empty = client.put(url, json=register(academics, []), headers=admin_headers)
    assert empty.status_code == 400
    assert "records" in empty.json()["details"]["fieldErrors"]

    bad_status = client.put(
        url, json=register(academics, [{"student_id": pupils["baraka"]["id"], "status": "SICK"}]), headers=admin_headers
    )
    assert bad_status.status_code == 400
    assert "records.0.status" in bad_status.json()["details"]["fieldErrors"]

    unknown_class = client.put(url, json=register(academics, record, class_id="missing"), headers=admin_headers)
    assert unknown_class.status_code == 400
    assert unknown_class.json()["details"]["fieldErrors"] == {"class_id": ["Invalid class."]}


def test_register_requires_access_to_the_school(client, super_admin_headers, school, academics, pupils):
    from conftest import create_school, create_school_admin

    other = create_school(client, super_admin_headers, name="Hillside School", school_email="office@hillside.ac.ke")
    outsider = create_school_admin(client, super_admin_headers, other["id"], email="admin@hillside.ac.ke")
    response = client.put(
        f"/api/schools/{school['id']}/attendance/daily",
        json=register(academics, [{"student_id": pupils["baraka"]["id"], "status": "PRESENT"}]),
        headers=outsider,
    )
    assert response.status_code == 403

def check(client, school, headers, payload):
    return client.post(f"/api/schools/{school['id']}/conflicts/check", json=payload, headers=headers)


def test_dry_run_reports_conflicts_without_persisting(client, school, admin_headers, academics):
    slot = client.post(
        f"/api/schools/{school['id']}/timetable/slots",
        json={
            "class_id": academics["class"]["id"],
            "subject_id": academics["math"]["id"],
            "teacher_id": academics["teacher"]["id"],
            "day_of_week": "MONDAY",
            "start_time": "09:00",
            "end_time": "10:00",
        },
        headers=admin_headers,
    ).json()

    payload = {
        "dimension_filters": {"teacher": {"teacher_id": academics["teacher"]["id"], "day_of_week": "monday"}},
        "candidate_raw": {"start": "09:30", "end": "10:30"},
        "boundary_policy": "EXCLUSIVE_TOUCH",
    }
    response = check(client, school, admin_headers, payload)
    assert response.status_code == 200
    assert response.json() == {
        "status": "CONFLICT",
        "conflicts": [{"dimension": "teacher", "entityId": slot["id"], "label": "Mathematics (09:00-10:00)"}],
    }

    payload["exclude_entity_id"] = slot["id"]
    assert check(client, school, admin_headers, payload).json() == {"status": "CLEAR"}


def test_dry_run_reports_invalid_candidate(client, school, admin_headers):
    response = check(
        client,
        school,
        admin_headers,
        {
            "dimension_filters": {"period": {}},
            "candidate_raw": {"start": "10:00", "end": "09:00"},
            "boundary_policy": "EXCLUSIVE_TOUCH",
        },
    )
    assert response.status_code == 200
    assert response.json() == {"status": "INVALID", "reason": "End time must be after start time"}


def test_dry_run_on_grade_scale_uses_percentages(client, school, admin_headers):
    scale = client.post(
        f"/api/schools/{school['id']}/grading/scales", json={"name": "Main Scale"}, headers=admin_headers
    ).json()
    client.post(
        f"/api/schools/{school['id']}/grading/scales/{scale['id']}/entries",
        json={"min_percentage": 80, "max_percentage": 89, "grade_letter": "B"},
        headers=admin_headers,
    )
    payload = {
        "dimension_filters": {"scale": {"grade_scale_id": scale["id"]}},
        "candidate_raw": {"start": 89, "end": 95},
        "boundary_policy": "INCLUSIVE_TOUCH",
    }
    assert check(client, school, admin_headers, payload).json()["status"] == "CONFLICT"

    payload["boundary_policy"] = "EXCLUSIVE_TOUCH"
    assert check(client, school, admin_headers, payload).json() == {"status": "CLEAR"}


def test_dry_run_rejects_malformed_filters(client, school, admin_headers):
    mixed = check(
        client,
        school,
        admin_headers,
        {
            "dimension_filters": {"scale": {"grade_scale_id": "x"}, "period": {}},
            "candidate_raw": {"start": 1, "end": 2},
            "boundary_policy": "INCLUSIVE_TOUCH",
        },
    )
    assert mixed.status_code == 400
    assert mixed.json()["details"]["fieldErrors"] == {
        "non_field_errors": ["The scale dimension cannot be mixed with time dimensions"]
    }

    missing_key = check(
        client,
        school,
        admin_headers,
        {
            "dimension_filters": {"room": {"room": "Lab 1"}},
            "candidate_raw": {"start": "08:00", "end": "09:00"},
            "boundary_policy": "EXCLUSIVE_TOUCH",
        },
    )
    assert missing_key.status_code == 400
    assert missing_key.json()["message"] == "Validation failed."

    bad_day = check(
        client,
        school,
        admin_headers,
        {
            "dimension_filters": {"room": {"room": "Lab 1", "day_of_week": "FUNDAY"}},
            "candidate_raw": {"start": "08:00", "end": "09:00"},
            "boundary_policy": "EXCLUSIVE_TOUCH",
        },
    )
    assert bad_day.status_code == 400


def test_dry_run_cannot_read_another_schools_scale(client, super_admin_headers, school, admin_headers):
    from conftest import create_school

    other = create_school(client, super_admin_headers, name="Hillside School", school_email="office@hillside.ac.ke")
    foreign_scale = client.post(
        f"/api/schools/{other['id']}/grading/scales", json={"name": "Hillside Scale"}, headers=super_admin_headers
    ).json()
    response = check(
        client,
        school,
        admin_headers,
        {
            "dimension_filters": {"scale": {"grade_scale_id": foreign_scale["id"]}},
            "candidate_raw": {"start": 10, "end": 20},
            "boundary_policy": "INCLUSIVE_TOUCH",
        },
    )
    assert response.status_code == 404

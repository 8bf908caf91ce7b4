from conftest import create_school, create_student


def test_enroll_list_and_filter_students(client, school, admin_headers, academics, pupils):
    base = f"/api/schools/{school['id']}/students"
    everyone = client.get(base, headers=admin_headers)
    assert everyone.status_code == 200
    assert [student["last_name"] for student in everyone.json()] == ["Achieng", "Mwangi", "Omondi"]

    in_class = client.get(base, params={"class_id": academics["class"]["id"]}, headers=admin_headers).json()
    assert {student["id"] for student in in_class} == {pupils["baraka"]["id"], pupils["akinyi"]["id"]}

    detail = client.get(f"{base}/{pupils['baraka']['id']}", headers=admin_headers).json()
    assert detail["date_of_birth"] == "2012-03-14"
    assert detail["is_active"] is True
    assert detail["middle_name"] is None


def test_student_id_number_is_unique_per_school(client, super_admin_headers, school, admin_headers, pupils):
    base = f"/api/schools/{school['id']}/students"
    duplicate = client.post(
        base,
        json={
            "student_id_number": "GF-001",
            "first_name": "Zawadi",
            "last_name": "Njeri",
            "date_of_birth": "2013-05-01",
            "gender": "FEMALE",
            "enrollment_date": "2025-01-06",
        },
        headers=admin_headers,
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["details"]["fieldErrors"] == {"student_id_number": ["This ID number is already in use."]}

    other = create_school(client, super_admin_headers, name="Hillside School", school_email="office@hillside.ac.ke")
    assert create_student(client, other, super_admin_headers)["student_id_number"] == "GF-001"


def test_invalid_student_payloads_are_bad_requests(client, school, admin_headers, academics):
    base = f"/api/schools/{school['id']}/students"
    future_birth = client.post(
        base,
        json={
            "student_id_number": "GF-010",
            "first_name": "Baraka",
            "last_name": "Mwangi",
            "date_of_birth": "2999-01-01",
            "gender": "MALE",
            "enrollment_date": "2025-01-06",
        },
        headers=admin_headers,
    )
    assert future_birth.status_code == 400
    assert future_birth.json()["details"]["fieldErrors"] == {"date_of_birth": ["Date of birth cannot be in the future."]}

    bad_gender = client.post(
        base,
        json={
            "student_id_number": "GF-011",
            "first_name": "Baraka",
            "last_name": "Mwangi",
            "date_of_birth": "2012-01-01",
            "gender": "UNKNOWN",
            "enrollment_date": "2025-01-06",
        },
        headers=admin_headers,
    )
    assert bad_gender.status_code == 400
    assert "gender" in bad_gender.json()["details"]["fieldErrors"]


def test_class_must_belong_to_the_school(client, super_admin_headers, school, admin_headers, pupils):
    other = create_school(client, super_admin_headers, name="Hillside School", school_email="office@hillside.ac.ke")
    foreign_class = client.post(
        f"/api/schools/{other['id']}/classes",
        json={"name": "Grade 4", "academic_year": "2026-2027"},
        headers=super_admin_headers,
    ).json()

    response = client.put(
        f"/api/schools/{school['id']}/students/{pupils['baraka']['id']}",
        json={"current_class_id": foreign_class["id"]},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["details"]["fieldErrors"] == {"current_class_id": ["Invalid class."]}


def test_update_moves_deactivates_and_keeps_required_fields(client, school, admin_headers, academics, pupils):
    url = f"/api/schools/{school['id']}/students/{pupils['baraka']['id']}"
    moved = client.put(
        url,
        json={"current_class_id": academics["other_class"]["id"], "first_name": None, "city": "Nakuru"},
        headers=admin_headers,
    )
    assert moved.status_code == 200
    assert moved.json()["current_class_id"] == academics["other_class"]["id"]
    assert moved.json()["first_name"] == "Baraka"
    assert moved.json()["city"] == "Nakuru"

    unassigned = client.put(url, json={"current_class_id": "", "is_active": False}, headers=admin_headers).json()
    assert unassigned["current_class_id"] is None
    assert unassigned["is_active"] is False

    taken = client.put(url, json={"student_id_number": pupils["akinyi"]["student_id_number"]}, headers=admin_headers)
    assert taken.status_code == 409


def test_class_roster_lists_active_students_only(client, school, admin_headers, academics, pupils):
    client.put(
        f"/api/schools/{school['id']}/students/{pupils['akinyi']['id']}",
        json={"is_active": False},
        headers=admin_headers,
    )
    roster = client.get(
        f"/api/schools/{school['id']}/classes/{academics['class']['id']}/students", headers=admin_headers
    )
    assert roster.status_code == 200
    assert roster.json() == [
        {
            "id": pupils["baraka"]["id"],
            "student_id_number": "GF-001",
            "first_name": "Baraka",
            "last_name": "Mwangi",
        }
    ]


def test_deleting_a_class_unplaces_its_students(client, school, admin_headers, academics, pupils):
    base = f"/api/schools/{school['id']}"
    assert client.delete(f"{base}/classes/{academics['class']['id']}", headers=admin_headers).status_code == 200
    student = client.get(f"{base}/students/{pupils['baraka']['id']}", headers=admin_headers).json()
    assert student["current_class_id"] is None


def test_delete_student_is_scoped_to_school(client, super_admin_headers, school, admin_headers, pupils):
    other = create_school(client, super_admin_headers, name="Hillside School", school_email="office@hillside.ac.ke")
    student_id = pupils["baraka"]["id"]
    assert client.delete(f"/api/schools/{other['id']}/students/{student_id}", headers=super_admin_headers).status_code == 404
    assert client.delete(f"/api/schools/{school['id']}/students/{student_id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/schools/{school['id']}/students/{student_id}", headers=admin_headers).status_code == 404

from conftest import create_school


def assignments_url(school, class_id):
    return f"/api/schools/{school['id']}/classes/{class_id}/assignments"


def test_assign_subjects_to_a_class(client, school, admin_headers, academics):
    base = assignments_url(school, academics["class"]["id"])
    math = client.post(
        base,
        json={"subject_id": academics["math"]["id"], "teacher_id": academics["teacher"]["id"]},
        headers=admin_headers,
    )
    assert math.status_code == 201
    assert math.json()["academic_year"] == academics["class"]["academic_year"]
    assert math.json()["teacher_id"] == academics["teacher"]["id"]

    english = client.post(base, json={"subject_id": academics["english"]["id"], "teacher_id": ""}, headers=admin_headers)
    assert english.status_code == 201
    assert english.json()["teacher_id"] is None

    listed = client.get(base, headers=admin_headers).json()
    assert [item["subject_id"] for item in listed] == [academics["english"]["id"], academics["math"]["id"]]


def test_subject_is_assigned_once_per_class_and_year(client, school, admin_headers, academics):
    base = assignments_url(school, academics["class"]["id"])
    assert client.post(base, json={"subject_id": academics["math"]["id"]}, headers=admin_headers).status_code == 201

    again = client.post(base, json={"subject_id": academics["math"]["id"]}, headers=admin_headers)
    assert again.status_code == 409
    assert again.json()["details"]["fieldErrors"] == {"subject_id": ["Subject already assigned."]}

    other_class = assignments_url(school, academics["other_class"]["id"])
    assert client.post(other_class, json={"subject_id": academics["math"]["id"]}, headers=admin_headers).status_code == 201


def test_foreign_subject_or_teacher_is_rejected(client, super_admin_headers, school, admin_headers, academics):
    other = create_school(client, super_admin_headers, name="Hillside School", school_email="office@hillside.ac.ke")
    foreign_subject = client.post(
        f"/api/schools/{other['id']}/subjects", json={"name": "Kiswahili"}, headers=super_admin_headers
    ).json()
    base = assignments_url(school, academics["class"]["id"])

    bad_subject = client.post(base, json={"subject_id": foreign_subject["id"]}, headers=admin_headers)
    assert bad_subject.status_code == 400
    assert bad_subject.json()["details"]["fieldErrors"] == {"subject_id": ["Invalid subject."]}

    bad_teacher = client.post(
        base, json={"subject_id": academics["math"]["id"], "teacher_id": "missing"}, headers=admin_headers
    )
    assert bad_teacher.status_code == 400
    assert bad_teacher.json()["details"]["fieldErrors"] == {"teacher_id": ["Invalid teacher."]}

    foreign_class = client.get(assignments_url(other, academics["class"]["id"]), headers=super_admin_headers)
    assert foreign_class.status_code == 404


def test_update_swaps_or_clears_the_teacher(client, school, admin_headers, academics):
    base = assignments_url(school, academics["class"]["id"])
    assignment = client.post(
        base,
        json={"subject_id": academics["math"]["id"], "teacher_id": academics["teacher"]["id"]},
        headers=admin_headers,
    ).json()

    swapped = client.put(
        f"{base}/{assignment['id']}", json={"teacher_id": academics["other_teacher"]["id"]}, headers=admin_headers
    )
    assert swapped.status_code == 200
    assert swapped.json()["teacher_id"] == academics["other_teacher"]["id"]

    cleared = client.put(f"{base}/{assignment['id']}", json={"teacher_id": None}, headers=admin_headers)
    assert cleared.json()["teacher_id"] is None

    wrong_class = assignments_url(school, academics["other_class"]["id"])
    assert client.put(f"{wrong_class}/{assignment['id']}", json={}, headers=admin_headers).status_code == 404


def test_deleting_the_teacher_leaves_the_subject_unstaffed(client, school, admin_headers, academics):
    base = assignments_url(school, academics["class"]["id"])
    assignment = client.post(
        base,
        json={"subject_id": academics["english"]["id"], "teacher_id": academics["other_teacher"]["id"]},
        headers=admin_headers,
    ).json()

    teacher_url = f"/api/schools/{school['id']}/teachers/{academics['other_teacher']['id']}"
    assert client.delete(teacher_url, headers=admin_headers).status_code == 200
    assert client.get(base, headers=admin_headers).json()[0]["teacher_id"] is None

    assert client.delete(f"{base}/{assignment['id']}", headers=admin_headers).status_code == 200
    assert client.get(base, headers=admin_headers).json() == []

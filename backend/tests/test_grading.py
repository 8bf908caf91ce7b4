def create_scale(client, school, headers, **overrides):
    payload = {"name": "KCSE Scale", "is_active": True}
    payload.update(overrides)
    response = client.post(f"/api/schools/{school['id']}/grading/scales", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def entries_url(school, scale):
    return f"/api/schools/{school['id']}/grading/scales/{scale['id']}/entries"


def test_entries_are_stored_at_tenth_precision(client, school, admin_headers):
    scale = create_scale(client, school, admin_headers)
    response = client.post(
        entries_url(school, scale),
        json={"min_percentage": "79.95", "max_percentage": 89.9, "grade_letter": "b+", "grade_point": 3.5},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    entry = response.json()
    assert entry["min_percentage"] == 80.0
    assert entry["max_percentage"] == 89.9
    assert entry["grade_letter"] == "B+"


def test_touching_bands_conflict_under_inclusive_policy(client, school, admin_headers):
    scale = create_scale(client, school, admin_headers)
    url = entries_url(school, scale)
    b = client.post(url, json={"min_percentage": 80, "max_percentage": 89, "grade_letter": "B"}, headers=admin_headers).json()
    a = client.post(url, json={"min_percentage": 90, "max_percentage": 100, "grade_letter": "A"}, headers=admin_headers).json()

    response = client.post(url, json={"min_percentage": 89, "max_percentage": 95, "grade_letter": "X"}, headers=admin_headers)
    assert response.status_code == 409
    body = response.json()
    assert body["message"] == "Percentage range overlaps with an existing entry in this scale."
    assert [conflict["entityId"] for conflict in body["details"]["conflicts"]] == [b["id"], a["id"]]
    assert body["details"]["fieldErrors"]["min_percentage"] == ["Range overlap."]

    gap = client.post(url, json={"min_percentage": 89.1, "max_percentage": 89.9, "grade_letter": "B+"}, headers=admin_headers)
    assert gap.status_code == 201


def test_invalid_bands_are_bad_requests(client, school, admin_headers):
    scale = create_scale(client, school, admin_headers)
    url = entries_url(school, scale)

    reversed_band = client.post(url, json={"min_percentage": 80, "max_percentage": 70, "grade_letter": "C"}, headers=admin_headers)
    assert reversed_band.status_code == 400
    assert reversed_band.json()["details"]["fieldErrors"] == {
        "min_percentage": ["Min percentage cannot be greater than max percentage"]
    }

    out_of_range = client.post(url, json={"min_percentage": 90, "max_percentage": 101, "grade_letter": "A"}, headers=admin_headers)
    assert out_of_range.status_code == 400
    assert "max_percentage" in out_of_range.json()["details"]["fieldErrors"]

    not_a_number = client.post(url, json={"min_percentage": "abc", "max_percentage": 50, "grade_letter": "E"}, headers=admin_headers)
    assert not_a_number.status_code == 400

    single_point = client.post(url, json={"min_percentage": 0, "max_percentage": 0, "grade_letter": "Z"}, headers=admin_headers)
    assert single_point.status_code == 201


def test_entry_update_merges_and_excludes_itself(client, school, admin_headers):
    scale = create_scale(client, school, admin_headers)
    url = entries_url(school, scale)
    c = client.post(url, json={"min_percentage": 60, "max_percentage": 69.9, "grade_letter": "C"}, headers=admin_headers).json()
    client.post(url, json={"min_percentage": 70, "max_percentage": 79.9, "grade_letter": "B"}, headers=admin_headers)

    relabel = client.put(f"{url}/{c['id']}", json={"grade_letter": "c", "remark": "Credit"}, headers=admin_headers)
    assert relabel.status_code == 200
    assert relabel.json()["grade_letter"] == "C"

    lowered = client.put(f"{url}/{c['id']}", json={"min_percentage": 55}, headers=admin_headers)
    assert lowered.status_code == 200
    assert lowered.json()["max_percentage"] == 69.9

    into_b = client.put(f"{url}/{c['id']}", json={"max_percentage": 70}, headers=admin_headers)
    assert into_b.status_code == 409


def test_activating_a_scale_deactivates_the_others(client, school, admin_headers):
    first = create_scale(client, school, admin_headers)
    second = create_scale(client, school, admin_headers, name="CBC Scale")

    scales = {scale["name"]: scale for scale in client.get(f"/api/schools/{school['id']}/grading/scales", headers=admin_headers).json()}
    assert scales["KCSE Scale"]["is_active"] is False
    assert scales["CBC Scale"]["is_active"] is True

    reactivated = client.put(
        f"/api/schools/{school['id']}/grading/scales/{first['id']}", json={"is_active": True}, headers=admin_headers
    )
    assert reactivated.status_code == 200
    detail = client.get(f"/api/schools/{school['id']}/grading/scales/{second['id']}", headers=admin_headers).json()
    assert detail["is_active"] is False


def test_scale_detail_includes_entries_and_count(client, school, admin_headers):
    scale = create_scale(client, school, admin_headers)
    url = entries_url(school, scale)
    client.post(url, json={"min_percentage": 0, "max_percentage": 49.9, "grade_letter": "F"}, headers=admin_headers)
    client.post(url, json={"min_percentage": 50, "max_percentage": 100, "grade_letter": "P"}, headers=admin_headers)

    detail = client.get(f"/api/schools/{school['id']}/grading/scales/{scale['id']}", headers=admin_headers).json()
    assert detail["entry_count"] == 2
    assert [entry["grade_letter"] for entry in detail["entries"]] == ["P", "F"]

    listed = client.get(f"/api/schools/{school['id']}/grading/scales", headers=admin_headers).json()
    assert listed[0]["entry_count"] == 2


def test_duplicate_scale_name_is_a_conflict(client, school, admin_headers):
    create_scale(client, school, admin_headers)
    response = client.post(
        f"/api/schools/{school['id']}/grading/scales", json={"name": "kcse scale"}, headers=admin_headers
    )
    assert response.status_code == 409

BASE = "/api/v1/students"


def student_payload(**overrides):
    payload = {
        "first_name": "John",
        "last_name": "Doe",
        "email": "john@x.com",
        "phone_number": "555-010-1234",
    }
    payload.update(overrides)
    return payload


def create(client, **overrides):
    resp = client.post(BASE, json=student_payload(**overrides))
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


# --- create ---

def test_create_student_returns_envelope(client):
    resp = client.post(BASE, json=student_payload(date_of_birth="2000-04-12", zip_code="62701"))

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Student created successfully"
    assert isinstance(body["timestamp"], int)
    assert body["data"]["id"] == 1
    assert body["data"]["full_name"] == "John Doe"
    assert body["data"]["status"] == "Active"
    assert body["data"]["date_of_birth"] == "2000-04-12"


def test_create_duplicate_email_is_conflict(client):
    create(client)

    resp = client.post(BASE, json=student_payload(first_name="Jane", email="JOHN@X.COM"))

    assert resp.status_code == 409
    body = resp.json()
    assert body["success"] is False
    assert "already exists" in body["message"]
    assert body["data"]["kind"] == "DUPLICATE_KEY"


def test_create_invalid_name_is_bad_request(client):
    resp = client.post(BASE, json=student_payload(first_name="J"))

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["data"] == {"kind": "VALIDATION", "field": "First name"}


def test_create_without_phone_is_bad_request(client):
    payload = student_payload()
    del payload["phone_number"]

    resp = client.post(BASE, json=payload)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Phone number cannot be empty"


def test_create_with_unknown_status_is_bad_request(client):
    resp = client.post(BASE, json=student_payload(enrollment_status="Expelled"))

    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Validation failed"
    assert "enrollment_status" in body["data"]


def test_create_missing_required_field_is_bad_request(client):
    resp = client.post(BASE, json={"first_name": "John"})

    assert resp.status_code == 400
    assert {"last_name", "email"} <= set(resp.json()["data"])


# --- read ---

def test_get_student(client):
    created = create(client)

    resp = client.get(f"{BASE}/{created['id']}")

    assert resp.status_code == 200
    assert resp.json()["data"]["email"] == "john@x.com"
    assert resp.headers["X-Request-ID"]


def test_get_missing_student_is_not_found(client):
    resp = client.get(f"{BASE}/999")

    assert resp.status_code == 404
    assert resp.json() == {
        "success": False,
        "message": "Student not found with ID: 999",
        "timestamp": resp.json()["timestamp"],
    }


def test_get_non_positive_id_is_bad_request(client):
    resp = client.get(f"{BASE}/0")

    assert resp.status_code == 400
    assert resp.json()["data"]["kind"] == "INVALID_ARGUMENT"


def test_list_students_paginates(client):
    for i in range(5):
        create(client, email=f"s{i}@x.com")

    resp = client.get(BASE, params={"page": 1, "size": 2})

    assert resp.status_code == 200
    page = resp.json()["data"]
    assert page["page"] == 1
    assert page["size"] == 2
    assert page["total_elements"] == 5
    assert page["total_pages"] == 3
    assert [s["email"] for s in page["content"]] == ["s2@x.com", "s3@x.com"]


def test_list_students_empty(client):
    page = client.get(BASE).json()["data"]

    assert page["content"] == []
    assert page["total_pages"] == 0


# --- search ---

def test_search_endpoints(client):
    create(client, first_name="John", last_name="Smith", email="john@x.com")
    create(client, first_name="Jane", last_name="Smith", email="jane@x.com",
           enrollment_status="Inactive")
    create(client, first_name="Mike", last_name="Johnson", email="mike@x.com")

    first = client.get(f"{BASE}/search/first-name", params={"name": "john"}).json()["data"]
    assert [s["email"] for s in first] == ["john@x.com"]

    last = client.get(f"{BASE}/search/last-name", params={"name": "SMITH"}).json()["data"]
    assert len(last) == 2

    by_email = client.get(f"{BASE}/search/email", params={"email": "Mike@x.com"}).json()["data"]
    assert by_email["first_name"] == "Mike"

    by_name = client.get(f"{BASE}/search/name", params={"name": "john"}).json()["data"]
    assert by_name["total_elements"] == 2

    by_status = client.get(f"{BASE}/search/status", params={"status": "inactive"})
    assert by_status.json()["message"] == "Students with status: Inactive"
    assert [s["email"] for s in by_status.json()["data"]["content"]] == ["jane@x.com"]


def test_search_email_not_found(client):
    resp = client.get(f"{BASE}/search/email", params={"email": "nobody@x.com"})

    assert resp.status_code == 404


def test_search_blank_term_is_bad_request(client):
    resp = client.get(f"{BASE}/search/first-name", params={"name": "  "})

    assert resp.status_code == 400
    assert resp.json()["message"] == "First name cannot be empty"


def test_search_unknown_status_is_bad_request(client):
    resp = client.get(f"{BASE}/search/status", params={"status": "Expelled"})

    assert resp.status_code == 400
    assert resp.json()["data"]["kind"] == "VALIDATION"


# --- update ---

def test_update_student(client):
    created = create(client)

    resp = client.put(f"{BASE}/{created['id']}",
                      json=student_payload(last_name="Dover", enrollment_status="Graduated"))

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["last_name"] == "Dover"
    assert data["status"] == "Graduated"


def test_update_missing_student_is_not_found(client):
    resp = client.put(f"{BASE}/42", json=student_payload())

    assert resp.status_code == 404


def test_update_to_taken_email_is_conflict(client):
    create(client, email="john@x.com")
    jane = create(client, first_name="Jane", email="jane@x.com")

    resp = client.put(f"{BASE}/{jane['id']}", json=student_payload(first_name="Jane", email="john@x.com"))

    assert resp.status_code == 409
    assert client.get(f"{BASE}/{jane['id']}").json()["data"]["email"] == "jane@x.com"


# --- delete ---

def test_delete_student(client):
    created = create(client)

    resp = client.delete(f"{BASE}/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["message"] == "Student deleted successfully"
    assert "data" not in resp.json()

    assert client.get(f"{BASE}/{created['id']}").status_code == 404
    assert client.delete(f"{BASE}/{created['id']}").status_code == 404


# --- aggregates ---

def test_count_and_statistics(client):
    create(client, email="a@x.com")
    create(client, email="b@x.com", enrollment_status="Suspended")

    assert client.get(f"{BASE}/count").json()["data"] == {"count": 2}

    stats = client.get(f"{BASE}/statistics").json()["data"]
    assert stats == {
        "total_students": 2,
        "active_students": 1,
        "inactive_students": 0,
        "suspended_students": 1,
        "graduated_students": 0,
        "average_gpa": None,
        "highest_gpa": None,
        "lowest_gpa": None,
    }


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert resp.json()["store"] == "memory"


# --- GPA ---

def test_create_and_update_gpa(client):
    created = create(client, gpa=3.25)
    assert created["gpa"] == 3.25

    resp = client.put(f"{BASE}/{created['id']}", json=student_payload(gpa=3.75))

    assert resp.json()["data"]["gpa"] == 3.75


def test_create_with_out_of_range_gpa_is_bad_request(client):
    resp = client.post(BASE, json=student_payload(gpa=4.5))

    assert resp.status_code == 400
    assert resp.json()["data"] == {"kind": "VALIDATION", "field": "GPA"}


def test_search_by_gpa_range(client):
    create(client, email="a@x.com", gpa=2.0)
    create(client, email="b@x.com", gpa=3.8)
    create(client, email="c@x.com", gpa=3.1)

    resp = client.get(f"{BASE}/search/gpa", params={"min_gpa": 3.0, "max_gpa": 4.0})

    assert resp.status_code == 200
    assert resp.json()["message"] == "GPA Range: 3.0 - 4.0"
    assert [s["email"] for s in resp.json()["data"]["content"]] == ["b@x.com", "c@x.com"]


def test_search_by_gpa_range_with_inverted_bounds_is_bad_request(client):
    resp = client.get(f"{BASE}/search/gpa", params={"min_gpa": 3.5, "max_gpa": 2.0})

    assert resp.status_code == 400
    assert resp.json()["data"]["kind"] == "INVALID_ARGUMENT"


def test_statistics_include_gpa_figures(client):
    create(client, email="a@x.com", gpa=3.0)
    create(client, email="b@x.com", gpa=4.0)

    stats = client.get(f"{BASE}/statistics").json()["data"]

    assert stats["average_gpa"] == 3.5
    assert stats["highest_gpa"] == 4.0
    assert stats["lowest_gpa"] == 3.0

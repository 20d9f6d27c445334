import io

from fitdesk.extensions import db
from fitdesk.models import Student, StudentNote


def test_create_student_requires_full_name(client, owner_headers):
    response = client.post("/api/students", headers=owner_headers, json={"email": "x@mail.pt"})

    assert response.status_code == 400
    assert response.get_json()["msg"] == "Full name is required"


def test_create_and_list_students(client, owner_headers, company):
    response = client.post("/api/students", headers=owner_headers, json={
        "full_name": "  Carla Mendes ",
        "email": "carla@mail.pt",
        "nif": "123456789",
        "birth_date": "1990-02-01",
    })
    assert response.status_code == 201
    created = response.get_json()["student"]
    assert created["full_name"] == "Carla Mendes"
    assert created["status"] == "active"
    assert created["registration_method"] == "company_added"

    listed = client.get("/api/students?search=carla", headers=owner_headers).get_json()
    assert [s["id"] for s in listed] == [created["id"]]


def test_invalid_nif_is_rejected(client, owner_headers):
    response = client.post("/api/students", headers=owner_headers,
                           json={"full_name": "Carla Mendes", "nif": "12AB"})

    assert response.status_code == 400
    assert "nif" in response.get_json()["errors"]


def test_students_of_other_company_are_hidden(client, owner_headers, other_company):
    stranger = Student(company=other_company, full_name="Outsider", status="active")
    db.session.add(stranger)
    db.session.commit()

    assert client.get(f"/api/students/{stranger.id}", headers=owner_headers).status_code == 404
    assert client.get("/api/students", headers=owner_headers).get_json() == []


def test_delete_requires_confirmation(client, owner_headers, make_student):
    student = make_student()

    response = client.delete(f"/api/students/{student.id}", headers=owner_headers)
    assert response.status_code == 409
    assert response.get_json()["code"] == "confirmation_required"
    assert db.session.get(Student, student.id) is not None

    response = client.delete(f"/api/students/{student.id}?confirm=true", headers=owner_headers)
    assert response.status_code == 200
    assert db.session.get(Student, student.id) is None


def test_blocking_requires_reason(client, owner_headers, make_student):
    student = make_student()

    response = client.post(f"/api/students/{student.id}/status", headers=owner_headers, json={"status": "blocked"})
    assert response.status_code == 400

    response = client.post(f"/api/students/{student.id}/status", headers=owner_headers,
                           json={"status": "blocked", "reason": "Unpaid fees"})
    assert response.status_code == 200
    assert response.get_json()["status_label"] == "Blocked"
    assert student.block_reason == "Unpaid fees"
    assert student.blocked_at is not None


def test_reactivating_clears_block(client, owner_headers, make_student):
    student = make_student(status="blocked", block_reason="Unpaid fees")

    client.post(f"/api/students/{student.id}/status", headers=owner_headers, json={"status": "active"})

    assert student.status == "active"
    assert student.block_reason is None


def test_approve_pending_student(client, owner_headers, make_student):
    student = make_student(email="luis@mail.pt", status="pending_approval", with_login=True)

    response = client.post(f"/api/students/{student.id}/approve", headers=owner_headers)

    assert response.status_code == 200
    assert student.status == "active"
    assert student.user.notifications.count() == 1


def test_trainer_without_delete_permission(client, trainer_headers, make_student):
    student = make_student()

    assert client.get("/api/students", headers=trainer_headers).status_code == 200
    response = client.delete(f"/api/students/{student.id}?confirm=true", headers=trainer_headers)
    assert response.status_code == 403


def test_student_cannot_use_company_routes(client, student_headers):
    assert client.get("/api/students", headers=student_headers).status_code == 403


def test_import_students_from_csv(client, owner_headers, company):
    content = (
        "full_name,email,birth_date,nif\n"
        "Bruno Dias,bruno@mail.pt,03/04/1988,111222333\n"
        ",missing@mail.pt,,\n"
    )
    response = client.post(
        "/api/students/import",
        headers=owner_headers,
        data={"file": (io.BytesIO(content.encode("utf-8")), "students.csv")},
        content_type="multipart/form-data",
    )

    body = response.get_json()
    assert response.status_code == 200
    assert body["created"] == 1
    assert body["errors"] == [{"row": 3, "msg": "Full name is required"}]
    imported = Student.query.filter_by(email="bruno@mail.pt").one()
    assert imported.registration_method == "company_added"
    assert imported.birth_date.isoformat() == "1988-04-03"


def test_export_students_csv(client, owner_headers, make_student):
    make_student(full_name="Bruno Dias", email="bruno@mail.pt")

    response = client.get("/api/students/export", headers=owner_headers)

    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    text = response.get_data(as_text=True)
    assert "Bruno Dias" in text
    assert "Active" in text


def test_anamnesis_computes_bmi(client, owner_headers, make_student):
    student = make_student()

    empty = client.get(f"/api/students/{student.id}/anamnesis", headers=owner_headers).get_json()
    assert empty["bmi"] is None
    assert empty["has_diabetes"] is False

    response = client.put(f"/api/students/{student.id}/anamnesis", headers=owner_headers,
                          json={"height_cm": 180, "weight_kg": 81, "stress_level": "moderate"})
    anamnesis = response.get_json()["anamnesis"]
    assert anamnesis["bmi"] == 25.0
    assert anamnesis["bmi_category"] == "overweight"


def test_private_notes_are_only_visible_to_author(client, owner_headers, trainer_headers, make_student):
    student = make_student()

    client.post(f"/api/students/{student.id}/notes", headers=owner_headers,
                json={"content": "Shared note"})
    client.post(f"/api/students/{student.id}/notes", headers=owner_headers,
                json={"content": "Owner only", "is_private": True})

    owner_notes = client.get(f"/api/students/{student.id}/notes", headers=owner_headers).get_json()
    trainer_notes = client.get(f"/api/students/{student.id}/notes", headers=trainer_headers).get_json()
    assert len(owner_notes) == 2
    assert [n["content"] for n in trainer_notes] == ["Shared note"]


def test_only_author_edits_note(client, owner_headers, trainer_headers, make_student):
    student = make_student()
    created = client.post(f"/api/students/{student.id}/notes", headers=owner_headers,
                          json={"content": "Owner note"}).get_json()["note"]

    response = client.put(f"/api/students/{student.id}/notes/{created['id']}", headers=trainer_headers,
                          json={"content": "Changed"})

    assert response.status_code == 403
    assert db.session.get(StudentNote, created["id"]).content == "Owner note"


def test_upload_document_and_download_signed_url(client, owner_headers, make_student):
    student = make_student()

    response = client.post(
        f"/api/students/{student.id}/documents",
        headers=owner_headers,
        data={"file": (io.BytesIO(b"%PDF-1.4 test"), "medical.pdf", "application/pdf"), "description": "Medical"},
        content_type="multipart/form-data",
    )
    assert response.status_code == 201
    document = response.get_json()["document"]

    url = client.get(f"/api/students/{student.id}/documents/{document['id']}/url",
                     headers=owner_headers).get_json()["url"]
    download = client.get(url.replace("http://localhost", ""))
    assert download.status_code == 200
    assert download.data == b"%PDF-1.4 test"


def test_upload_rejects_disallowed_type(client, owner_headers, make_student):
    student = make_student()

    response = client.post(
        f"/api/students/{student.id}/documents",
        headers=owner_headers,
        data={"file": (io.BytesIO(b"echo hi"), "script.sh", "application/x-sh")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 400
    assert response.get_json()["msg"] == "File type not allowed"


def test_tampered_download_token(client):
    assert client.get("/api/files/not-a-token").status_code == 404


def test_upload_over_five_megabytes_is_rejected(client, owner_headers, make_student):
    student = make_student()
    content = b"%PDF-1.4" + b"0" * (5 * 1024 * 1024)

    response = client.post(
        f"/api/students/{student.id}/documents",
        headers=owner_headers,
        data={"file": (io.BytesIO(content), "scan.pdf", "application/pdf")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 400
    assert response.get_json()["msg"] == "File exceeds the maximum size of 5MB"
    assert student.documents.count() == 0


def test_expired_download_link(app, client, owner_headers, make_student):
    student = make_student()
    document = client.post(
        f"/api/students/{student.id}/documents",
        headers=owner_headers,
        data={"file": (io.BytesIO(b"%PDF-1.4 test"), "medical.pdf", "application/pdf")},
        content_type="multipart/form-data",
    ).get_json()["document"]
    url = client.get(f"/api/students/{student.id}/documents/{document['id']}/url",
                     headers=owner_headers).get_json()["url"]

    app.config["SIGNED_URL_EXPIRES"] = -1
    response = client.get(url.replace("http://localhost", ""))

    assert response.status_code == 410
    assert response.get_json()["msg"] == "Link has expired"

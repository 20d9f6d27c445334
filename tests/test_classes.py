from datetime import date, timedelta

import pytest

from fitdesk.extensions import db
from fitdesk.models import ClassSchedule, GymClass


@pytest.fixture
def yoga(company):
    gym_class = GymClass(company_id=company.id, name="Yoga", capacity=2, duration_minutes=45)
    db.session.add(gym_class)
    db.session.commit()
    return gym_class


def _schedule(client, headers, gym_class, when=None, start="18:00"):
    when = when or date.today() + timedelta(days=1)
    return client.post("/api/schedules", headers=headers, json={
        "class_id": gym_class.id,
        "scheduled_date": when.isoformat(),
        "start_time": start,
    })


def test_schedule_uses_class_duration(client, trainer_headers, yoga):
    response = _schedule(client, trainer_headers, yoga)

    assert response.status_code == 201
    schedule = response.get_json()["schedule"]
    assert schedule["end_time"] == "18:45"
    assert schedule["available_spots"] == 2


def test_duplicate_schedule_is_rejected(client, trainer_headers, yoga):
    _schedule(client, trainer_headers, yoga)

    assert _schedule(client, trainer_headers, yoga).status_code == 409


def test_generate_fixed_schedule(client, owner_headers):
    created = client.post("/api/class-types", headers=owner_headers, json={
        "name": "Spinning",
        "has_fixed_schedule": True,
        "schedule_days": [0, 2],
        "default_start_time": "07:00",
        "default_end_time": "08:00",
    })
    assert created.status_code == 201
    class_id = created.get_json()["class"]["id"]

    payload = {"class_id": class_id, "start_date": "2026-03-02", "end_date": "2026-03-15"}
    response = client.post("/api/schedules/generate", headers=owner_headers, json=payload)
    assert response.status_code == 201
    dates = sorted(s["scheduled_date"] for s in response.get_json()["schedules"])
    assert dates == ["2026-03-02", "2026-03-04", "2026-03-09", "2026-03-11"]

    again = client.post("/api/schedules/generate", headers=owner_headers, json=payload)
    assert again.get_json()["created"] == 0


def test_fixed_schedule_needs_days(client, owner_headers):
    response = client.post("/api/class-types", headers=owner_headers, json={
        "name": "Spinning",
        "has_fixed_schedule": True,
        "default_start_time": "07:00",
        "default_end_time": "08:00",
    })

    assert response.status_code == 400


def test_partial_update_keeps_fixed_schedule_complete(client, owner_headers):
    created = client.post("/api/class-types", headers=owner_headers, json={
        "name": "Spinning",
        "has_fixed_schedule": True,
        "schedule_days": [0, 2],
        "default_start_time": "07:00",
        "default_end_time": "08:00",
    })
    class_id = created.get_json()["class"]["id"]

    cleared = client.put(f"/api/class-types/{class_id}", headers=owner_headers, json={"default_end_time": None})
    assert cleared.status_code == 400
    earlier = client.put(f"/api/class-types/{class_id}", headers=owner_headers, json={"default_end_time": "06:30"})
    assert earlier.status_code == 400
    assert db.session.get(GymClass, class_id).default_end_time.isoformat() == "08:00:00"

    renamed = client.put(f"/api/class-types/{class_id}", headers=owner_headers, json={"name": "Spin"})
    assert renamed.status_code == 200


def test_enrolment_respects_capacity(client, trainer_headers, yoga, make_student):
    schedule_id = _schedule(client, trainer_headers, yoga).get_json()["schedule"]["id"]
    students = [make_student(full_name=f"Student {i}") for i in range(3)]

    statuses = [
        client.post(f"/api/schedules/{schedule_id}/enrollments", headers=trainer_headers,
                    json={"student_id": s.id}).status_code
        for s in students
    ]

    assert statuses == [201, 201, 409]
    assert db.session.get(ClassSchedule, schedule_id).available_spots == 0


def test_student_books_and_cancels(client, trainer_headers, student_headers, yoga):
    schedule_id = _schedule(client, trainer_headers, yoga).get_json()["schedule"]["id"]

    bookable = client.get("/api/portal/classes", headers=student_headers).get_json()
    assert [c["id"] for c in bookable] == [schedule_id]
    assert bookable[0]["is_booked"] is False

    assert client.post(f"/api/portal/classes/{schedule_id}/book", headers=student_headers).status_code == 201
    assert client.post(f"/api/portal/classes/{schedule_id}/book", headers=student_headers).status_code == 409
    assert len(client.get("/api/portal/bookings", headers=student_headers).get_json()) == 1

    assert client.post(f"/api/portal/classes/{schedule_id}/cancel", headers=student_headers).status_code == 200
    assert client.get("/api/portal/bookings", headers=student_headers).get_json() == []

    rebook = client.post(f"/api/portal/classes/{schedule_id}/book", headers=student_headers)
    assert rebook.status_code == 201


def test_past_classes_cannot_be_booked(client, trainer_headers, student_headers, yoga):
    yesterday = date.today() - timedelta(days=1)
    schedule_id = _schedule(client, trainer_headers, yoga, when=yesterday).get_json()["schedule"]["id"]

    response = client.post(f"/api/portal/classes/{schedule_id}/book", headers=student_headers)

    assert response.status_code == 400


def test_cancelling_class_cancels_enrolments(client, trainer_headers, student_headers, yoga):
    schedule_id = _schedule(client, trainer_headers, yoga).get_json()["schedule"]["id"]
    client.post(f"/api/portal/classes/{schedule_id}/book", headers=student_headers)

    response = client.post(f"/api/schedules/{schedule_id}/cancel", headers=trainer_headers)

    assert response.status_code == 200
    assert response.get_json()["schedule"]["enrolled_count"] == 0


def test_mark_attendance(client, trainer_headers, yoga, student):
    schedule_id = _schedule(client, trainer_headers, yoga).get_json()["schedule"]["id"]
    enrollment = client.post(f"/api/schedules/{schedule_id}/enrollments", headers=trainer_headers,
                             json={"student_id": student.id}).get_json()["enrollment"]

    response = client.put(f"/api/enrollments/{enrollment['id']}/attendance", headers=trainer_headers,
                          json={"attended": True})

    assert response.status_code == 200
    assert response.get_json()["enrollment"]["attended"] is True

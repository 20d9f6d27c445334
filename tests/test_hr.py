from datetime import date, datetime, time

import pytest

from fitdesk.extensions import db
from fitdesk.models import ClassSchedule, GymClass, StaffPaymentConfig
from fitdesk.services.billing import create_subscription
from fitdesk.services.hr import calculate_payroll, payroll_item

# 2026-03-02 is a Monday
WEEK_START = date(2026, 3, 2)
WEEK_END = date(2026, 3, 8)
MORNINGS = [{"day_of_week": day, "start_time": "09:00", "end_time": "13:00"} for day in range(5)]


@pytest.fixture
def pay(trainer):
    def _pay(payment_type, **rates):
        config = StaffPaymentConfig(staff=trainer, payment_type=payment_type, **rates)
        db.session.add(config)
        db.session.commit()
        return config
    return _pay


def _absence(client, headers, trainer, start, end, absence_type="vacation"):
    return client.post("/api/absences", headers=headers, json={
        "staff_id": trainer.id,
        "absence_type": absence_type,
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
    })


def test_work_schedule_replace(client, owner_headers, trainer):
    response = client.put(f"/api/staff/{trainer.id}/work-schedule", headers=owner_headers,
                          json={"contract_type": "part_time", "days": MORNINGS})

    assert response.status_code == 200
    schedule = response.get_json()["schedule"]
    assert schedule["scheduled_hours"] == 20
    assert schedule["weekly_hours"] == 20
    assert [d["day_of_week"] for d in schedule["days"]] == [0, 1, 2, 3, 4]

    again = client.put(f"/api/staff/{trainer.id}/work-schedule", headers=owner_headers,
                       json={"days": [{"day_of_week": 5, "start_time": "08:00", "end_time": "12:30"}]})
    assert again.status_code == 200
    assert again.get_json()["schedule"]["scheduled_hours"] == 4.5
    assert len(trainer.work_schedule) == 1


def test_work_schedule_rejects_repeated_day(client, owner_headers, trainer):
    days = [MORNINGS[0], dict(MORNINGS[0], start_time="14:00", end_time="18:00")]

    response = client.put(f"/api/staff/{trainer.id}/work-schedule", headers=owner_headers, json={"days": days})

    assert response.status_code == 400


def test_work_schedule_end_after_start(client, owner_headers, trainer):
    response = client.put(f"/api/staff/{trainer.id}/work-schedule", headers=owner_headers,
                          json={"days": [{"day_of_week": 0, "start_time": "13:00", "end_time": "09:00"}]})

    assert response.status_code == 400


def test_overlapping_absence_is_refused(client, owner_headers, trainer):
    first = _absence(client, owner_headers, trainer, date(2026, 8, 3), date(2026, 8, 14))
    assert first.status_code == 201
    assert first.get_json()["absence"]["total_days"] == 12

    overlap = _absence(client, owner_headers, trainer, date(2026, 8, 10), date(2026, 8, 20))
    assert overlap.status_code == 409

    absence_id = first.get_json()["absence"]["id"]
    client.post(f"/api/absences/{absence_id}/reject", headers=owner_headers)
    assert _absence(client, owner_headers, trainer, date(2026, 8, 10), date(2026, 8, 20)).status_code == 201


def test_absence_is_reviewed_once(client, owner_headers, trainer):
    absence_id = _absence(client, owner_headers, trainer, date(2026, 8, 3), date(2026, 8, 4)).get_json()["absence"]["id"]

    approved = client.post(f"/api/absences/{absence_id}/approve", headers=owner_headers)
    assert approved.status_code == 200
    assert approved.get_json()["absence"]["status"] == "approved"
    assert client.post(f"/api/absences/{absence_id}/reject", headers=owner_headers).status_code == 409


def test_leave_balance_counts_approved_days(client, owner_headers, trainer):
    client.put(f"/api/staff/{trainer.id}/leave-balance", headers=owner_headers,
               json={"year": 2026, "vacation_days_entitled": 25})
    vacation = _absence(client, owner_headers, trainer, date(2026, 8, 3), date(2026, 8, 7)).get_json()["absence"]
    client.post(f"/api/absences/{vacation['id']}/approve", headers=owner_headers)
    # pending absences do not count
    _absence(client, owner_headers, trainer, date(2026, 9, 1), date(2026, 9, 1), "personal")

    balance = client.get(f"/api/staff/{trainer.id}/leave-balance?year=2026", headers=owner_headers).get_json()

    assert balance["vacation_days_entitled"] == 25
    assert balance["vacation_days_used"] == 5
    assert balance["vacation_days_remaining"] == 20
    assert balance["personal_days_used"] == 0
    assert balance["personal_days_remaining"] == 2


def test_hourly_payroll_skips_approved_absences(client, owner_headers, trainer, pay):
    pay("hourly", hourly_rate=10)
    client.put(f"/api/staff/{trainer.id}/work-schedule", headers=owner_headers, json={"days": MORNINGS})
    sick = _absence(client, owner_headers, trainer, date(2026, 3, 4), date(2026, 3, 4), "sick").get_json()["absence"]
    client.post(f"/api/absences/{sick['id']}/approve", headers=owner_headers)

    response = client.get(
        f"/api/payroll?start_date={WEEK_START.isoformat()}&end_date={WEEK_END.isoformat()}&staff_id={trainer.id}",
        headers=owner_headers,
    )

    assert response.status_code == 200
    body = response.get_json()
    item = body["items"][0]
    assert item["days_worked"] == 4
    assert item["hours_worked"] == 16
    assert item["hours_value"] == 160.0
    assert body["total"] == 160.0


def test_per_class_payroll_counts_given_classes(trainer, pay):
    pay("per_class", per_class_rate=15)
    spinning = GymClass(company_id=trainer.company_id, name="Spinning")
    db.session.add(spinning)
    for day, status in ((2, "completed"), (3, "scheduled"), (4, "cancelled"), (6, "scheduled")):
        db.session.add(ClassSchedule(gym_class=spinning, instructor_id=trainer.id, status=status,
                                     scheduled_date=date(2026, 3, day), start_time=time(18), end_time=time(19)))
    db.session.commit()

    # the class on the 6th has not happened yet
    item = payroll_item(trainer, WEEK_START, WEEK_END, today=date(2026, 3, 5))

    assert item["classes_count"] == 2
    assert item["classes_value"] == 30.0
    assert item["total"] == 30.0


def test_commission_payroll_from_trainer_students(trainer, pay, plan, make_student):
    pay("commission", commission_percentage=10)
    client_student = make_student(full_name="Bruno Dias", personal_trainer_id=trainer.id)
    subscription = create_subscription(client_student, plan, start_date=date(2026, 3, 2), commitment_months=2)
    db.session.flush()
    first, second = subscription.payments.all()
    first.status, first.paid_at = "paid", datetime(2026, 3, 3, 10, 0)
    second.status, second.paid_at = "paid", datetime(2026, 4, 2, 10, 0)
    db.session.commit()

    result = calculate_payroll([trainer], WEEK_START, WEEK_END)

    assert result["items"][0]["commission"] == 3.5
    assert result["total"] == 3.5


def test_payroll_period_is_limited(client, owner_headers):
    response = client.get("/api/payroll?start_date=2026-01-01&end_date=2026-12-31", headers=owner_headers)

    assert response.status_code == 400


def test_trainer_cannot_see_payroll(client, trainer_headers):
    response = client.get("/api/payroll?start_date=2026-03-01&end_date=2026-03-31", headers=trainer_headers)

    assert response.status_code == 403

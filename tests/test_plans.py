from fitdesk.models import TrainingPlan


def _create_training_plan(client, headers, student, title="Hypertrophy"):
    response = client.post(f"/api/students/{student.id}/training-plans", headers=headers, json={"title": title})
    assert response.status_code == 201
    return response.get_json()["plan"]


def test_training_plan_has_week_with_sunday_rest(client, trainer_headers, student):
    plan = _create_training_plan(client, trainer_headers, student)

    assert [d["day_of_week"] for d in plan["days"]] == list(range(7))
    sunday = plan["days"][6]
    assert sunday["day_name"] == "Sunday"
    assert sunday["is_rest_day"] is True
    assert sunday["title"] == "Rest"
    assert not any(d["is_rest_day"] for d in plan["days"][:6])


def test_only_one_active_training_plan(client, trainer_headers, student):
    first = _create_training_plan(client, trainer_headers, student, "Block A")
    second = _create_training_plan(client, trainer_headers, student, "Block B")

    plans = client.get(f"/api/students/{student.id}/training-plans", headers=trainer_headers).get_json()

    assert plans[0]["id"] == second["id"]
    assert [p["is_active"] for p in plans] == [True, False]

    client.post(f"/api/training-plans/{first['id']}/toggle-active", headers=trainer_headers)
    assert TrainingPlan.query.filter_by(student_id=student.id, is_active=True).one().id == first["id"]


def test_exercises_are_appended_in_order(client, trainer_headers, student):
    plan = _create_training_plan(client, trainer_headers, student)
    monday = plan["days"][0]["id"]

    for name in ("Squat", "Bench press"):
        response = client.post(f"/api/training-days/{monday}/exercises", headers=trainer_headers,
                               json={"exercise_name": name, "sets": 4, "reps": "8-10", "muscle_group": "quadriceps"})
        assert response.status_code == 201

    day = client.get(f"/api/training-plans/{plan['id']}", headers=trainer_headers).get_json()["days"][0]
    assert [(e["exercise_name"], e["sort_order"]) for e in day["exercises"]] == [("Squat", 0), ("Bench press", 1)]


def test_toggle_rest_day(client, trainer_headers, student):
    plan = _create_training_plan(client, trainer_headers, student)
    tuesday = plan["days"][1]["id"]

    response = client.post(f"/api/training-days/{tuesday}/toggle-rest", headers=trainer_headers)

    assert response.get_json()["day"]["is_rest_day"] is True


def test_training_plan_end_before_start(client, trainer_headers, student):
    response = client.post(f"/api/students/{student.id}/training-plans", headers=trainer_headers, json={
        "title": "Bad dates",
        "start_date": "2026-05-10",
        "end_date": "2026-05-01",
    })

    assert response.status_code == 400
    assert response.get_json()["msg"] == "End date must be after start date"


def test_nutrition_day_totals_and_progress(client, trainer_headers, student):
    response = client.post(f"/api/students/{student.id}/nutrition-plans", headers=trainer_headers,
                           json={"title": "Cutting"})
    assert response.status_code == 201
    day = response.get_json()["plan"]["days"][0]
    assert day["target_calories"] == 2000

    client.post(f"/api/nutrition-days/{day['id']}/meals", headers=trainer_headers, json={
        "meal_type": "breakfast",
        "meal_time": "08:00",
        "foods": [{"name": "Oats", "quantity": "80g"}, {"name": "Milk"}],
        "calories": 450, "protein": 20, "carbs": 60, "fat": 12.5,
    })
    client.post(f"/api/nutrition-days/{day['id']}/meals", headers=trainer_headers, json={
        "meal_type": "lunch", "calories": 550, "protein": 55, "carbs": 40, "fat": 15,
    })

    totals = client.get(f"/api/nutrition-days/{day['id']}/totals", headers=trainer_headers).get_json()
    assert totals["totals"] == {"calories": 1000.0, "protein": 75.0, "carbs": 100.0, "fat": 27.5}
    assert totals["target_progress"]["calories"] == 50
    assert totals["target_progress"]["protein"] == 50


def test_meal_type_is_validated(client, trainer_headers, student):
    plan = client.post(f"/api/students/{student.id}/nutrition-plans", headers=trainer_headers,
                       json={"title": "Cutting"}).get_json()["plan"]

    response = client.post(f"/api/nutrition-days/{plan['days'][0]['id']}/meals", headers=trainer_headers,
                           json={"meal_type": "brunch"})

    assert response.status_code == 400


def test_student_sees_active_plan_first(client, trainer_headers, student, student_headers):
    _create_training_plan(client, trainer_headers, student, "Old")
    _create_training_plan(client, trainer_headers, student, "Current")

    plans = client.get("/api/portal/training", headers=student_headers).get_json()

    assert [p["title"] for p in plans] == ["Current", "Old"]


def test_exercise_library(client, trainer_headers, owner_headers):
    response = client.post("/api/exercise-library", headers=owner_headers,
                           json={"name": "Deadlift", "muscle_group": "back"})
    assert response.status_code == 201

    library = client.get("/api/exercise-library", headers=trainer_headers).get_json()
    assert [e["name"] for e in library] == ["Deadlift"]

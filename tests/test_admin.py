def test_admin_lists_companies(client, admin, headers_for, company, other_company):
    response = client.get("/api/admin/companies", headers=headers_for(admin))

    assert response.status_code == 200
    assert {c["name"] for c in response.get_json()} == {"Gym One", "Gym Two"}


def test_owner_cannot_use_admin_routes(client, owner_headers):
    response = client.get("/api/admin/companies", headers=owner_headers)

    assert response.status_code == 403


def test_blocked_company_loses_access(client, admin, headers_for, company, owner_headers):
    response = client.post(f"/api/admin/companies/{company.id}/block", headers=headers_for(admin),
                           json={"reason": "Unpaid platform fee"})
    assert response.status_code == 200

    students = client.get("/api/students", headers=owner_headers)
    assert students.status_code == 403
    assert students.get_json()["code"] == "company_blocked"

    client.post(f"/api/admin/companies/{company.id}/unblock", headers=headers_for(admin))
    assert client.get("/api/students", headers=owner_headers).status_code == 200


def test_block_requires_reason(client, admin, headers_for, company):
    response = client.post(f"/api/admin/companies/{company.id}/block", headers=headers_for(admin), json={})

    assert response.status_code == 400
    assert company.is_blocked is not True


def test_extend_trial_by_days(client, admin, headers_for, company):
    before = company.trial_days_left

    response = client.put(f"/api/admin/companies/{company.id}/trial", headers=headers_for(admin),
                          json={"extra_days": 10})

    assert response.status_code == 200
    assert response.get_json()["company"]["trial_days_left"] >= before + 9

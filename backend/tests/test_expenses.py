def test_create_expense_defaults_to_everyone(client, picnic):
    res = client.post(f"/api/projects/{picnic}/expenses", json={
        "description": "Lunch", "amount": 45.0, "paid_by": "Alice",
    })
    assert res.status_code == 200
    data = res.json()
    assert data["amount"] == 45.0
    assert data["paid_by"] == "Alice"
    assert data["participants"] == ["Alice", "Bob", "Carol"]
    assert data["project_id"] == picnic


def test_create_expense_with_explicit_participants(client, picnic):
    res = client.post(f"/api/projects/{picnic}/expenses", json={
        "description": "Taxi", "amount": 20.0, "paid_by": "Bob", "participants": ["Carol", "Bob", "Carol"],
    })
    assert res.status_code == 200
    assert res.json()["participants"] == ["Bob", "Carol"]


def test_create_expense_for_group(client, picnic):
    gid = client.post(f"/api/projects/{picnic}/groups", json={"name": "Kids", "members": ["Bob", "Carol"]}).json()["id"]
    res = client.post(f"/api/projects/{picnic}/expenses", json={
        "description": "Ice cream", "amount": 8.0, "paid_by": "Alice", "group_id": gid,
    })
    assert res.status_code == 200
    assert res.json()["participants"] == ["Bob", "Carol"]


def test_expense_validation(client, picnic):
    base = {"description": "Cake", "amount": 10.0, "paid_by": "Alice"}
    url = f"/api/projects/{picnic}/expenses"
    assert client.post(url, json={**base, "description": "  "}).status_code == 400
    assert client.post(url, json={**base, "amount": 0}).status_code == 400
    assert client.post(url, json={**base, "amount": -5}).status_code == 400
    assert client.post(url, json={**base, "paid_by": "Mallory"}).status_code == 400
    assert client.post(url, json={**base, "participants": []}).status_code == 400
    assert client.post(url, json={**base, "participants": ["Mallory"]}).status_code == 400
    assert client.post(url, json={**base, "group_id": 9999}).status_code == 404
    assert client.get(url).json() == []


def test_expense_needs_attendees(client, project_id):
    res = client.post(f"/api/projects/{project_id}/expenses", json={
        "description": "Cake", "amount": 10.0, "paid_by": "Alice",
    })
    assert res.status_code == 400


def test_update_expense(client, picnic):
    eid = client.post(f"/api/projects/{picnic}/expenses", json={
        "description": "Old", "amount": 25.0, "paid_by": "Alice",
    }).json()["id"]
    res = client.patch(f"/api/projects/{picnic}/expenses/{eid}", json={
        "description": "Updated", "amount": 30.0, "paid_by": "Carol", "participants": ["Alice"],
    })
    assert res.status_code == 200
    data = res.json()
    assert data["description"] == "Updated"
    assert data["amount"] == 30.0
    assert data["paid_by"] == "Carol"
    assert data["participants"] == ["Alice"]


def test_update_expense_rejects_bad_amount(client, picnic):
    eid = client.post(f"/api/projects/{picnic}/expenses", json={
        "description": "Old", "amount": 25.0, "paid_by": "Alice",
    }).json()["id"]
    res = client.patch(f"/api/projects/{picnic}/expenses/{eid}", json={"amount": 0})
    assert res.status_code == 400
    assert client.get(f"/api/projects/{picnic}/expenses/{eid}").json()["amount"] == 25.0


def test_delete_expense(client, picnic):
    eid = client.post(f"/api/projects/{picnic}/expenses", json={
        "description": "Del", "amount": 10.0, "paid_by": "Alice",
    }).json()["id"]
    res = client.delete(f"/api/projects/{picnic}/expenses/{eid}")
    assert res.status_code == 204
    assert client.get(f"/api/projects/{picnic}/expenses/{eid}").status_code == 404


def test_fast_entry(client, picnic):
    res = client.post(f"/api/projects/{picnic}/expenses/fast-entry", json={"text": "Pizza, 36, Bob"})
    assert res.status_code == 200
    data = res.json()
    assert data["expense"]["description"] == "Pizza"
    assert data["expense"]["amount"] == 36.0
    assert data["expense"]["paid_by"] == "Bob"
    assert data["expense"]["participants"] == ["Alice", "Bob", "Carol"]
    assert data["warning"] is None


def test_fast_entry_with_group(client, picnic):
    client.post(f"/api/projects/{picnic}/groups", json={"name": "Drivers", "members": ["Alice", "Carol"]})
    res = client.post(f"/api/projects/{picnic}/expenses/fast-entry", json={"text": "Fuel, 50.5, Carol, drivers"})
    assert res.status_code == 200
    data = res.json()
    assert data["group_name"] == "Drivers"
    assert data["expense"]["participants"] == ["Alice", "Carol"]


def test_fast_entry_unknown_group_falls_back(client, picnic):
    res = client.post(f"/api/projects/{picnic}/expenses/fast-entry", json={"text": "Fuel, 50, Carol, Pilots"})
    assert res.status_code == 200
    data = res.json()
    assert data["group_name"] is None
    assert "Pilots" in data["warning"]
    assert data["expense"]["participants"] == ["Alice", "Bob", "Carol"]


def test_fast_entry_errors(client, picnic):
    url = f"/api/projects/{picnic}/expenses/fast-entry"
    assert client.post(url, json={"text": "Pizza, 36"}).status_code == 400
    assert client.post(url, json={"text": "Pizza, lots, Bob"}).status_code == 400
    res = client.post(url, json={"text": "Pizza, 36, Mallory"})
    assert res.status_code == 400
    assert "Mallory" in res.json()["detail"]


def test_export_csv(client, picnic):
    client.post(f"/api/projects/{picnic}/expenses", json={
        "description": 'Dinner, "fancy"', "amount": 50.0, "paid_by": "Alice", "participants": ["Alice", "Bob"],
    })
    res = client.get(f"/api/projects/{picnic}/expenses/export")
    assert res.status_code == 200
    assert "text/csv" in res.headers["content-type"]
    assert "settleup_expenses.csv" in res.headers["content-disposition"]
    lines = res.text.splitlines()
    assert lines[0] == "Description,Amount,Paid By,Participants"
    assert lines[1] == '"Dinner, ""fancy""",50.00,Alice,Alice; Bob'


def test_export_csv_without_expenses(client, picnic):
    assert client.get(f"/api/projects/{picnic}/expenses/export").status_code == 400


def test_expense_rejects_non_finite_amounts(client, picnic):
    url = f"/api/projects/{picnic}/expenses"
    headers = {"Content-Type": "application/json"}
    for amount in ["Infinity", "-Infinity", "NaN"]:
        body = f'{{"description": "Cake", "amount": {amount}, "paid_by": "Alice"}}'
        res = client.post(url, content=body, headers=headers)
        assert res.status_code == 400
        assert res.json()["detail"] == "Amount must be a positive number"
    assert client.get(url).json() == []


def test_update_rejects_non_finite_amounts(client, picnic):
    eid = client.post(f"/api/projects/{picnic}/expenses", json={
        "description": "Cake", "amount": 12.0, "paid_by": "Alice",
    }).json()["id"]
    url = f"/api/projects/{picnic}/expenses/{eid}"
    for amount in ["Infinity", "NaN"]:
        res = client.patch(url, content=f'{{"amount": {amount}}}', headers={"Content-Type": "application/json"})
        assert res.status_code == 400
    assert client.get(url).json()["amount"] == 12.0
    assert client.get(f"/api/projects/{picnic}/settlements").json()["balances"][0]["amount"] == 8.0


def test_import_rejects_non_finite_amount(client):
    body = (
        '{"name": "Bad", "attendees": ["Alice"], "expenses": '
        '[{"description": "Cake", "amount": Infinity, "paid_by": "Alice", "participants": ["Alice"]}]}'
    )
    res = client.post("/api/projects/import", content=body, headers={"Content-Type": "application/json"})
    assert res.status_code == 400
    assert client.get("/api/projects").json() == []

def create(client, **body):
    payload = {"title": "Lunch", "amount": 150, "category": "Food", "date": "2024-02-15"}
    payload.update(body)
    return client.post("/api/public/expenses", json=payload)


def test_create_without_token(public_client):
    res = create(public_client)

    assert res.status_code == 201
    assert res.json()["title"] == "Lunch"
    assert res.json()["user"] is None


def test_create_missing_fields(public_client):
    res = public_client.post("/api/public/expenses", json={"title": "Taxi"})

    assert res.status_code == 400
    assert res.json() == {"message": "amount, category is required"}


def test_public_list_includes_owned_expenses(public_client, alice_headers):
    public_client.post(
        "/api/expenses",
        json={"title": "Rent", "amount": 500, "category": "Housing"},
        headers=alice_headers,
    )
    create(public_client, title="Snack")

    res = public_client.get("/api/public/expenses")

    assert res.status_code == 200
    assert sorted(e["title"] for e in res.json()) == ["Rent", "Snack"]


def test_crud_cycle(public_client):
    expense_id = create(public_client).json()["id"]

    assert public_client.get(f"/api/public/expenses/{expense_id}").json()["title"] == "Lunch"

    updated = public_client.put(f"/api/public/expenses/{expense_id}", json={"title": "Brunch"})
    assert updated.status_code == 200
    assert updated.json()["title"] == "Brunch"

    bad = public_client.put(f"/api/public/expenses/{expense_id}", json={"invalidField": "xyz"})
    assert bad.status_code == 400
    assert bad.json() == {"message": "Invalid update parameters"}

    deleted = public_client.delete(f"/api/public/expenses/{expense_id}")
    assert deleted.json() == {"message": "Expense deleted successfully"}
    assert public_client.get(f"/api/public/expenses/{expense_id}").status_code == 404


def test_search_by_path(public_client):
    create(public_client, title="Groceries", category="Food")
    create(public_client, title="Bus", category="Transport")

    res = public_client.get("/api/public/expenses/search/food")
    assert [e["title"] for e in res.json()] == ["Groceries"]

    everything = public_client.get("/api/public/expenses/search")
    assert sorted(e["title"] for e in everything.json()) == ["Bus", "Groceries"]


def test_create_without_body(public_client):
    res = public_client.post("/api/public/expenses")

    assert res.status_code == 400
    assert res.json() == {"message": "title, amount, category is required"}

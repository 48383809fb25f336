def register(client, username="carol", password="pa55word"):
    return client.post("/api/auth/register", json={"username": username, "password": password})


def test_register_creates_user(client):
    res = register(client, username="Carol")

    assert res.status_code == 201
    body = res.json()
    assert body["username"] == "carol"
    assert "id" in body
    assert "hashed_password" not in body


def test_register_duplicate_username(client):
    register(client)
    res = register(client, username="CAROL")

    assert res.status_code == 409
    assert res.json() == {"message": "Username already registered"}


def test_register_rejects_whitespace_password(client):
    res = register(client, password="pass word")

    assert res.status_code == 400
    assert res.json() == {"message": "Password must not contain whitespace"}


def test_register_rejects_short_password(client):
    res = register(client, password="abc")

    assert res.status_code == 400
    assert "password" in res.json()["error"]


def test_login_token_unlocks_expense_routes(client):
    register(client)
    login = client.post("/api/auth/login", json={"username": "carol", "password": "pa55word"})

    assert login.status_code == 200
    token = login.json()
    assert token["token_type"] == "bearer"

    res = client.get("/api/expenses", headers={"Authorization": f"Bearer {token['access_token']}"})
    assert res.status_code == 200
    assert res.json() == []


def test_login_with_wrong_password(client):
    register(client)
    res = client.post("/api/auth/login", json={"username": "carol", "password": "nope-nope"})

    assert res.status_code == 401
    assert res.json() == {"message": "Invalid username or password"}


def test_login_unknown_user(client):
    res = client.post("/api/auth/login", json={"username": "nobody", "password": "whatever"})

    assert res.status_code == 401


def test_register_rejects_blank_username(client):
    res = register(client, username="    ")

    assert res.status_code == 400
    assert "username" in res.json()["error"]


def test_register_returns_timestamps(client):
    body = register(client).json()

    assert body["created_at"]
    assert body["updated_at"]

def _register(client, username="accounts", email="accounts@greenfield.edu", password="s3cret-pass"):
    return client.post(
        "/auth/register",
        json={"username": username, "email": email, "password": password},
    )


def test_register_returns_token(client):
    resp = _register(client)
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["access_token"]
    assert body["token_type"] == "bearer"
    assert body["user"]["username"] == "accounts"
    assert body["user"]["role"] == "admin"

    me = client.get(
        "/me", headers={"Authorization": f"Bearer {body['access_token']}"}
    )
    assert me.status_code == 200
    assert me.json()["email"] == "accounts@greenfield.edu"


def test_duplicate_user_rejected(client):
    _register(client)
    resp = _register(client, email="other@greenfield.edu")
    assert resp.status_code == 409


def test_login(client):
    _register(client)

    ok = client.post(
        "/auth/login", json={"username": "accounts", "password": "s3cret-pass"}
    )
    assert ok.status_code == 200
    assert ok.json()["user"]["username"] == "accounts"

    bad = client.post("/auth/login", json={"username": "accounts", "password": "nope"})
    assert bad.status_code == 401
    assert bad.json() == {"success": False, "detail": "Invalid credentials"}

    unknown = client.post("/auth/login", json={"username": "ghost", "password": "nope"})
    assert unknown.status_code == 401


def test_bad_tokens_rejected(client):
    assert client.get("/me").status_code == 401
    assert client.get("/me", headers={"Authorization": "Bearer garbage"}).status_code == 401
    assert client.get("/me", headers={"Authorization": "Basic abc"}).status_code == 401

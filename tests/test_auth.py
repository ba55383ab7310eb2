from conftest import PASSWORD


def test_register_creates_plain_user(client):
    r = client.post(
        "/api/auth/register",
        json={"name": "Ivan", "email": "Ivan@Example.com", "password": "hunter22"},
    )
    assert r.status_code == 201
    user = r.json()["user"]
    assert user["email"] == "ivan@example.com"
    assert user["role"] == "USER"
    assert "hashedPassword" not in user


def test_register_duplicate_email_conflicts(client, users):
    r = client.post("/api/auth/register", json={"email": "user@example.com", "password": "hunter22"})
    assert r.status_code == 409
    assert r.json()["error"]


def test_register_reports_every_violation(client):
    r = client.post("/api/auth/register", json={"email": "nope", "password": "123"})
    assert r.status_code == 400
    fields = [v["field"] for v in r.json()["details"]["violations"]]
    assert fields == ["email", "password"]


def test_login_success_admin(client, users):
    r = client.post("/api/auth/login", json={"email": "admin@example.com", "password": PASSWORD})
    assert r.status_code == 200
    data = r.json()
    assert "token" in data
    assert data["user"]["role"] == "ADMIN"

    # Session cookie set by login is enough for /me
    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["user"]["id"] == users["admin"]


def test_login_fail(client, users):
    r = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "wrong"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid credentials"}


def test_me_requires_token(client):
    r = client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json() == {"error": "Authentication required"}


def test_garbage_token_is_anonymous(client):
    r = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_bearer_token_works(client, auth):
    r = client.get("/api/auth/me", headers=auth("manager"))
    assert r.status_code == 200
    assert r.json()["user"]["role"] == "MANAGER"


def test_logout_clears_session(client, users):
    client.post("/api/auth/login", json={"email": "user@example.com", "password": PASSWORD})
    assert client.get("/api/auth/me").status_code == 200
    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_role_is_read_from_store(client, db, users, auth):
    from tourportal.models import User

    headers = auth("user")
    assert client.get("/api/admin/statistics", headers=headers).status_code == 403

    u = db.get(User, users["user"])
    u.role = "ADMIN"
    db.commit()
    assert client.get("/api/admin/statistics", headers=headers).status_code == 200

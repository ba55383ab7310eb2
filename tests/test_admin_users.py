from conftest import make_destination, make_order, make_review, make_ticket, make_tour
from tourportal.models import Favorite, Order, Review, Ticket, User

NEW_USER = {"name": "Olga", "email": "olga@example.com", "password": "secret99", "role": "MANAGER"}


def test_admin_cannot_delete_self(client, db, users, auth):
    r = client.delete(f"/api/admin/users/{users['admin']}", headers=auth("admin"))
    assert r.status_code == 400
    assert r.json() == {"error": "You cannot delete your own account"}
    assert db.query(User).count() == 4


def test_delete_removes_user_data(client, db, users, auth):
    tour = make_tour(db, make_destination(db))
    make_order(db, users["user"], tour)
    make_review(db, users["user"], tour)
    make_ticket(db, users["user"])
    db.add(Favorite(user_id=users["user"], tour_id=tour.id))
    db.commit()

    r = client.delete(f"/api/admin/users/{users['user']}", headers=auth("admin"))
    assert r.status_code == 200

    db.expire_all()
    assert db.query(User).filter(User.id == users["user"]).first() is None
    for model in (Order, Review, Ticket, Favorite):
        assert db.query(model).count() == 0


def test_manager_has_no_user_management(client, users, auth):
    assert client.get("/api/admin/users", headers=auth("manager")).status_code == 403
    assert client.delete(f"/api/admin/users/{users['user']}", headers=auth("manager")).status_code == 403


def test_create_and_duplicate(client, db, auth):
    r = client.post("/api/admin/users", json=NEW_USER, headers=auth("admin"))
    assert r.status_code == 201
    assert r.json()["role"] == "MANAGER"

    dup = client.post("/api/admin/users", json={**NEW_USER, "email": "OLGA@example.com"}, headers=auth("admin"))
    assert dup.status_code == 409


def test_create_rejects_unknown_role(client, auth):
    r = client.post("/api/admin/users", json={**NEW_USER, "role": "ROOT"}, headers=auth("admin"))
    assert r.status_code == 400
    assert r.json()["details"]["violations"][0]["field"] == "role"


def test_update_keeps_password_when_blank(client, db, users, auth):
    r = client.put(
        f"/api/admin/users/{users['user']}",
        json={"name": "Renamed", "email": "user@example.com", "role": "USER", "password": "", "phone": ""},
        headers=auth("admin"),
    )
    assert r.status_code == 200
    assert r.json()["name"] == "Renamed"
    assert r.json()["phone"] is None

    login = client.post("/api/auth/login", json={"email": "user@example.com", "password": "secret123"})
    assert login.status_code == 200


def test_list_filters_and_paginates(client, users, auth):
    r = client.get("/api/admin/users?role=USER&limit=1", headers=auth("admin"))
    assert r.status_code == 200
    body = r.json()
    assert len(body["users"]) == 1
    assert body["pagination"]["total"] == 2

    found = client.get("/api/admin/users?search=manager", headers=auth("admin")).json()
    assert [u["email"] for u in found["users"]] == ["manager@example.com"]

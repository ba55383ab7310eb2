from decimal import Decimal

from conftest import make_destination, make_order, make_tour
from tourportal.models import Order, Tour


def _order_body(tour, quantity=2):
    return {"tourId": tour.id, "quantity": quantity, "contactEmail": "buyer@example.com"}


def test_order_takes_seats_and_prices_total(client, db, auth):
    tour = make_tour(db, make_destination(db), seats=5, price="1500.00")

    r = client.post("/api/orders", json=_order_body(tour, 2), headers=auth("user"))
    assert r.status_code == 201
    body = r.json()
    assert body["status"] == "PENDING"
    assert Decimal(body["totalPrice"]) == Decimal("3000")

    db.expire_all()
    assert db.get(Tour, tour.id).available_seats == 3


def test_order_beyond_available_seats_fails(client, db, auth):
    tour = make_tour(db, make_destination(db), seats=1)

    r = client.post("/api/orders", json=_order_body(tour, 2), headers=auth("user"))
    assert r.status_code == 400
    assert r.json()["availableSeats"] == 1

    db.expire_all()
    assert db.get(Tour, tour.id).available_seats == 1
    assert db.query(Order).count() == 0


def test_order_requires_session(client, db):
    tour = make_tour(db, make_destination(db))
    assert client.post("/api/orders", json=_order_body(tour)).status_code == 401


def test_only_owner_or_staff_reads_an_order(client, db, users, auth):
    tour = make_tour(db, make_destination(db))
    order = make_order(db, users["user"], tour)

    assert client.get(f"/api/orders/{order.id}", headers=auth("other")).status_code == 403
    assert client.get(f"/api/orders/{order.id}", headers=auth("user")).status_code == 200
    assert client.get(f"/api/orders/{order.id}", headers=auth("manager")).status_code == 200
    assert client.get("/api/orders/999", headers=auth("user")).status_code == 404


def test_list_shows_only_own_orders(client, db, users, auth):
    tour = make_tour(db, make_destination(db))
    mine = make_order(db, users["user"], tour)
    make_order(db, users["other"], tour)

    r = client.get("/api/orders", headers=auth("user"))
    assert [o["id"] for o in r.json()] == [mine.id]
    assert r.json()[0]["tour"]["slug"] == tour.slug


def test_cancel_returns_seats(client, db, users, auth):
    tour = make_tour(db, make_destination(db), seats=4)
    order = make_order(db, users["user"], tour, quantity=3)

    r = client.patch("/api/admin/orders", json={"orderId": order.id, "status": "CANCELLED"}, headers=auth("manager"))
    assert r.status_code == 200
    assert r.json()["status"] == "CANCELLED"

    db.expire_all()
    assert db.get(Tour, tour.id).available_seats == 7


def test_restoring_cancelled_order_needs_free_seats(client, db, users, auth):
    tour = make_tour(db, make_destination(db), seats=1)
    order = make_order(db, users["user"], tour, status="CANCELLED", quantity=2)

    r = client.patch("/api/admin/orders", json={"orderId": order.id, "status": "CONFIRMED"}, headers=auth("admin"))
    assert r.status_code == 400

    db.expire_all()
    assert db.get(Order, order.id).status == "CANCELLED"
    assert db.get(Tour, tour.id).available_seats == 1


def test_restoring_cancelled_order_takes_seats(client, db, users, auth):
    tour = make_tour(db, make_destination(db), seats=5)
    order = make_order(db, users["user"], tour, status="CANCELLED", quantity=2)

    r = client.patch("/api/admin/orders", json={"orderId": order.id, "status": "CONFIRMED"}, headers=auth("admin"))
    assert r.status_code == 200

    db.expire_all()
    assert db.get(Tour, tour.id).available_seats == 3


def test_user_cannot_change_status(client, db, users, auth):
    tour = make_tour(db, make_destination(db))
    order = make_order(db, users["user"], tour)

    r = client.patch("/api/admin/orders", json={"orderId": order.id, "status": "COMPLETED"}, headers=auth("user"))
    assert r.status_code == 403

    db.expire_all()
    assert db.get(Order, order.id).status == "PENDING"


def test_staff_order_list_filters_by_status(client, db, users, auth):
    tour = make_tour(db, make_destination(db))
    make_order(db, users["user"], tour, status="PENDING")
    done = make_order(db, users["user"], tour, status="COMPLETED")

    r = client.get("/api/admin/orders?status=COMPLETED", headers=auth("manager"))
    assert r.status_code == 200
    assert [o["id"] for o in r.json()["orders"]] == [done.id]
    assert client.get("/api/admin/orders?status=LOST", headers=auth("manager")).status_code == 400


def test_manager_tour_delete_cancels_orders(client, db, users, auth):
    tour = make_tour(db, make_destination(db))
    order = make_order(db, users["user"], tour, status="CONFIRMED")

    r = client.delete(f"/api/manager/tours/{tour.id}", headers=auth("manager"))
    assert r.status_code == 200
    assert r.json()["cancelledOrders"] == 1

    db.expire_all()
    kept = db.get(Order, order.id)
    assert kept.status == "CANCELLED"
    assert kept.tour_id is None
    assert db.query(Tour).count() == 0

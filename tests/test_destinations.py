from conftest import make_destination, make_order, make_review, make_tour
from tourportal.models import Destination, Favorite, Order, Review, Tour

ADMIN_DESTINATION = {
    "name": "Golden Ring",
    "slug": "golden-ring",
    "description": "Old towns north-east of Moscow.",
    "imageUrl": "https://example.com/ring.jpg",
}


def _destination_with_tours(db, users, n=2):
    d = make_destination(db, "altai")
    for i in range(n):
        t = make_tour(db, d, slug=f"altai-trip-{i}")
        make_review(db, users["user"], t)
        db.add(Favorite(user_id=users["other"], tour_id=t.id))
        db.commit()
    return d


def test_admin_delete_cascades_to_tours_and_reviews(client, db, users, auth):
    d = _destination_with_tours(db, users, n=2)
    order = make_order(db, users["user"], db.query(Tour).first(), status="COMPLETED")

    r = client.delete(f"/api/admin/destinations/{d.id}", headers=auth("admin"))
    assert r.status_code == 200
    assert r.json()["deletedTours"] == 2
    assert r.json()["deletedReviews"] == 2

    db.expire_all()
    assert db.query(Destination).count() == 0
    assert db.query(Tour).count() == 0
    assert db.query(Review).count() == 0
    assert db.query(Favorite).count() == 0
    # Order history survives without its tour
    kept = db.get(Order, order.id)
    assert kept is not None
    assert kept.tour_id is None


def test_manager_delete_refuses_when_tours_exist(client, db, users, auth):
    d = _destination_with_tours(db, users, n=3)

    r = client.delete(f"/api/manager/destinations/{d.id}", headers=auth("manager"))
    assert r.status_code == 400
    assert r.json()["tourCount"] == 3
    assert "error" in r.json()

    db.expire_all()
    assert db.query(Destination).count() == 1
    assert db.query(Tour).count() == 3
    assert db.query(Review).count() == 3


def test_manager_deletes_empty_destination(client, db, auth):
    d = make_destination(db, "sochi")
    assert client.delete(f"/api/manager/destinations/{d.id}", headers=auth("manager")).status_code == 200
    assert db.query(Destination).count() == 0


def test_user_cannot_delete_through_either_path(client, db, users, auth):
    d = _destination_with_tours(db, users, n=1)
    assert client.delete(f"/api/admin/destinations/{d.id}", headers=auth("user")).status_code == 403
    assert client.delete(f"/api/manager/destinations/{d.id}", headers=auth("user")).status_code == 403
    # Managers are not admins for catalog administration
    assert client.delete(f"/api/admin/destinations/{d.id}", headers=auth("manager")).status_code == 403
    assert db.query(Tour).count() == 1


def test_forbidden_before_validation(client, db, auth):
    r = client.post("/api/admin/destinations", json={"slug": "!!"}, headers=auth("manager"))
    assert r.status_code == 403
    assert db.query(Destination).count() == 0


def test_forbidden_before_malformed_body(client, auth):
    headers = {**auth("user"), "Content-Type": "application/json"}
    for path in ("/api/admin/destinations", "/api/admin/users"):
        r = client.post(path, content="{not json", headers=headers)
        assert r.status_code == 403


def test_malformed_body_is_reported_on_body(client, db, auth):
    headers = {**auth("admin"), "Content-Type": "application/json"}
    r = client.post("/api/admin/destinations", content="{not json", headers=headers)
    assert r.status_code == 400
    assert r.json()["details"]["violations"] == [{"field": "body", "message": "Malformed JSON body"}]
    assert db.query(Destination).count() == 0


def test_admin_create_validates_and_rejects_duplicate_slug(client, db, auth):
    r = client.post("/api/admin/destinations", json=ADMIN_DESTINATION, headers=auth("admin"))
    assert r.status_code == 201
    assert r.json()["slug"] == "golden-ring"

    dup = client.post("/api/admin/destinations", json=ADMIN_DESTINATION, headers=auth("admin"))
    assert dup.status_code == 409

    bad = client.post(
        "/api/admin/destinations",
        json={**ADMIN_DESTINATION, "slug": "Golden Ring!", "imageUrl": "ring.jpg"},
        headers=auth("admin"),
    )
    assert bad.status_code == 400
    fields = [v["field"] for v in bad.json()["details"]["violations"]]
    assert fields == ["slug", "imageUrl"]


def test_manager_create_accepts_relative_image(client, auth):
    r = client.post(
        "/api/manager/destinations",
        json={**ADMIN_DESTINATION, "slug": "алтай-тур", "imageUrl": "altai.jpg"},
        headers=auth("manager"),
    )
    assert r.status_code == 201
    assert r.json()["imageUrl"] == "altai.jpg"


def test_update_keeps_own_slug(client, db, auth):
    d = make_destination(db, "sochi")
    r = client.put(
        f"/api/admin/destinations/{d.id}",
        json={**ADMIN_DESTINATION, "slug": "sochi", "name": "Sochi"},
        headers=auth("admin"),
    )
    assert r.status_code == 200
    assert r.json()["name"] == "Sochi"


def test_public_list_and_detail(client, db):
    gamma = make_destination(db, "gamma", name="Gamma")
    make_destination(db, "alpha", name="Alpha")
    make_tour(db, gamma, slug="gamma-trip")

    names = [d["name"] for d in client.get("/api/destinations").json()]
    assert names == ["Alpha", "Gamma"]

    detail = client.get("/api/destinations/gamma").json()
    assert [t["slug"] for t in detail["tours"]] == ["gamma-trip"]
    assert client.get("/api/destinations/nowhere").status_code == 404


def test_popular_destinations_count_completed_orders(client, db, users):
    alpha = make_destination(db, "alpha", name="Alpha")
    beta = make_destination(db, "beta", name="Beta")
    gamma = make_destination(db, "gamma", name="Gamma")
    a1 = make_tour(db, alpha, slug="a1")
    b1 = make_tour(db, beta, slug="b1")
    make_tour(db, beta, slug="b2")
    g1 = make_tour(db, gamma, slug="g1")

    make_order(db, users["user"], a1, status="COMPLETED")
    make_order(db, users["user"], b1, status="COMPLETED")
    make_order(db, users["user"], g1, status="COMPLETED")
    make_order(db, users["other"], g1, status="COMPLETED")
    # Pending orders do not count
    make_order(db, users["user"], a1, status="PENDING")
    make_order(db, users["other"], a1, status="PENDING")

    r = client.get("/api/destinations?popular=true&limit=6")
    assert r.status_code == 200
    ranked = r.json()
    # Gamma leads; Alpha and Beta tie on orders and Beta has more tours
    assert [d["slug"] for d in ranked] == ["gamma", "beta", "alpha"]
    assert ranked[0]["orderCount"] == 2

    assert len(client.get("/api/destinations?popular=true&limit=1").json()) == 1


def test_admin_list_paginates(client, db, auth):
    for i in range(3):
        make_destination(db, f"dest-{i}")
    r = client.get("/api/admin/destinations?page=2&limit=2", headers=auth("admin"))
    assert r.status_code == 200
    body = r.json()
    assert len(body["destinations"]) == 1
    assert body["pagination"] == {"total": 3, "pages": 2, "page": 2, "limit": 2}

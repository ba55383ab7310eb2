from conftest import make_destination, make_order, make_tour
from tourportal.models import Tour

TOUR = {
    "title": "Altai Mountains Trip",
    "slug": "altai-mountains-trip",
    "price": "45000",
    "currency": "RUB",
    "imageUrl": "altai.jpg",
    "shortDescription": "Lakes, valleys and passes.",
    "fullDescription": "Teletskoye Lake, the Chulyshman valley and mountain passes for a full week.",
    "duration": 7,
    "groupSize": 12,
}


def test_public_list_is_newest_first_and_searchable(client, db):
    d = make_destination(db)
    make_tour(db, d, slug="first-trip")
    make_tour(db, d, slug="second-trip")

    slugs = [t["slug"] for t in client.get("/api/tours").json()]
    assert slugs == ["second-trip", "first-trip"]

    found = client.get("/api/tours?search=first").json()
    assert [t["slug"] for t in found] == ["first-trip"]

    other = make_destination(db, "sochi")
    assert client.get(f"/api/tours?destinationId={other.id}").json() == []


def test_tour_detail_includes_destination(client, db):
    make_tour(db, make_destination(db, "altai", name="Altai"), slug="altai-trip")
    r = client.get("/api/tours/altai-trip")
    assert r.status_code == 200
    assert r.json()["destination"] == {"name": "Altai", "slug": "altai"}
    assert client.get("/api/tours/missing").status_code == 404


def test_popular_tours_are_stably_ranked(client, db, users):
    d = make_destination(db)
    a = make_tour(db, d, slug="a")
    b = make_tour(db, d, slug="b")
    c = make_tour(db, d, slug="c")
    for _ in range(2):
        make_order(db, users["user"], a, status="COMPLETED")
    make_order(db, users["user"], c, status="COMPLETED")
    make_order(db, users["user"], c, status="COMPLETED")
    make_order(db, users["user"], b, status="CANCELLED")

    ranked = client.get("/api/tours?popular=true").json()
    # a and c tie; newest-first input order puts c ahead of a
    assert [t["slug"] for t in ranked] == ["c", "a", "b"]
    assert [t["orderCount"] for t in ranked] == [2, 2, 0]


def test_admin_creates_tour(client, db, auth):
    d = make_destination(db)
    r = client.post("/api/admin/tours", json={**TOUR, "destinationId": d.id}, headers=auth("admin"))
    assert r.status_code == 201
    body = r.json()
    assert body["slug"] == "altai-mountains-trip"
    assert body["availableSeats"] == 12
    assert body["inclusions"] == ""

    assert client.post("/api/admin/tours", json={**TOUR, "destinationId": d.id}, headers=auth("manager")).status_code == 403


def test_admin_tour_requires_existing_destination(client, auth):
    r = client.post("/api/admin/tours", json={**TOUR, "destinationId": 77}, headers=auth("admin"))
    assert r.status_code == 404


def test_admin_tour_violations(client, auth):
    r = client.post(
        "/api/admin/tours",
        json={**TOUR, "price": 0, "currency": "RUBL", "destinationId": 1},
        headers=auth("admin"),
    )
    assert r.status_code == 400
    fields = [v["field"] for v in r.json()["details"]["violations"]]
    assert fields == ["price", "currency"]


def test_manager_tour_crud(client, db, auth):
    d = make_destination(db)
    headers = auth("manager")
    payload = {"destinationId": d.id, **{k: v for k, v in TOUR.items() if k not in ("duration", "groupSize")}}

    created = client.post("/api/manager/tours", json=payload, headers=headers)
    assert created.status_code == 201
    tour_id = created.json()["id"]
    assert created.json()["duration"] == 7
    assert created.json()["availableSeats"] == 10

    updated = client.put(
        f"/api/manager/tours/{tour_id}",
        json={**payload, "title": "Altai in Autumn", "availableSeats": 4},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["title"] == "Altai in Autumn"
    assert updated.json()["availableSeats"] == 4

    dup = client.post("/api/manager/tours", json=payload, headers=headers)
    assert dup.status_code == 409

    assert client.delete(f"/api/manager/tours/{tour_id}", headers=headers).status_code == 200
    assert db.query(Tour).count() == 0

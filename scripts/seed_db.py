#!/usr/bin/env python3
"""
Create tables and seed demo accounts plus a small catalog.
Safe to run repeatedly: existing rows are left alone.
"""
from decimal import Decimal

from tourportal.auth.security import hash_password
from tourportal.core.db import session_scope
from tourportal.models import Destination, Tour, User
from tourportal.services.bootstrap_db import create_all

USERS = [
    ("Administrator", "admin@example.com", "admin12345", "ADMIN"),
    ("Manager", "manager@example.com", "manager12345", "MANAGER"),
    ("Test User", "user@example.com", "user12345", "USER"),
]

DESTINATIONS = [
    {
        "name": "Altai",
        "slug": "altai",
        "description": "Mountain region in southern Siberia known for its lakes, valleys and cultural heritage.",
        "image_url": "https://images.unsplash.com/photo-1586346528569-7b1d31a9f74e",
    },
    {
        "name": "Sochi",
        "slug": "sochi",
        "description": "Popular Black Sea resort town with beaches and plenty of entertainment.",
        "image_url": "https://images.unsplash.com/photo-1599662901893-94f5c9e5e1a6",
    },
    {
        "name": "Golden Ring",
        "slug": "golden-ring",
        "description": "Route through the ancient towns north-east of Moscow and their historic monuments.",
        "image_url": "https://images.unsplash.com/photo-1517169188433-6a4f3d1f3f1f",
    },
]

TOURS = [
    {
        "destination": "altai",
        "title": "Altai Mountains Trip",
        "slug": "altai-mountains-trip",
        "price": Decimal("45000"),
        "short_description": "An unforgettable adventure through the scenery of Altai.",
        "full_description": "Teletskoye Lake, the Chulyshman valley and other landmarks. "
                            "Made for travellers who like active holidays and wild nature.",
        "itinerary": "Day 1: arrival in Gorno-Altaysk. Days 2-3: the lake. Day 4: Chulyshman. "
                     "Days 5-6: trekking. Day 7: departure.",
        "inclusions": "Accommodation, breakfasts, transfers, guided excursions.",
        "exclusions": "Flights, personal expenses, insurance.",
        "duration": 7,
    },
    {
        "destination": "sochi",
        "title": "Sochi Beach Vacation",
        "slug": "sochi-beach-vacation",
        "price": Decimal("30000"),
        "short_description": "The right choice for lovers of sun and sea.",
        "full_description": "A week on the best beaches of Sochi with comfortable hotels, "
                            "a warm sea and entertainment for every taste.",
        "itinerary": "7 days / 6 nights, free programme, optional excursions.",
        "inclusions": "Hotel accommodation, breakfasts.",
        "exclusions": "Travel to Sochi, transfers, lunches and dinners, excursions.",
        "duration": 7,
    },
    {
        "destination": "golden-ring",
        "title": "Golden Ring Tour",
        "slug": "golden-ring-tour",
        "price": Decimal("25000"),
        "short_description": "Meet the history and culture of the old Russian towns.",
        "full_description": "Sergiev Posad, Pereslavl-Zalessky, Rostov Veliky, Yaroslavl, "
                            "Kostroma, Suzdal and Vladimir in one trip.",
        "itinerary": "Day 1: Sergiev Posad. Day 2: Rostov and Yaroslavl. "
                     "Day 3: Kostroma and Suzdal. Day 4: Vladimir.",
        "inclusions": "Hotels, breakfasts, transport, excursions, museum tickets.",
        "exclusions": "Travel to Moscow, lunches and dinners, personal expenses.",
        "duration": 4,
    },
]


def run():
    create_all()

    with session_scope() as db:
        for name, email, password, role in USERS:
            if db.query(User).filter(User.email == email).first():
                print(f"⚠️  {email} already exists")
                continue
            db.add(User(name=name, email=email, hashed_password=hash_password(password), role=role))
            print(f"✅ Created {role} {email} (password: {password})")

        by_slug = {}
        for d in DESTINATIONS:
            destination = db.query(Destination).filter(Destination.slug == d["slug"]).first()
            if not destination:
                destination = Destination(**d)
                db.add(destination)
                db.flush()  # get destination.id
                print(f"✅ Created destination {d['slug']}")
            by_slug[d["slug"]] = destination

        for t in TOURS:
            if db.query(Tour).filter(Tour.slug == t["slug"]).first():
                continue
            fields = dict(t)
            destination = by_slug[fields.pop("destination")]
            db.add(
                Tour(
                    destination_id=destination.id,
                    currency="RUB",
                    image_url=destination.image_url,
                    image_urls=[destination.image_url],
                    group_size=10,
                    available_seats=10,
                    **fields,
                )
            )
            print(f"✅ Created tour {t['slug']}")

    print("\n🎉 Seed complete. Change these passwords in production!")


if __name__ == "__main__":
    run()

"""Populate the database with demo users and events.

Run: python seed.py
"""
import logging
from datetime import datetime, timezone

from auth import crud as auth_crud
from auth.constants import Role
from auth.models import UserCreate
from common.database import MongoDBConnection
from event import crud as event_crud
from event.models import EventCreate

USERS = [
    ("Admin User", "admin@college.edu", "admin123", Role.ADMIN),
    ("John Doe", "john@student.edu", "student123", Role.STUDENT),
    ("Jane Smith", "jane@student.edu", "student123", Role.STUDENT),
    ("Event Coordinator", "coordinator@college.edu", "event123", Role.EVENT_MEMBER),
    ("Tech Club Lead", "techclub@college.edu", "event123", Role.EVENT_MEMBER),
]

EVENTS = [
    {
        "title": "TechFest 2025",
        "description": "A grand celebration of technology featuring hackathons, tech talks, and innovation showcases.",
        "category": "technical",
        "date": datetime(2025, 11, 15, tzinfo=timezone.utc),
        "time": "09:00 AM",
        "venue": "Main Auditorium",
        "college": "MIT College of Engineering",
        "organizer": "Tech Club",
        "capacity": 200,
    },
    {
        "title": "Cultural Night 2025",
        "description": "Experience the diversity of cultures through music, dance, and drama.",
        "category": "cultural",
        "date": datetime(2025, 11, 20, tzinfo=timezone.utc),
        "time": "06:00 PM",
        "venue": "Open Air Theater",
        "college": "Delhi University",
        "organizer": "Cultural Committee",
        "capacity": 300,
    },
    {
        "title": "Sports Tournament",
        "description": "Inter-college sports championship featuring cricket, football, basketball, and athletics.",
        "category": "sports",
        "date": datetime(2025, 11, 25, tzinfo=timezone.utc),
        "time": "07:00 AM",
        "venue": "Sports Complex",
        "college": "Mumbai University",
        "organizer": "Sports Council",
        "capacity": 150,
    },
    {
        "title": "AI & ML Workshop",
        "description": "Hands-on workshop on Artificial Intelligence and Machine Learning using Python and TensorFlow.",
        "category": "workshop",
        "date": datetime(2025, 11, 18, tzinfo=timezone.utc),
        "time": "10:00 AM",
        "venue": "Computer Lab",
        "college": "IIT Bombay",
        "organizer": "AI Research Group",
        "capacity": 100,
    },
    {
        "title": "Startup Conclave",
        "description": "Meet successful entrepreneurs, pitch your ideas, and network with potential investors.",
        "category": "workshop",
        "date": datetime(2025, 11, 22, tzinfo=timezone.utc),
        "time": "11:00 AM",
        "venue": "Innovation Hub",
        "college": "IIM Ahmedabad",
        "organizer": "Entrepreneurship Cell",
        "capacity": 120,
    },
    {
        "title": "Music Fest 2025",
        "description": "Live performances by renowned bands and solo artists, from rock to classical.",
        "category": "cultural",
        "date": datetime(2025, 11, 28, tzinfo=timezone.utc),
        "time": "05:00 PM",
        "venue": "Stadium",
        "college": "Delhi University",
        "organizer": "Music Club",
        "capacity": 500,
    },
    {
        "title": "Hackathon 2025",
        "description": "36-hour coding marathon to solve real-world problems and compete for prizes.",
        "category": "technical",
        "date": datetime(2025, 12, 1, tzinfo=timezone.utc),
        "time": "08:00 AM",
        "venue": "Tech Park",
        "college": "BITS Pilani",
        "organizer": "Coding Club",
        "capacity": 180,
    },
    {
        "title": "Basketball Championship",
        "description": "State-level basketball tournament with top teams competing for the championship trophy.",
        "category": "sports",
        "date": datetime(2025, 12, 5, tzinfo=timezone.utc),
        "time": "08:00 AM",
        "venue": "Indoor Stadium",
        "college": "Mumbai University",
        "organizer": "Basketball Association",
        "capacity": 100,
    },
]


def seed_database(db):
    print("Clearing existing data...")
    db.users.delete_many({})
    db.events.delete_many({})
    db.chats.delete_many({})

    users = [
        auth_crud.create_user(
            db, UserCreate(name=name, email=email, password=password, role=role)
        )
        for name, email, password, role in USERS
    ]
    print(f"{len(users)} users created")

    event_member = next(u for u in users if u["role"] == Role.EVENT_MEMBER.value)
    events = [event_crud.create_event(db, EventCreate(**e), event_member) for e in EVENTS]
    print(f"{len(events)} events created")
    return users, events


def main():
    logging.basicConfig(level=logging.INFO)
    db = MongoDBConnection().db
    try:
        seed_database(db)
    finally:
        MongoDBConnection.close()

    print("\nDatabase seeded successfully!\n")
    print("Sample credentials:")
    for name, email, password, role in USERS[:2] + USERS[3:4]:
        print(f"  {role.value}: {email} / {password}")


if __name__ == "__main__":
    main()

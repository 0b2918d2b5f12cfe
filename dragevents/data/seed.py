"""
Sample data for a freshly migrated database.
"""
from __future__ import annotations

from dragevents.data.repository import Repository

SEED_TRACKS = [
    ("Texas Motorplex", "Ennis", "7500 US-287, Ennis, TX", "https://texasmotorplex.com"),
    ("Xtreme Raceway Park", "Ferris", "1800 S Interstate 45, Ferris, TX", "https://www.xtremeracewaypark.com"),
]


def seed(repo: Repository) -> dict:
    """Insert 2 tracks, 2 events, 3 classes and 7 rules. Returns counts."""
    motorplex, xtreme = (repo.create_track(*t) for t in SEED_TRACKS)

    fall_nationals = repo.create_event(
        "Fall Nationals", motorplex, "2025-10-03 08:00:00", "2025-10-12 18:00:00",
        50.0, 20.0, "https://texasmotorplex.com/events", "NHRA fall event",
    )
    friday_drags = repo.create_event(
        "Friday Night Drags", xtreme, "2025-10-24 18:00:00", "2025-10-24 23:00:00",
        30.0, 10.0, "https://www.xtremeracewaypark.com", "Test and tune night",
    )

    classes = {
        repo.create_event_class(fall_nationals, "Pro Street", 100.0): [
            "DOT street tires only",
            'Maximum 10.5" tire width',
            "Full interior required",
        ],
        repo.create_event_class(fall_nationals, "Street", 50.0): [
            "Street legal vehicle",
            "Valid registration and insurance",
        ],
        repo.create_event_class(friday_drags, "Test & Tune", None): [
            "All vehicles welcome",
            "Helmet required for sub-14 second runs",
        ],
    }
    rule_count = 0
    for class_id, rules in classes.items():
        for rule in rules:
            repo.create_event_class_rule(class_id, rule)
            rule_count += 1

    return {"tracks": len(SEED_TRACKS), "events": 2, "classes": len(classes), "rules": rule_count}

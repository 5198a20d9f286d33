"""
Sample edition seeding script

Creates the sample editions with their template tasks.
Usage: python -m training_tracker.scripts.seed_editions seed|list
"""

import logging
from datetime import date

from training_tracker.database import SessionLocal, init_db
from training_tracker.exceptions import TrackerError
from training_tracker.models.edition import Edition
from training_tracker.services.edition_service import EditionService

logger = logging.getLogger(__name__)

SAMPLE_EDITIONS = [
    {"code": "2405-A", "training_type": "GLR", "start_date": date(2024, 5, 20), "tasks_start_date": date(2024, 4, 15)},
    {"code": "2405-B", "training_type": "SLR", "start_date": date(2024, 4, 22), "tasks_start_date": date(2024, 3, 18)},
    {"code": "2406-A", "training_type": "GLR", "start_date": date(2024, 6, 17), "tasks_start_date": date(2024, 5, 13)},
]


def seed_editions(db=None) -> int:
    """Create the sample editions that do not exist yet; returns how many were created"""
    own_session = db is None
    if own_session:
        init_db()
        db = SessionLocal()

    created = 0
    try:
        service = EditionService(db)
        for data in SAMPLE_EDITIONS:
            if service.get_edition_by_code(data["code"]):
                logger.info("Edition %s already exists, skipping", data["code"])
                continue
            try:
                edition = service.create_edition_with_template(data)
            except TrackerError as exc:
                logger.error("Could not seed edition %s: %s", data["code"], exc.message)
                continue
            logger.info("Seeded edition %s with %d tasks", edition.code, len(edition.tasks))
            created += 1
    finally:
        if own_session:
            db.close()
    return created


def list_editions():
    """Print the editions in the database"""
    db = SessionLocal()
    try:
        editions = db.query(Edition).order_by(Edition.start_date).all()
        if not editions:
            print("No editions yet")
            return
        for edition in editions:
            archived = " (archived)" if edition.archived else ""
            print(f"  {edition.code} {edition.training_type} starts {edition.start_date} "
                  f"week {edition.current_week}, {len(edition.tasks)} tasks{archived}")
    finally:
        db.close()


if __name__ == "__main__":
    import argparse

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    parser = argparse.ArgumentParser(description="Sample edition data")
    parser.add_argument("action", choices=["seed", "list"], help="what to do")
    args = parser.parse_args()

    if args.action == "seed":
        print(f"Created {seed_editions()} editions")
    elif args.action == "list":
        list_editions()

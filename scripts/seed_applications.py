"""
Script to create a demo user with a handful of sample applications.
Run: python -m scripts.seed_applications demo@example.com demopass123
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging
from typing import List

from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError
from app.db.init_db import init_db
from app.db.models.application import Application
from app.db.session import SessionLocal, engine
from app.services import application_service, user_service

logger = logging.getLogger(__name__)

SAMPLE_APPLICATIONS = [
    {
        "universityName": "University of Toronto",
        "degree": "MSc Computer Science",
        "priority": "High",
        "numberOfSemesters": 4,
        "applicationPortal": "https://future.utoronto.ca",
        "city": "Toronto",
        "country": "Canada",
        "location": "Downtown Campus",
        "startingSemester": "Fall 2025",
        "tuitionFees": 25000,
        "livingExpenses": 15000,
        "documentsRequired": ["SOP", "CV", "Transcript"],
        "status": "In Progress",
        "deadline": "2025-01-15",
    },
    {
        "universityName": "Technical University of Munich",
        "degree": "MSc Data Engineering",
        "priority": "Medium",
        "numberOfSemesters": 4,
        "applicationPortal": "https://www.tum.de",
        "city": "Munich",
        "country": "Germany",
        "location": "Main Campus",
        "startingSemester": "Winter 2025",
        "tuitionFees": 3000,
        "livingExpenses": 12000,
        "documentsRequired": ["CV", "Transcript", "IELTS"],
        "status": "Submitted",
        "deadline": "2025-05-31",
    },
    {
        "universityName": "MIT",
        "degree": "PhD in AI",
        "priority": "High",
        "numberOfSemesters": 8,
        "applicationPortal": "https://gradadmissions.mit.edu",
        "city": "Cambridge",
        "country": "USA",
        "location": "MIT Main Campus",
        "startingSemester": "Fall 2025",
        "tuitionFees": 58000,
        "livingExpenses": 25000,
        "documentsRequired": ["SOP", "CV", "LOR", "GRE"],
        "status": "Accepted",
        "deadline": "2024-12-15",
    },
    {
        "universityName": "ETH Zurich",
        "degree": "MSc Robotics",
        "priority": "Low",
        "numberOfSemesters": 4,
        "applicationPortal": "https://ethz.ch/en/studies.html",
        "city": "Zurich",
        "country": "Switzerland",
        "location": "Zentrum",
        "startingSemester": "Fall 2025",
        "tuitionFees": 1500,
        "livingExpenses": 24000,
        "status": "Draft",
        "deadline": "2024-12-15",
        "notes": "Check portfolio requirements",
    },
]


def seed_demo_data(db: Session, email: str, password: str, name: str = "Demo User") -> List[Application]:
    """
    Create (or reuse) the user for email and add the sample applications.

    Returns the applications that were inserted. Running it twice for the same
    user inserts nothing the second time.
    """
    user = user_service.find_by_email(db, email)
    if not user:
        logger.info(f"Creating demo user: {email}")
        user = user_service.create_user(db, email, password, name)
    else:
        logger.info(f"Found existing user: {email} (ID: {user.id})")

    existing = {a.university_name for a in application_service.list_applications(db, user.id)}
    created = []
    for fields in SAMPLE_APPLICATIONS:
        if fields["universityName"] in existing:
            continue
        created.append(application_service.create_application(db, user.id, fields))

    logger.info(f"Seeded {len(created)} applications for user_id={user.id}")
    return created


def main(argv: List[str]) -> int:
    if len(argv) < 3:
        print("Usage: python -m scripts.seed_applications <email> <password> [name]")
        return 1

    init_db(engine)
    db = SessionLocal()
    try:
        seed_demo_data(db, argv[1], argv[2], *(argv[3:4]))
    except ValidationError as e:
        logger.error(f"Seeding failed: {e.message} {e.errors}")
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main(sys.argv))

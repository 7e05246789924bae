import json
import os
from datetime import date

from .database import SessionLocal, create_tables
from .models import ProfileFact, Skill, Experience, Education, Project, Certificate
from ..utils.logger import get_logger

logger = get_logger()

PORTFOLIO_JSON_PATH = os.path.join(os.path.dirname(__file__), "raw", "portfolio.json")

MODELS = {
    "profile": ProfileFact,
    "skills": Skill,
    "experience": Experience,
    "education": Education,
    "projects": Project,
    "certificates": Certificate,
}

DATE_FIELDS = ("start_date", "end_date", "date")


def _row(entry: dict) -> dict:
    row = dict(entry)
    for key in DATE_FIELDS:
        if row.get(key):
            row[key] = date.fromisoformat(row[key])
    return row


def populate_portfolio(path: str = PORTFOLIO_JSON_PATH, session_factory=SessionLocal, bind=None):
    """Read portfolio.json and populate any empty portfolio tables."""
    # Ensure tables are created
    create_tables(bind)

    with open(path, mode="r", encoding="utf-8") as f:
        data = json.load(f)

    db = session_factory()
    try:
        for collection, model in MODELS.items():
            if db.query(model).count() > 0:
                logger.info(f"Table '{model.__tablename__}' is not empty. Skipping population.")
                continue
            entries = data.get(collection, [])
            for entry in entries:
                db.add(model(**_row(entry)))
            logger.info(f"Queued {len(entries)} rows for '{model.__tablename__}'")

        db.commit()
        logger.info("Successfully populated the portfolio tables.")
    except Exception:
        db.rollback()
        logger.exception("Error populating portfolio tables")
        raise
    finally:
        db.close()

if __name__ == "__main__":
    populate_portfolio()

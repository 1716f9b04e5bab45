from database import SessionLocal, engine, Base
from models.company import Company
from config.settings import settings
import logging
import os

logger = logging.getLogger(__name__)

SAMPLE_COMPANIES = [
    {
        "name": "Urban Nest Interiors",
        "projects": 120,
        "experience": 8,
        "branches": 3,
        "registered_company_name": "Urban Nest Interiors Pvt Ltd",
        "description": "Modular kitchens and full home interiors.",
        "available_cities": ["Bengaluru", "Chennai"],
        "category_type": "Premium",
    },
    {
        "name": "Greenline Builders",
        "projects": 45,
        "experience": 12,
        "branches": 1,
        "description": "Residential construction and renovation.",
        "available_cities": ["Hyderabad"],
    },
    {
        "name": "Studio Forma",
        "projects": 30,
        "experience": 4,
        "branches": 2,
        "registered_company_name": "Forma Design Studio LLP",
        "description": "Office and retail fit-outs.",
        "available_cities": ["Mumbai", "Pune"],
        "assured": "Yes",
    },
]


def seed_sample_companies():
    """Seed a few demo companies into an empty directory."""
    db = SessionLocal()
    try:
        if db.query(Company).first():
            logger.info("Companies already exist")
            return

        for company_data in SAMPLE_COMPANIES:
            db.add(Company(**company_data))

        db.commit()
        logger.info(f"Successfully seeded {len(SAMPLE_COMPANIES)} sample companies")
    except Exception as e:
        logger.error(f"Error seeding companies: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def init_database():
    """Create tables, the uploads directory and, optionally, demo data."""
    Base.metadata.create_all(bind=engine)
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    logger.info("Database tables created")

    if settings.SEED_SAMPLE_DATA:
        seed_sample_companies()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_database()
    seed_sample_companies()

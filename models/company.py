from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from sqlalchemy.sql import func
from database import Base


class Company(Base):
    __tablename__ = 'companies'

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    reviews = Column(Integer, nullable=False, default=0)
    projects = Column(Integer, nullable=False)
    experience = Column(Integer, nullable=False)
    branches = Column(Integer, nullable=False)

    # Descriptive details (all optional, NULL when never provided)
    registered_company_name = Column(String(255), nullable=True, index=True)
    name_display = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    age_of_company = Column(String(100), nullable=True)
    available_cities = Column(JSON, nullable=False, default=list)
    official_website = Column(String(500), nullable=True)
    full_name = Column(String(255), nullable=True)
    designation = Column(String(255), nullable=True)
    phone_number = Column(String(50), nullable=True)
    min_max_budget = Column(String(100), nullable=True)
    type = Column(String(100), nullable=True)
    discounts_offer_timeline = Column(String(255), nullable=True)
    number_of_projects_completed = Column(String(100), nullable=True)
    contact_email = Column(String(255), nullable=True)
    google_rating = Column(String(50), nullable=True)
    google_reviews = Column(String(50), nullable=True)
    google_location = Column(String(500), nullable=True)
    any_award_won = Column(String(255), nullable=True)
    category_type = Column(String(100), nullable=True)
    payment_type = Column(String(100), nullable=True)
    assured = Column(String(50), nullable=True)

    # File assets: references returned by the blob store (see services.asset_fields)
    logo = Column(String(500), nullable=True)
    banner_image_1 = Column(String(500), nullable=True)
    banner_image_2 = Column(String(500), nullable=True)
    banner_image_3 = Column(String(500), nullable=True)
    banner_image_4 = Column(String(500), nullable=True)
    banner_image_5 = Column(String(500), nullable=True)
    banner_image_6 = Column(String(500), nullable=True)
    banner_image_7 = Column(String(500), nullable=True)
    banner_image_8 = Column(String(500), nullable=True)
    banner_image_9 = Column(String(500), nullable=True)
    banner_image_10 = Column(String(500), nullable=True)
    digital_brochure = Column(String(500), nullable=True)
    testimonials_attachment = Column(String(500), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

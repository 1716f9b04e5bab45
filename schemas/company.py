from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime

NUMERIC_FIELDS = ("projects", "experience", "branches")


def _to_city_list(v):
    if v is None:
        return []
    if isinstance(v, (list, tuple)):
        values = v
    else:
        values = [v]
    return [str(city).strip() for city in values if str(city).strip()]


class CompanyFields(BaseModel):
    """Optional descriptive fields shared by create and update payloads."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    registered_company_name: Optional[str] = Field(None, max_length=255)
    name_display: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    age_of_company: Optional[str] = Field(None, max_length=100)
    official_website: Optional[str] = Field(None, max_length=500)
    full_name: Optional[str] = Field(None, max_length=255)
    designation: Optional[str] = Field(None, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=50)
    min_max_budget: Optional[str] = Field(None, max_length=100)
    type: Optional[str] = Field(None, max_length=100)
    discounts_offer_timeline: Optional[str] = Field(None, max_length=255)
    number_of_projects_completed: Optional[str] = Field(None, max_length=100)
    contact_email: Optional[str] = Field(None, max_length=255)
    google_rating: Optional[str] = Field(None, max_length=50)
    google_reviews: Optional[str] = Field(None, max_length=50)
    google_location: Optional[str] = Field(None, max_length=500)
    any_award_won: Optional[str] = Field(None, max_length=255)
    category_type: Optional[str] = Field(None, max_length=100)
    payment_type: Optional[str] = Field(None, max_length=100)
    assured: Optional[str] = Field(None, max_length=50)
    available_cities: Optional[List[str]] = None

    @model_validator(mode='before')
    @classmethod
    def drop_blank_numbers(cls, data):
        # Multipart forms send "" for untouched number inputs; treat that as absent
        if isinstance(data, dict):
            data = {
                key: value for key, value in data.items()
                if not (key in NUMERIC_FIELDS and isinstance(value, str) and not value.strip())
            }
        return data

    @field_validator('registered_company_name', 'name_display', 'full_name', 'designation')
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip() if v is not None else v

    @field_validator('available_cities', mode='before')
    @classmethod
    def normalize_cities(cls, v):
        return _to_city_list(v)


class CompanyCreate(CompanyFields):
    name: str = Field(..., max_length=255)
    projects: int = Field(..., ge=0)
    experience: int = Field(..., ge=0)
    branches: int = Field(..., ge=0)
    available_cities: List[str] = Field(default_factory=list)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name must not be empty')
        return v


class CompanyUpdate(CompanyFields):
    name: Optional[str] = Field(None, max_length=255)
    projects: Optional[int] = Field(None, ge=0)
    experience: Optional[int] = Field(None, ge=0)
    branches: Optional[int] = Field(None, ge=0)

    @field_validator('name', 'projects', 'experience', 'branches', mode='before')
    @classmethod
    def reject_null(cls, v):
        # These columns are NOT NULL; leave them out to keep the stored value
        if v is None:
            raise ValueError('Field must not be null')
        return v

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name must not be empty')
        return v


# Response schemas
class CompanyResponse(CompanyFields):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    name: str
    reviews: int = 0
    projects: int
    experience: int
    branches: int
    available_cities: List[str] = Field(default_factory=list)

    logo: Optional[str] = None
    banner_image_1: Optional[str] = None
    banner_image_2: Optional[str] = None
    banner_image_3: Optional[str] = None
    banner_image_4: Optional[str] = None
    banner_image_5: Optional[str] = None
    banner_image_6: Optional[str] = None
    banner_image_7: Optional[str] = None
    banner_image_8: Optional[str] = None
    banner_image_9: Optional[str] = None
    banner_image_10: Optional[str] = None
    digital_brochure: Optional[str] = None
    testimonials_attachment: Optional[str] = None

    created_at: datetime
    updated_at: Optional[datetime] = None


class CompanyListResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    companies: List[CompanyResponse]
    total_pages: int
    current_page: int
    total_companies: int


class MessageResponse(BaseModel):
    message: str

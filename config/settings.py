"""
Configuration for the Company Directory API
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _split_env(name: str, default: str) -> list:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Settings:
    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./company_directory.db")

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # API Configuration
    API_TITLE: str = "Company Directory API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = """
    Company directory backend with listing, search, pagination and
    file assets (logos, banners, brochures, testimonials).
    """

    # CORS
    CORS_ORIGINS: list = _split_env(
        "CORS_ORIGINS",
        "http://localhost:5173,http://localhost:3000"
    )

    # File Upload
    MAX_FILE_SIZE: int = int(os.getenv("MAX_FILE_SIZE", "10485760"))  # 10MB
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "./uploads")
    UPLOAD_URL_PREFIX: str = os.getenv("UPLOAD_URL_PREFIX", "/uploads")
    ALLOWED_UPLOAD_EXTENSIONS: list = _split_env(
        "ALLOWED_UPLOAD_EXTENSIONS",
        ".jpg,.jpeg,.png,.gif,.webp,.svg,.pdf,.doc,.docx,.mp4"
    )

    # Listing
    DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "6"))

    # Seeding
    SEED_SAMPLE_DATA: bool = os.getenv("SEED_SAMPLE_DATA", "False").lower() == "true"

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

# Global settings instance
settings = Settings()

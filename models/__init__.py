from database import Base
from .company import Company

__all__ = ["Base", "Company"]

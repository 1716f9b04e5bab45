from .company import (
    CompanyCreate, CompanyUpdate, CompanyResponse, CompanyListResponse, MessageResponse
)

__all__ = [
    "CompanyCreate", "CompanyUpdate", "CompanyResponse", "CompanyListResponse", "MessageResponse"
]

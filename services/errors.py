from typing import Dict, List, Optional


class CompanyServiceError(Exception):
    """Base class for failures raised by the company pipelines."""


class ValidationError(CompanyServiceError):
    """One or more submitted fields are missing or malformed.

    ``errors`` holds one ``{"field": ..., "reason": ...}`` entry per offending field.
    """

    def __init__(self, errors: List[Dict[str, str]]):
        self.errors = errors
        fields = ", ".join(error["field"] for error in errors)
        super().__init__(f"Validation failed for: {fields}")


class NotFoundError(CompanyServiceError):
    def __init__(self, company_id):
        self.company_id = company_id
        super().__init__(f"Company {company_id} not found")


class UploadError(CompanyServiceError):
    """The blob store rejected or failed to persist an uploaded file."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class StoreError(CompanyServiceError):
    """The record store is unavailable or rejected a write."""

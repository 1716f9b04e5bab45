from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile
from typing import Optional
import logging

from dependencies import get_db, get_blob_store
from schemas.company import CompanyListResponse, CompanyResponse, MessageResponse
from services import companies as company_service
from services.errors import NotFoundError, StoreError, UploadError, ValidationError
from services.storage import BlobStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/companies")

LIST_FIELDS = {"availableCities"}


async def read_company_form(request: Request):
    """Split a submitted company form into scalar fields and uploaded files.

    Accepts multipart/urlencoded forms (files keyed by asset form field) and
    plain JSON bodies without files.
    """
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Request body is not valid JSON")
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Request body must be a JSON object")
        return body, {}

    form = await request.form()
    fields, files = {}, {}
    for key in set(form.keys()):
        values = form.getlist(key)
        name = key[:-2] if key.endswith("[]") else key
        uploads = [value for value in values if isinstance(value, UploadFile)]
        if uploads:
            # Browsers send an empty file part for untouched file inputs
            if uploads[0].filename:
                files[name] = uploads[0]
        elif name in LIST_FIELDS:
            fields[name] = values
        else:
            fields[name] = values[-1]
    return fields, files


def to_http_error(error: Exception, action: str) -> HTTPException:
    if isinstance(error, ValidationError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Validation failed", "errors": error.errors}
        )
    if isinstance(error, UploadError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {error}"
    )


@router.get("/test")
async def test_route():
    return {"message": "Test route working"}


@router.get("", response_model=CompanyListResponse)
async def get_companies(
    search: Optional[str] = Query(None, description="Search name, registered name and description"),
    page: Optional[str] = Query(None, description="Page number (1-based)"),
    limit: Optional[str] = Query(None, description="Companies per page"),
    is_admin: Optional[str] = Query(None, alias="isAdmin", description="Return every company on one page"),
    db: Session = Depends(get_db)
):
    """Get companies newest first, paginated unless the admin view is requested."""
    admin_view = (is_admin or "").lower() in ("true", "1", "yes")
    try:
        return company_service.list_companies(db, search=search, page=page, limit=limit, is_admin=admin_view)
    except StoreError as e:
        raise to_http_error(e, "list companies")


@router.get("/getCompany/{company_id}", response_model=CompanyResponse)
@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(company_id: int, db: Session = Depends(get_db)):
    """Get a company by ID."""
    try:
        return company_service.get_company(db, company_id)
    except (NotFoundError, StoreError) as e:
        raise to_http_error(e, "fetch company")


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(
    request: Request,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store)
):
    """Create a company from form fields and uploaded assets."""
    fields, files = await read_company_form(request)
    try:
        return await company_service.create_company(db, store, fields, files)
    except (ValidationError, UploadError, StoreError) as e:
        logger.error(f"Failed to create company: {e}")
        raise to_http_error(e, "create company")


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: int,
    request: Request,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store)
):
    """Update the submitted fields of a company, replacing any re-uploaded assets."""
    fields, files = await read_company_form(request)
    try:
        return await company_service.update_company(db, store, company_id, fields, files)
    except (ValidationError, UploadError, NotFoundError, StoreError) as e:
        logger.error(f"Failed to update company {company_id}: {e}")
        raise to_http_error(e, "update company")


@router.delete("/{company_id}", response_model=MessageResponse)
async def delete_company(
    company_id: int,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store)
):
    """Delete a company and its stored assets."""
    try:
        return await company_service.delete_company(db, store, company_id)
    except (NotFoundError, StoreError) as e:
        raise to_http_error(e, "delete company")

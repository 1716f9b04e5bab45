"""Company listing, upsert and deletion pipelines.

The record store (SQLAlchemy session) and the blob store are kept consistent on
a best-effort basis only: a stored object is written onto a record after it
uploads successfully, and objects a record stops referencing are removed
afterwards. Failed removals are logged with the record id and slot so they can
be reconciled by hand; they never fail the request.
"""
import asyncio
import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import or_
from starlette.concurrency import run_in_threadpool

from config.settings import settings
from models.company import Company
from schemas.company import CompanyCreate, CompanyUpdate
from services.asset_fields import ASSET_SLOTS, AssetSlot, is_asset_form_field, populated_slots
from services.errors import NotFoundError, StoreError, UploadError, ValidationError
from services.storage import BlobStore

logger = logging.getLogger(__name__)


def _parse_positive_int(value: Any, default: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 1 else default


def _validate(schema, fields: Mapping[str, Any]):
    try:
        return schema.model_validate(dict(fields))
    except PydanticValidationError as e:
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"]) or "body",
                "reason": error["msg"],
            }
            for error in e.errors()
        ]
        raise ValidationError(errors) from e


def _get_or_raise(db: Session, company_id: int) -> Company:
    try:
        company = db.query(Company).filter(Company.id == company_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching company {company_id}: {e}")
        raise StoreError(str(e)) from e
    if not company:
        raise NotFoundError(company_id)
    return company


def _commit(db: Session, company: Company, action: str) -> None:
    try:
        db.commit()
        db.refresh(company)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {action} company: {e}")
        raise StoreError(str(e)) from e


async def _delete_assets(
    store: BlobStore,
    company_id: Optional[int],
    assets: Iterable[Tuple[AssetSlot, str]],
) -> int:
    """Delete every ``(slot, reference)`` concurrently; return how many failed.

    Each deletion is isolated from the others: a failure is logged and the
    remaining deletions still run to completion.
    """
    assets = list(assets)
    if not assets:
        return 0

    results = await asyncio.gather(
        *(run_in_threadpool(store.delete, reference) for _, reference in assets),
        return_exceptions=True,
    )

    failures = 0
    for (slot, reference), result in zip(assets, results):
        if isinstance(result, Exception):
            failures += 1
            logger.warning(
                f"Could not delete asset {reference} (company={company_id}, slot={slot.attribute}): {result}"
            )
    return failures


async def _upload_assets(
    store: BlobStore,
    files: Mapping[str, Any],
    company_id: Optional[int] = None,
) -> Dict[str, str]:
    """Upload each file sent for a registered slot; return ``{attribute: reference}``.

    If any upload fails, objects already stored by this call are discarded
    and ``UploadError`` is raised, so no reference to a missing file escapes.
    """
    for form_field in files:
        if not is_asset_form_field(form_field):
            logger.warning(f"Ignoring upload for unknown field '{form_field}'")

    uploaded: List[Tuple[AssetSlot, str]] = []
    for slot in ASSET_SLOTS:
        upload = files.get(slot.form_field)
        if upload is None or not getattr(upload, "filename", None):
            continue
        try:
            reference = await run_in_threadpool(
                store.save, upload.filename, upload.file, getattr(upload, "content_type", None)
            )
        except Exception as e:
            await _delete_assets(store, company_id, uploaded)
            if isinstance(e, UploadError):
                e.field = e.field or slot.form_field
                raise
            raise UploadError(f"Failed to upload {slot.form_field}: {e}", field=slot.form_field) from e
        uploaded.append((slot, reference))

    return {slot.attribute: reference for slot, reference in uploaded}


def _uploaded_pairs(uploaded: Mapping[str, str]) -> List[Tuple[AssetSlot, str]]:
    return [(slot, uploaded[slot.attribute]) for slot in ASSET_SLOTS if slot.attribute in uploaded]


def list_companies(
    db: Session,
    search: Optional[str] = None,
    page: Any = None,
    limit: Any = None,
    is_admin: bool = False,
) -> Dict[str, Any]:
    """List companies newest first.

    The admin view returns every record on a single page. The public view
    applies the optional case-insensitive search and paginates.
    """
    try:
        query = db.query(Company)
        ordering = (Company.created_at.desc(), Company.id.desc())

        if is_admin:
            companies = query.order_by(*ordering).all()
            return {
                "companies": companies,
                "total_pages": 1,
                "current_page": 1,
                "total_companies": len(companies),
            }

        page = _parse_positive_int(page, 1)
        limit = _parse_positive_int(limit, settings.DEFAULT_PAGE_SIZE)

        if search and search.strip():
            escaped = search.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            search_term = f"%{escaped}%"
            query = query.filter(
                or_(
                    Company.name.ilike(search_term, escape="\\"),
                    Company.registered_company_name.ilike(search_term, escape="\\"),
                    Company.description.ilike(search_term, escape="\\")
                )
            )

        total = query.count()
        companies = query.order_by(*ordering).offset((page - 1) * limit).limit(limit).all()

        return {
            "companies": companies,
            "total_pages": math.ceil(total / limit),
            "current_page": page,
            "total_companies": total,
        }
    except SQLAlchemyError as e:
        logger.error(f"Error listing companies: {e}")
        raise StoreError(str(e)) from e


def get_company(db: Session, company_id: int) -> Company:
    return _get_or_raise(db, company_id)


async def create_company(
    db: Session,
    store: BlobStore,
    fields: Mapping[str, Any],
    files: Mapping[str, Any],
) -> Company:
    """Validate, upload assets, then insert a new company."""
    payload = _validate(CompanyCreate, fields)
    uploaded = await _upload_assets(store, files)

    company = Company(**payload.model_dump(), **uploaded)
    db.add(company)
    try:
        _commit(db, company, "create")
    except StoreError:
        # The record never landed, so the fresh uploads belong to nothing
        await _delete_assets(store, None, _uploaded_pairs(uploaded))
        raise

    logger.info(f"Created company {company.id} ({company.name}) with {len(uploaded)} asset(s)")
    return company


async def update_company(
    db: Session,
    store: BlobStore,
    company_id: int,
    fields: Mapping[str, Any],
    files: Mapping[str, Any],
) -> Company:
    """Apply a partial update, replacing assets for every slot with a new upload.

    Fields absent from ``fields`` keep their stored values. The previous
    object of each replaced slot is removed best-effort once the write lands.
    """
    company = _get_or_raise(db, company_id)
    payload = _validate(CompanyUpdate, fields)
    changes = payload.model_dump(exclude_unset=True)

    uploaded = await _upload_assets(store, files, company_id)
    stale = [
        (slot, reference)
        for slot, reference in populated_slots(company)
        if slot.attribute in uploaded
    ]

    changes.update(uploaded)
    for key, value in changes.items():
        setattr(company, key, value)

    try:
        _commit(db, company, "update")
    except StoreError:
        await _delete_assets(store, company_id, _uploaded_pairs(uploaded))
        raise

    await _delete_assets(store, company_id, stale)

    logger.info(
        f"Updated company {company_id}: fields={sorted(changes)} replaced_assets={len(stale)}"
    )
    return company


async def delete_company(db: Session, store: BlobStore, company_id: int) -> Dict[str, str]:
    """Delete a company and every stored object it references."""
    company = _get_or_raise(db, company_id)

    failures = await _delete_assets(store, company_id, populated_slots(company))

    try:
        db.delete(company)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete company {company_id}: {e}")
        raise StoreError(str(e)) from e

    if failures:
        logger.warning(f"Company {company_id} deleted with {failures} asset(s) left in storage")
    else:
        logger.info(f"Deleted company {company_id}")
    return {"message": "Company deleted successfully"}

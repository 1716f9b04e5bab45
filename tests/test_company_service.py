from __future__ import annotations

import asyncio

import pytest
from sqlalchemy.exc import SQLAlchemyError

from conftest import company_form, make_upload
from models.company import Company
from services import companies as service
from services.errors import NotFoundError, StoreError, UploadError, ValidationError


def run(coro):
    return asyncio.run(coro)


def test_create_requires_name_and_numeric_fields(db, blob_store):
    form = company_form(projects="lots")
    del form["name"]

    with pytest.raises(ValidationError) as excinfo:
        run(service.create_company(db, blob_store, form, {"logo": make_upload("logo.png")}))

    fields = {error["field"] for error in excinfo.value.errors}
    assert fields == {"name", "projects"}
    assert db.query(Company).count() == 0
    # Invalid payloads never reach the blob store
    assert blob_store.saved == []


def test_create_rejects_blank_name_after_trimming(db, blob_store):
    with pytest.raises(ValidationError) as excinfo:
        run(service.create_company(db, blob_store, company_form(name="   "), {}))
    assert [error["field"] for error in excinfo.value.errors] == ["name"]


def test_create_normalizes_fields_and_stores_assets(db, blob_store):
    company = run(service.create_company(
        db,
        blob_store,
        company_form(name="  Acme  ", availableCities="Pune", registeredCompanyName=" Acme Pvt Ltd "),
        {"logo": make_upload("logo.png"), "bannerImage0": make_upload("b1.jpg")},
    ))

    assert company.id is not None
    assert company.created_at is not None
    assert company.name == "Acme"
    assert company.registered_company_name == "Acme Pvt Ltd"
    assert company.available_cities == ["Pune"]
    assert company.projects == 10
    assert company.reviews == 0
    assert company.description is None
    assert company.logo == blob_store.saved[0]
    assert company.banner_image_1 == blob_store.saved[1]
    assert company.banner_image_2 is None


def test_failed_upload_writes_no_record_and_discards_earlier_uploads(db, blob_store):
    blob_store.fail_saves.add("brochure.pdf")

    with pytest.raises(UploadError) as excinfo:
        run(service.create_company(
            db,
            blob_store,
            company_form(),
            {"logo": make_upload("logo.png"), "digitalBrochure": make_upload("brochure.pdf")},
        ))

    assert excinfo.value.field == "digitalBrochure"
    assert db.query(Company).count() == 0
    assert blob_store.deleted == blob_store.saved
    assert blob_store.objects == {}


def test_update_missing_company_is_not_found_before_any_upload(db, blob_store):
    with pytest.raises(NotFoundError):
        run(service.update_company(db, blob_store, 999, {"name": "x"}, {"logo": make_upload("l.png")}))
    assert blob_store.saved == []


def test_update_leaves_absent_and_blank_numeric_fields_untouched(db, blob_store):
    company = run(service.create_company(db, blob_store, company_form(), {}))

    updated = run(service.update_company(
        db, blob_store, company.id, {"projects": "", "availableCities": ["Goa", "Delhi"]}, {}
    ))

    assert updated.projects == 10
    assert updated.experience == 5
    assert updated.available_cities == ["Goa", "Delhi"]


def test_update_rejects_non_numeric_values(db, blob_store):
    company = run(service.create_company(db, blob_store, company_form(), {}))

    with pytest.raises(ValidationError) as excinfo:
        run(service.update_company(db, blob_store, company.id, {"branches": "many"}, {}))

    assert excinfo.value.errors[0]["field"] == "branches"
    db.refresh(company)
    assert company.branches == 2


def test_update_upload_failure_keeps_existing_asset(db, blob_store):
    company = run(service.create_company(db, blob_store, company_form(), {"logo": make_upload("old.png")}))
    old_logo = company.logo
    blob_store.fail_saves.add("new.png")

    with pytest.raises(UploadError):
        run(service.update_company(db, blob_store, company.id, {}, {"logo": make_upload("new.png")}))

    db.refresh(company)
    assert company.logo == old_logo
    assert blob_store.deleted == []


def test_list_search_is_case_insensitive_across_text_fields(db, blob_store):
    run(service.create_company(db, blob_store, company_form(name="Blue Oak"), {}))
    run(service.create_company(db, blob_store, company_form(name="Red Pine", description="OAK flooring"), {}))
    run(service.create_company(db, blob_store, company_form(name="Granite Co"), {}))

    result = service.list_companies(db, search="oak", page="1", limit="10")

    assert result["total_companies"] == 2
    assert {company.name for company in result["companies"]} == {"Blue Oak", "Red Pine"}


def test_list_falls_back_to_defaults_for_bad_paging(db, blob_store):
    for index in range(8):
        run(service.create_company(db, blob_store, company_form(name=f"Co {index}"), {}))

    result = service.list_companies(db, page="abc", limit="-3")

    assert result["current_page"] == 1
    assert len(result["companies"]) == 6
    assert result["total_pages"] == 2


def test_update_rejects_null_for_required_columns(db, blob_store):
    company = run(service.create_company(db, blob_store, company_form(), {}))

    with pytest.raises(ValidationError) as excinfo:
        run(service.update_company(db, blob_store, company.id, {"name": None, "projects": None}, {}))

    assert {error["field"] for error in excinfo.value.errors} == {"name", "projects"}
    db.refresh(company)
    assert company.name == "Acme Interiors"
    assert company.projects == 10


def test_search_treats_wildcards_literally(db, blob_store):
    for name in ("50% Off", "Alpha", "Under_score Ltd", "Underscore Ltd"):
        run(service.create_company(db, blob_store, company_form(name=name), {}))

    percent = service.list_companies(db, search="%", limit="10")
    underscore = service.list_companies(db, search="_", limit="10")

    assert [company.name for company in percent["companies"]] == ["50% Off"]
    assert [company.name for company in underscore["companies"]] == ["Under_score Ltd"]


def _failing_commit():
    raise SQLAlchemyError("database is locked")


def test_failed_insert_discards_fresh_uploads(db, blob_store, monkeypatch):
    monkeypatch.setattr(db, "commit", _failing_commit)

    with pytest.raises(StoreError):
        run(service.create_company(
            db,
            blob_store,
            company_form(),
            {"logo": make_upload("logo.png"), "bannerImage0": make_upload("b1.png")},
        ))

    assert len(blob_store.saved) == 2
    assert sorted(blob_store.deleted) == sorted(blob_store.saved)
    assert blob_store.objects == {}
    monkeypatch.undo()
    assert db.query(Company).count() == 0


def test_failed_update_keeps_old_asset_and_discards_new_upload(db, blob_store, monkeypatch):
    company = run(service.create_company(db, blob_store, company_form(), {"logo": make_upload("old.png")}))
    old_logo = company.logo
    monkeypatch.setattr(db, "commit", _failing_commit)

    with pytest.raises(StoreError):
        run(service.update_company(
            db, blob_store, company.id, {"description": "x"}, {"logo": make_upload("new.png")}
        ))

    new_logo = blob_store.saved[-1]
    assert blob_store.deleted == [new_logo]
    assert old_logo in blob_store.objects
    monkeypatch.undo()
    db.refresh(company)
    assert company.logo == old_logo
    assert company.description is None


def test_list_surfaces_store_failure(db, monkeypatch):
    def broken_query(*args, **kwargs):
        raise SQLAlchemyError("connection refused")

    monkeypatch.setattr(db, "query", broken_query)

    with pytest.raises(StoreError):
        service.list_companies(db)

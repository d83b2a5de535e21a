"""
Template catalogue and request validation before any AI call.
"""
from unittest.mock import AsyncMock

import pytest

from legallylegit.errors import FormValidationError, UnknownTemplateError
from legallylegit.models.templates import JURISDICTIONS, TEMPLATES, get_template, validate_form_data
from legallylegit.services.document_service import DocumentService, resolve_request


def complete_form(template):
    return {field: f"value for {field}" for field in template.fields}


def test_catalogue_shape():
    assert {t.template_id for t in TEMPLATES} == {
        "employment", "contractor", "service", "privacy", "website-terms", "nda",
    }
    assert len(JURISDICTIONS) == 8
    for template in TEMPLATES:
        assert template.fields


def test_complete_form_has_no_errors():
    template = get_template("employment")
    assert validate_form_data(template, complete_form(template)) == {}


def test_missing_and_blank_fields_reported():
    template = get_template("nda")
    form = complete_form(template)
    del form["disclosingParty"]
    form["term"] = "   "
    errors = validate_form_data(template, form)
    assert set(errors) == {"disclosingParty", "term"}


def test_unknown_field_reported():
    template = get_template("nda")
    form = {**complete_form(template), "salary": "100k"}
    assert "salary" in validate_form_data(template, form)


def test_resolve_request_keeps_clause_selection_order():
    template = get_template("contractor")
    _, clauses = resolve_request(
        "contractor",
        complete_form(template),
        "New South Wales",
        ["restraint-of-trade", "ip-assignment", "restraint-of-trade"],
    )
    assert [c.clause_id for c in clauses] == ["restraint-of-trade", "ip-assignment"]


def test_resolve_request_rejects_bad_jurisdiction_and_clause():
    template = get_template("privacy")
    with pytest.raises(FormValidationError) as exc_info:
        resolve_request("privacy", complete_form(template), "Auckland", ["restraint-of-trade"])
    assert "jurisdiction" in exc_info.value.fields
    assert "optional_clauses.restraint-of-trade" in exc_info.value.fields


def test_unknown_template():
    with pytest.raises(UnknownTemplateError):
        resolve_request("lease", {}, "Victoria")


@pytest.mark.asyncio
async def test_invalid_form_never_reaches_the_generator(store):
    generator = AsyncMock()
    service = DocumentService(store=store, generator=generator, entitlements=AsyncMock())
    with pytest.raises(FormValidationError):
        await service.generate("owner@example.com", "privacy", {"businessName": "Acme"}, "Victoria")
    generator.generate.assert_not_called()

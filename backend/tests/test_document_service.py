"""
Document lifecycle: generate -> save -> resave -> download, with entitlements.
"""
from unittest.mock import AsyncMock

import pytest

from legallylegit.models.documents import GeneratedDocument
from legallylegit.models.products import get_product
from legallylegit.models.profile import EntitlementAction
from legallylegit.models.risk import RiskAnalysis
from legallylegit.models.templates import get_template
from legallylegit.services.document_service import DocumentNotFound, DocumentService
from legallylegit.services.session_store import profile_key

pytestmark = pytest.mark.asyncio

EMAIL = "owner@example.com"


def generated(text="## Services\nWe deliver coffee.", template_id="service"):
    template = get_template(template_id)
    return GeneratedDocument(
        template_id=template_id,
        jurisdiction="Victoria",
        document_text=text,
        risk_analysis=RiskAnalysis(score=12, level="Low", summary="Clear terms.", breakdown=[]),
        form_data={field: "x" for field in template.fields},
    )


@pytest.fixture
def generator():
    mock = AsyncMock()
    mock.generate = AsyncMock(side_effect=lambda *args, **kwargs: generated())
    return mock


@pytest.fixture
def service(store, generator, entitlements):
    return DocumentService(store=store, generator=generator, entitlements=entitlements)


async def generate(service):
    template = get_template("service")
    return await service.generate(EMAIL, "service", {f: "x" for f in template.fields}, "Victoria")


async def test_generation_is_not_charged(service, entitlements):
    before, _ = await entitlements.create_profile(EMAIL)
    draft = await generate(service)
    assert await service.get_generation(EMAIL, draft.generation_id) == draft
    after = await entitlements.require_profile(EMAIL)
    assert (after.available_ai_queries, after.purchased_doc_slots) == (
        before.available_ai_queries, before.purchased_doc_slots
    )


async def test_free_tier_without_slots_cannot_save(service, entitlements):
    await entitlements.create_profile(EMAIL)
    draft = await generate(service)

    document, exhausted = await service.save(EMAIL, draft.generation_id)

    assert document is None
    assert exhausted.action == EntitlementAction.DOCUMENT_SAVE
    assert await service.list_documents(EMAIL) == []


async def test_resave_same_document_charges_once(service, entitlements):
    await entitlements.create_profile(EMAIL)
    profile = await entitlements.require_profile(EMAIL)
    await entitlements.store.set(
        profile_key(EMAIL), profile.model_copy(update={"purchased_doc_slots": 1})
    )

    first = await generate(service)
    document, exhausted = await service.save(EMAIL, first.generation_id)
    assert exhausted is None
    assert (await entitlements.require_profile(EMAIL)).purchased_doc_slots == 0

    second = await generate(service)
    resaved, exhausted = await service.save(EMAIL, second.generation_id, document.document_id)

    assert exhausted is None
    assert resaved.document_id == document.document_id
    assert resaved.created_at == document.created_at
    assert resaved.version == "1.1"
    assert (await entitlements.require_profile(EMAIL)).purchased_doc_slots == 0
    assert len(await service.list_documents(EMAIL)) == 1


async def test_resave_unknown_document(service, entitlements):
    await entitlements.create_profile(EMAIL)
    draft = await generate(service)
    with pytest.raises(DocumentNotFound):
        await service.save(EMAIL, draft.generation_id, "LLD-MISSING")


async def test_free_tier_downloads_once(service, entitlements):
    await entitlements.create_profile(EMAIL)
    await entitlements.apply_purchase(EMAIL, get_product("launchpad"), reference_id="cs_1")
    draft = await generate(service)
    document, _ = await service.save(EMAIL, draft.generation_id)

    released, exhausted = await service.download(EMAIL, document.document_id)
    assert exhausted is None
    assert released.downloaded is True
    assert released.download_filename == "Client-Service-Agreement-v1.0.md"

    again, exhausted = await service.download(EMAIL, document.document_id)
    assert again is None
    assert exhausted.action == EntitlementAction.DOCUMENT_DOWNLOAD


async def test_resave_keeps_downloaded_flag(service, entitlements):
    await entitlements.create_profile(EMAIL)
    await entitlements.apply_purchase(EMAIL, get_product("launchpad"), reference_id="cs_1")
    document, _ = await service.save(EMAIL, (await generate(service)).generation_id)
    await service.download(EMAIL, document.document_id)

    resaved, _ = await service.save(EMAIL, (await generate(service)).generation_id, document.document_id)
    assert resaved.downloaded is True


async def test_pro_downloads_unlimited(service, entitlements):
    await entitlements.create_profile(EMAIL)
    await entitlements.apply_purchase(EMAIL, get_product("pro"), reference_id="cs_pro")
    document, _ = await service.save(EMAIL, (await generate(service)).generation_id)

    for _ in range(3):
        released, exhausted = await service.download(EMAIL, document.document_id)
        assert exhausted is None
        assert released.downloaded is False

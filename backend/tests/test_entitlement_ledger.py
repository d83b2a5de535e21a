"""
Entitlement ledger rules (pure, no I/O).
"""
import pytest

from legallylegit.errors import InvalidProfileState
from legallylegit.models.documents import SavedDocument
from legallylegit.models.products import get_product
from legallylegit.models.profile import EntitlementAction, SubscriptionTier, UserProfile
from legallylegit.models.risk import RiskAnalysis
from legallylegit.services.entitlement_ledger import EntitlementLedger

ledger = EntitlementLedger()


def make_profile(plan=SubscriptionTier.FREE, queries=0, slots=0):
    return UserProfile(
        email="owner@example.com",
        subscription_plan=plan,
        available_ai_queries=queries,
        purchased_doc_slots=slots,
    )


def make_document(downloaded=False):
    return SavedDocument(
        template_id="nda",
        template_title="Non-Disclosure Agreement",
        jurisdiction="Victoria",
        document_text="## Confidentiality",
        risk_analysis=RiskAnalysis(score=5, level="Low", summary="Fine.", breakdown=[]),
        downloaded=downloaded,
    )


class TestAiQuery:
    def test_free_tier_with_queries_consumes_one(self):
        profile = make_profile(queries=3)
        assert ledger.can_consume(profile, EntitlementAction.AI_QUERY)
        updated, exhausted = ledger.consume(profile, EntitlementAction.AI_QUERY)
        assert exhausted is None
        assert updated.available_ai_queries == 2
        assert profile.available_ai_queries == 3

    def test_free_tier_without_queries_is_exhausted(self):
        profile = make_profile(queries=0)
        assert ledger.can_consume(profile, EntitlementAction.AI_QUERY) is False
        updated, exhausted = ledger.consume(profile, EntitlementAction.AI_QUERY)
        assert updated is profile
        assert exhausted.action == EntitlementAction.AI_QUERY
        assert exhausted.upgrade_url == "/pricing"

    def test_pro_never_decrements(self):
        profile = make_profile(plan=SubscriptionTier.PRO, queries=0)
        updated, exhausted = ledger.consume(profile, EntitlementAction.AI_QUERY)
        assert exhausted is None
        assert updated.available_ai_queries == 0


class TestDocumentSave:
    def test_first_save_needs_and_consumes_slot(self):
        profile = make_profile(slots=1)
        updated, exhausted = ledger.consume(profile, EntitlementAction.DOCUMENT_SAVE)
        assert exhausted is None
        assert updated.purchased_doc_slots == 0

    def test_first_save_without_slot_exhausted(self):
        _, exhausted = ledger.consume(make_profile(slots=0), EntitlementAction.DOCUMENT_SAVE)
        assert exhausted is not None
        assert exhausted.action == EntitlementAction.DOCUMENT_SAVE

    def test_resave_is_free_even_without_slots(self):
        profile = make_profile(slots=0)
        updated, exhausted = ledger.consume(profile, EntitlementAction.DOCUMENT_SAVE, already_saved=True)
        assert exhausted is None
        assert updated.purchased_doc_slots == 0

    def test_pro_save_unlimited(self):
        profile = make_profile(plan=SubscriptionTier.PRO)
        for _ in range(3):
            profile, exhausted = ledger.consume(profile, EntitlementAction.DOCUMENT_SAVE)
            assert exhausted is None
        assert profile.purchased_doc_slots == 0


class TestDocumentDownload:
    def test_free_tier_downloads_once(self):
        profile = make_profile()
        document = make_document()
        assert ledger.can_consume(profile, EntitlementAction.DOCUMENT_DOWNLOAD, document=document)

        released = ledger.mark_downloaded(profile, document)
        assert released.downloaded is True
        assert ledger.can_consume(profile, EntitlementAction.DOCUMENT_DOWNLOAD, document=released) is False

    def test_pro_downloads_ignore_flag(self):
        profile = make_profile(plan=SubscriptionTier.PRO)
        document = make_document(downloaded=True)
        assert ledger.can_consume(profile, EntitlementAction.DOCUMENT_DOWNLOAD, document=document)
        assert ledger.mark_downloaded(profile, make_document()).downloaded is False

    def test_download_requires_document(self):
        with pytest.raises(ValueError):
            ledger.check(make_profile(), EntitlementAction.DOCUMENT_DOWNLOAD)


class TestMalformedProfile:
    @pytest.mark.parametrize("queries,slots", [(-1, 0), (0, -2)])
    def test_negative_counters_raise(self, queries, slots):
        profile = make_profile(queries=queries, slots=slots)
        with pytest.raises(InvalidProfileState):
            ledger.can_consume(profile, EntitlementAction.AI_QUERY)


class TestPurchases:
    def test_launchpad_grants_credits(self):
        updated = ledger.apply_purchase(make_profile(queries=5), get_product("launchpad"))
        assert updated.purchased_doc_slots == 5
        assert updated.available_ai_queries == 105
        assert updated.subscription_plan == SubscriptionTier.FREE

    def test_ultimate_grants_credits(self):
        updated = ledger.apply_purchase(make_profile(), get_product("ultimate"))
        assert (updated.purchased_doc_slots, updated.available_ai_queries) == (15, 300)

    def test_pro_upgrades_tier(self):
        updated = ledger.apply_purchase(make_profile(), get_product("pro"))
        assert updated.is_pro

    def test_downgrade_keeps_counters(self):
        profile = make_profile(plan=SubscriptionTier.PRO, queries=7, slots=2)
        updated = ledger.apply_downgrade(profile)
        assert updated.subscription_plan == SubscriptionTier.FREE
        assert (updated.available_ai_queries, updated.purchased_doc_slots) == (7, 2)

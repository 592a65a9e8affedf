# ============================================================================
# DOMAIN MODEL TESTS
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Tests - Logo, history and catalog model unit tests
# PURPOSE: Verify enums, revision invariants, display rules, pagination math
# CREATED: 14 OCT 2026
# ============================================================================
"""
Domain Model Tests

Unit tests for the domain layer:
- Enums: LoaderState, ExportFormat, CatalogOutcome
- Models: LogoMetadata, LogoPayload, LogoGroup
- Pagination math and pager window
- Catalog flag serialization

Run with:
    pytest tests/test_domain_models.py -v
"""

import pytest
from pydantic import ValidationError

from core.contracts import CatalogOutcome, ExportFormat, LoaderState, MAX_REVISIONS
from core.models.catalog import CatalogAddResult, CatalogFlag
from core.models.history import OwnerUsage, PageQuery, PaginationState
from core.models.logo import LogoGroup, LogoMetadata, LogoParameters, LogoPayload


# ============================================================================
# HELPERS
# ============================================================================

def _make_original(logo_id="orig", name="Acme", company="Acme Inc", created_at=1_700_000_000_000):
    return LogoMetadata(
        id=logo_id,
        owner_id="owner@example.com",
        name=name,
        created_at=created_at,
        parameters=LogoParameters(company_name=company, industry="Tech"),
    )


def _make_revision(number, original_id="orig", name="Untitled"):
    return LogoMetadata(
        id=f"{original_id}_r{number}",
        owner_id="owner@example.com",
        name=name,
        created_at=1_700_000_000_000 + number,
        is_revision=True,
        original_logo_id=original_id,
        revision_number=number,
    )


# ============================================================================
# ENUM TESTS
# ============================================================================

class TestLoaderState:
    def test_values(self):
        assert LoaderState.IDLE.value == "idle"
        assert LoaderState.LOADING.value == "loading"
        assert LoaderState.LOADED.value == "loaded"
        assert LoaderState.ERROR.value == "error"

    def test_is_terminal(self):
        assert not LoaderState.IDLE.is_terminal()
        assert not LoaderState.LOADING.is_terminal()
        assert LoaderState.LOADED.is_terminal()
        assert LoaderState.ERROR.is_terminal()

    def test_transitions(self):
        assert LoaderState.IDLE.can_transition_to(LoaderState.LOADING)
        assert not LoaderState.IDLE.can_transition_to(LoaderState.LOADED)
        assert LoaderState.LOADING.can_transition_to(LoaderState.LOADED)
        assert LoaderState.LOADING.can_transition_to(LoaderState.ERROR)
        assert not LoaderState.LOADED.can_transition_to(LoaderState.LOADING)
        assert not LoaderState.ERROR.can_transition_to(LoaderState.IDLE)


class TestOtherEnums:
    def test_export_formats(self):
        assert [f.value for f in ExportFormat] == ["png", "jpg", "svg"]

    def test_catalog_outcomes(self):
        assert CatalogOutcome.CONFLICT.value == "conflict"


# ============================================================================
# LOGO MODELS
# ============================================================================

class TestLogoMetadata:
    def test_blank_name_becomes_placeholder(self):
        assert _make_original(name="   ").name == "Untitled"
        assert _make_original(name=None).name == "Untitled"

    def test_original_must_not_carry_revision_fields(self):
        with pytest.raises(ValidationError):
            LogoMetadata(
                id="x", owner_id="o", created_at=1,
                original_logo_id="parent",
            )

    def test_revision_requires_parent_and_number(self):
        with pytest.raises(ValidationError):
            LogoMetadata(id="x", owner_id="o", created_at=1, is_revision=True)
        with pytest.raises(ValidationError):
            LogoMetadata(
                id="x", owner_id="o", created_at=1,
                is_revision=True, original_logo_id="p", revision_number=0,
            )

    def test_matches_text_on_name_or_company(self):
        logo = _make_original(name="Rocket", company="Acme Inc")
        assert logo.matches_text("rock")
        assert logo.matches_text("ACME")
        assert not logo.matches_text("globex")

    def test_created_date_is_utc(self):
        # 2023-11-14T22:13:20Z
        assert _make_original(created_at=1_700_000_000_000).created_date() == "2023-11-14"

    def test_parameters_accept_camel_case_and_keep_extras(self):
        params = LogoParameters.model_validate(
            {"companyName": "Acme", "colors": ["#fff"], "industry": "Tech"}
        )
        assert params.company_name == "Acme"
        assert params.to_store() == {
            "companyName": "Acme", "industry": "Tech", "colors": ["#fff"],
        }


class TestLogoPayload:
    def test_to_metadata_drops_image(self):
        payload = LogoPayload(
            id="x", owner_id="o", created_at=1, image_data_uri="data:image/png;base64,AA",
        )
        metadata = payload.to_metadata()
        assert type(metadata) is LogoMetadata
        assert not hasattr(metadata, "image_data_uri")


class TestLogoGroup:
    def test_displayed_is_original_without_revisions(self):
        group = LogoGroup(original=_make_original())
        assert group.displayed.id == "orig"
        assert group.latest_revision is None

    def test_displayed_is_highest_revision_number(self):
        group = LogoGroup(
            original=_make_original(),
            revisions=[_make_revision(2), _make_revision(1)],
        )
        assert group.displayed.id == "orig_r2"

    def test_revision_cap_disables_create_revision(self):
        group = LogoGroup(original=_make_original(), revisions=[_make_revision(1), _make_revision(2)])
        assert group.can_create_revision is True

        group = LogoGroup(
            original=_make_original(),
            revisions=[_make_revision(n) for n in range(1, MAX_REVISIONS + 1)],
        )
        assert group.can_create_revision is False

    def test_members_and_contains(self):
        group = LogoGroup(original=_make_original(), revisions=[_make_revision(1)])
        assert [m.id for m in group.members()] == ["orig", "orig_r1"]
        assert group.contains("orig_r1")
        assert not group.contains("other")

    def test_serializes_computed_fields(self):
        data = LogoGroup(original=_make_original()).model_dump()
        assert data["displayed"]["id"] == "orig"
        assert data["can_create_revision"] is True


# ============================================================================
# PAGINATION
# ============================================================================

class TestPaginationState:
    def test_compute(self):
        state = PaginationState.compute(1, 3, 7)
        assert (state.page, state.total, state.total_pages, state.has_more) == (1, 7, 3, True)

    def test_clamps_high_and_low(self):
        assert PaginationState.compute(99, 3, 7).page == 3
        assert PaginationState.compute(0, 3, 7).page == 1

    def test_zero_total_has_one_page(self):
        state = PaginationState.compute(5, 3, 0)
        assert state.total_pages == 1
        assert state.page == 1
        assert state.has_more is False

    def test_slice_bounds(self):
        state = PaginationState.compute(2, 3, 7)
        assert (state.start_index, state.end_index) == (3, 6)

    def test_page_window(self):
        assert PaginationState.compute(1, 3, 3).page_window() == []
        assert PaginationState.compute(1, 1, 10).page_window() == [1, 2, 3, 4, 5]
        assert PaginationState.compute(6, 1, 10).page_window() == [4, 5, 6, 7, 8]
        assert PaginationState.compute(10, 1, 10).page_window() == [8, 9, 10]
        assert PaginationState.compute(2, 1, 3).page_window() == [1, 2, 3]


class TestPageQuery:
    def test_filters(self):
        assert not PageQuery().has_filters
        assert not PageQuery(search_term="   ").has_filters
        assert PageQuery(search_term=" Acme ").normalized_search == "acme"
        assert PageQuery(industry="Tech").has_filters

    def test_same_filters_ignores_page(self):
        assert PageQuery(page=1).same_filters(PageQuery(page=4))
        assert not PageQuery(page_size=3).same_filters(PageQuery(page_size=6))


class TestOwnerUsage:
    def test_can_create_original(self):
        assert OwnerUsage(logos_created=2, logos_limit=3).can_create_original
        assert not OwnerUsage(logos_created=3, logos_limit=3).can_create_original


# ============================================================================
# CATALOG MODELS
# ============================================================================

class TestCatalogModels:
    def test_flag_aliases(self):
        flag = CatalogFlag.model_validate({"logoId": "a", "isInCatalog": True, "catalogCode": "X1"})
        assert flag.is_in_catalog and flag.catalog_code == "X1"
        assert flag.to_storage() == {"isInCatalog": True, "catalogCode": "X1"}

    def test_add_result_confirmed(self):
        assert CatalogAddResult(outcome=CatalogOutcome.ADDED).confirmed
        assert CatalogAddResult(outcome=CatalogOutcome.CONFLICT).confirmed
        assert not CatalogAddResult(outcome=CatalogOutcome.FAILED).confirmed

"""Tests for the compatibility resolution engine."""

import pytest

from transceiver_compat.engine import (
    SEARCH_FAILED_MESSAGE,
    find_candidate_parts,
    find_slots,
    resolve,
    search,
)
from transceiver_compat.errors import LoadError, QueryFault
from transceiver_compat.models import (
    CompatibilityEntry,
    Database,
    Product,
    SwitchBayEntry,
)


def _product(sku: str | None, oem: str | None, **attrs) -> Product:
    return Product(sku_id=sku, oem_part_number=oem, **attrs)


@pytest.fixture
def db() -> Database:
    return Database(
        products=(
            _product("SKU-A", "OEM-100", description="10G SR"),
            _product("SKU-B", "OEM-200", description="10G LR"),
            _product("SKU-C", "OEM-300", description="1G SX"),
            _product("SKU-A2", "OEM-100", description="10G SR, extended temp"),
        ),
        compatibility=(
            CompatibilityEntry("Module_1", "OEM-100"),
            CompatibilityEntry("Module_1", "OEM-200"),
            CompatibilityEntry("Fixed_4x_1G_SFP", "OEM-300"),
            CompatibilityEntry("Module_2", "OEM-999"),  # no catalog product
        ),
        switch_bays=(
            SwitchBayEntry("C9300-48P", "Module_1"),
            SwitchBayEntry("C9300-48P", "Module_2"),
            SwitchBayEntry("C9300-48P", "Fixed_4x_1G_SFP"),
            SwitchBayEntry("C9200-24T", "Fixed_4x_1G_SFP"),
        ),
    )


class TestResolve:
    """Test the three-stage switch -> slot -> part -> product join."""

    def test_minimal_example(self):
        db = Database(
            products=(_product("SKU-A", "OEM-100"),),
            compatibility=(CompatibilityEntry("Module_1", "OEM-100"),),
            switch_bays=(SwitchBayEntry("C9300-48P", "Module_1"),),
        )
        groups = resolve(db, "c9300-48p")
        assert len(groups) == 1
        assert groups[0].module_or_port_id == "Module_1"
        assert [p.sku_id for p in groups[0].products] == ["SKU-A"]
        assert groups[0].products[0].oem_part_number == "OEM-100"

    def test_unknown_model(self, db):
        assert resolve(db, "C9300-24P") == []

    def test_group_order_follows_slot_order(self, db):
        groups = resolve(db, "C9300-48P")
        # Module_2 only accepts a part with no product, so it is omitted
        assert [g.module_or_port_id for g in groups] == ["Module_1", "Fixed_4x_1G_SFP"]

    def test_product_order_follows_catalog_order(self, db):
        groups = resolve(db, "C9300-48P")
        assert [p.sku_id for p in groups[0].products] == ["SKU-A", "SKU-B", "SKU-A2"]

    def test_all_skus_for_shared_oem_part_returned(self, db):
        groups = resolve(db, "C9300-48P")
        skus = {p.sku_id for p in groups[0].products if p.oem_part_number == "OEM-100"}
        assert skus == {"SKU-A", "SKU-A2"}

    def test_slot_kind_tagged(self, db):
        groups = resolve(db, "C9300-48P")
        assert groups[0].slot.kind == "module"
        assert groups[1].slot.kind == "fixed"
        assert groups[1].slot.label == "4x 1G SFP"

    def test_group_omitted_when_no_products(self, db):
        groups = resolve(db, "C9300-48P")
        assert "Module_2" not in [g.module_or_port_id for g in groups]

    def test_same_product_in_two_groups(self):
        db = Database(
            products=(_product("SKU-A", "OEM-100"),),
            compatibility=(
                CompatibilityEntry("Module_1", "OEM-100"),
                CompatibilityEntry("Module_2", "OEM-100"),
            ),
            switch_bays=(
                SwitchBayEntry("SW-1", "Module_1"),
                SwitchBayEntry("SW-1", "Module_2"),
            ),
        )
        groups = resolve(db, "SW-1")
        assert len(groups) == 2
        assert groups[0].products == groups[1].products

    def test_duplicate_slot_rows_produce_duplicate_groups(self):
        db = Database(
            products=(_product("SKU-A", "OEM-100"),),
            compatibility=(CompatibilityEntry("Module_1", "OEM-100"),),
            switch_bays=(
                SwitchBayEntry("SW-1", "Module_1"),
                SwitchBayEntry("SW-1", "Module_1"),
            ),
        )
        groups = resolve(db, "SW-1")
        assert len(groups) == 2
        assert groups[0] == groups[1]

    def test_group_keeps_raw_slot_id(self):
        db = Database(
            products=(_product("SKU-A", "OEM-100"),),
            compatibility=(CompatibilityEntry("MODULE_1", "OEM-100"),),
            switch_bays=(SwitchBayEntry("SW-1", "module_1"),),
        )
        groups = resolve(db, "SW-1")
        assert groups[0].module_or_port_id == "module_1"


class TestCaseInsensitivity:
    """Keys compare trimmed and upper-cased."""

    @pytest.mark.parametrize("query", [
        "C9300-48P", "c9300-48p", "C9300-48p", "  c9300-48P  ", "\tC9300-48P\n",
    ])
    def test_query_casing_variants(self, db, query):
        assert resolve(db, query) == resolve(db, "C9300-48P")

    def test_device_id_casing(self):
        db = Database(
            products=(_product("SKU-A", "OEM-100"),),
            compatibility=(CompatibilityEntry("c9300-nm-8x", "OEM-100"),),
            switch_bays=(SwitchBayEntry("SW-1", "C9300-NM-8X"),),
        )
        assert len(resolve(db, "sw-1")) == 1

    def test_oem_part_number_casing(self):
        db = Database(
            products=(_product("SKU-A", "sfp-10g-sr"),),
            compatibility=(CompatibilityEntry("Module_1", "SFP-10G-SR "),),
            switch_bays=(SwitchBayEntry("SW-1", "Module_1"),),
        )
        groups = resolve(db, "SW-1")
        assert [p.sku_id for p in groups[0].products] == ["SKU-A"]

    def test_switch_model_whitespace_in_data(self):
        db = Database(
            products=(_product("SKU-A", "OEM-100"),),
            compatibility=(CompatibilityEntry("Module_1", "OEM-100"),),
            switch_bays=(SwitchBayEntry(" sw-1 ", "Module_1"),),
        )
        assert len(resolve(db, "SW-1")) == 1


class TestEmptyQuery:
    """Blank queries and missing snapshots are 'no results', not errors."""

    @pytest.mark.parametrize("query", ["", "   ", "\t\n", None])
    def test_blank_query(self, db, query):
        assert resolve(db, query) == []

    def test_no_snapshot(self):
        assert resolve(None, "C9300-48P") == []


class TestDeduplication:
    """Many-to-many edges must not duplicate products within a group."""

    def test_same_part_listed_twice_for_slot(self):
        db = Database(
            products=(_product("SKU-A", "OEM-100"), _product("SKU-B", "OEM-200")),
            compatibility=(
                CompatibilityEntry("Module_1", "OEM-100"),
                CompatibilityEntry("Module_1", "OEM-100"),
                CompatibilityEntry("Module_1", "OEM-200"),
            ),
            switch_bays=(SwitchBayEntry("SW-1", "Module_1"),),
        )
        groups = resolve(db, "SW-1")
        assert [p.sku_id for p in groups[0].products] == ["SKU-A", "SKU-B"]

    def test_device_id_aliases_collapse(self):
        """Two spellings of the same device id map to one candidate set."""
        db = Database(
            products=(_product("SKU-A", "OEM-100"),),
            compatibility=(
                CompatibilityEntry("Module_1", "OEM-100"),
                CompatibilityEntry("MODULE_1", "oem-100"),
            ),
            switch_bays=(SwitchBayEntry("SW-1", "Module_1"),),
        )
        groups = resolve(db, "SW-1")
        assert len(groups[0].products) == 1

    def test_find_candidate_parts_is_canonical_set(self):
        db = Database(
            compatibility=(
                CompatibilityEntry("Module_1", "OEM-100"),
                CompatibilityEntry("module_1", "oem-100"),
                CompatibilityEntry("Module_1", None),
            ),
        )
        assert find_candidate_parts(db, "MODULE_1") == {"OEM-100"}


class TestMalformedRows:
    """Rows with missing or non-string keys are skipped."""

    def test_malformed_rows_do_not_change_output(self, db):
        baseline = resolve(db, "C9300-48P")
        noisy = Database(
            products=db.products + (_product("SKU-X", None), _product(None, None)),
            compatibility=db.compatibility + (
                CompatibilityEntry(None, "OEM-100"),
                CompatibilityEntry("Module_1", None),
            ),
            switch_bays=db.switch_bays + (
                SwitchBayEntry(None, "Module_1"),
                SwitchBayEntry("C9300-48P", None),
                SwitchBayEntry("", "Module_1"),
            ),
        )
        assert resolve(noisy, "C9300-48P") == baseline

    def test_non_string_keys(self, db):
        noisy = Database(
            products=db.products + (_product("SKU-X", 100),),
            compatibility=db.compatibility + (CompatibilityEntry(42, "OEM-100"),),
            switch_bays=db.switch_bays + (SwitchBayEntry(["C9300-48P"], "Module_1"),),
        )
        assert resolve(noisy, "C9300-48P") == resolve(db, "C9300-48P")

    def test_foreign_rows_skipped(self, db):
        noisy = Database(
            products=db.products + (None,),
            compatibility=(None,) + db.compatibility,
            switch_bays=db.switch_bays + (object(),),
        )
        assert resolve(noisy, "C9300-48P") == resolve(db, "C9300-48P")

    def test_missing_slot_id_collected_then_skipped(self):
        db = Database(switch_bays=(SwitchBayEntry("SW-1", None),))
        assert find_slots(db, "SW-1") == [None]
        assert resolve(db, "SW-1") == []


class TestQueryFault:
    """Structurally invalid snapshots surface as QueryFault."""

    def test_non_iterable_relation_raises_query_fault(self):
        broken = Database(switch_bays=None)
        with pytest.raises(QueryFault):
            resolve(broken, "SW-1")

    def test_blank_query_does_not_scan(self):
        broken = Database(switch_bays=None)
        assert resolve(broken, "  ") == []


class TestSearch:
    """Test the QueryOutcome wrapper."""

    def test_results(self, db):
        outcome = search(db, " c9300-48p ")
        assert outcome.status == "results"
        assert outcome.searched_term == "C9300-48P"
        assert len(outcome.groups) == 2
        assert outcome.total_products == 4

    def test_no_match_is_empty(self, db):
        outcome = search(db, "C9300-24P")
        assert outcome.status == "empty"
        assert outcome.searched_term == "C9300-24P"
        assert outcome.message is None

    def test_blank_query_is_empty_not_unsearched(self, db):
        for query in ("", "   "):
            outcome = search(db, query)
            assert outcome.status == "empty"
            assert outcome.status != "not_searched"
            assert outcome.searched_term == ""

    def test_fault_becomes_failed(self):
        outcome = search(Database(compatibility=None, switch_bays=(SwitchBayEntry("SW-1", "M1"),)), "SW-1")
        assert outcome.status == "failed"
        assert outcome.message == SEARCH_FAILED_MESSAGE
        assert outcome.groups == ()

    def test_load_error_short_circuits(self, db):
        error = LoadError("unavailable", "Dataset file not found: data.json")
        outcome = search(db, "C9300-48P", load_error=error)
        assert outcome.status == "empty"
        assert outcome.message == "Dataset file not found: data.json"

    def test_missing_snapshot_has_notice(self):
        outcome = search(None, "C9300-48P")
        assert outcome.status == "empty"
        assert outcome.message

"""Resolution engine: switch model -> slots -> OEM parts -> catalog products.

The engine is a pure function of (snapshot, query). It performs no I/O, keeps
no state between calls and never mutates the snapshot, so one snapshot can be
shared by any number of concurrent queries.
"""

import logging
from typing import Any

from .errors import LoadError, QueryFault
from .models import Database, Product, ResultGroup, Slot, canonical_key
from .result import QueryOutcome

logger = logging.getLogger(__name__)

SEARCH_FAILED_MESSAGE = (
    "An error occurred while searching. The compatibility dataset may be malformed."
)
DATA_UNAVAILABLE_MESSAGE = "Compatibility data is not available."


def _row_key(row: Any, attr: str) -> str | None:
    # Rows that are not records (or lack the attribute) count as absent keys
    return canonical_key(getattr(row, attr, None))


def find_slots(snapshot: Database, model_key: str) -> list[str | None]:
    """Stage A: slot ids exposed by a switch model, in first-seen order.

    Repeated rows are kept; each occurrence is resolved on its own.
    """
    slots = []
    for bay in snapshot.switch_bays:
        if _row_key(bay, "switch_model") != model_key:
            continue
        slots.append(getattr(bay, "supported_module_id", None))
    return slots


def find_candidate_parts(snapshot: Database, slot_key: str) -> set[str]:
    """Stage B: canonical OEM part numbers accepted by a slot.

    A set, so a part listed twice for the same device id collapses here.
    """
    parts = set()
    for entry in snapshot.compatibility:
        if _row_key(entry, "device_id") != slot_key:
            continue
        part_key = _row_key(entry, "oem_part_number")
        if part_key is not None:
            parts.add(part_key)
    return parts


def find_products(snapshot: Database, part_keys: set[str]) -> list[Product]:
    """Stage C: products implementing any of the given parts, in catalog order."""
    if not part_keys:
        return []
    return [
        product for product in snapshot.products
        if _row_key(product, "oem_part_number") in part_keys
    ]


def _resolve(snapshot: Database, model_key: str) -> list[ResultGroup]:
    groups: list[ResultGroup] = []
    for slot_id in find_slots(snapshot, model_key):
        slot_key = canonical_key(slot_id)
        if slot_key is None:
            continue

        products = find_products(snapshot, find_candidate_parts(snapshot, slot_key))
        # Slots with nothing compatible are left out rather than reported empty
        if products:
            groups.append(ResultGroup(slot=Slot.parse(slot_id), products=tuple(products)))
    return groups


def resolve(snapshot: Database | None, raw_query: str | None) -> list[ResultGroup]:
    """Resolve compatible products for a switch model.

    Args:
        snapshot: Loaded dataset snapshot (None when no data is available)
        raw_query: Switch model as typed by the user, any casing/whitespace

    Returns:
        Groups in first-seen slot order, each with at least one product.
        Empty for a blank query, a missing snapshot or an unknown model.

    Raises:
        QueryFault: If the snapshot is structurally invalid and scanning fails.
    """
    model_key = canonical_key(raw_query)
    if model_key is None or snapshot is None:
        return []

    try:
        return _resolve(snapshot, model_key)
    except Exception as e:
        raise QueryFault(f"Resolution failed for '{model_key}': {type(e).__name__}: {e}") from e


def search(
    snapshot: Database | None,
    raw_query: str | None,
    load_error: LoadError | None = None,
) -> QueryOutcome:
    """Run a query and wrap the result as a QueryOutcome. Never raises.

    When the dataset could not be loaded the engine is not invoked and the
    outcome is empty with the load failure attached as a notice.
    """
    searched_term = canonical_key(raw_query) or ""

    if snapshot is None or load_error is not None:
        notice = load_error.message if load_error is not None else DATA_UNAVAILABLE_MESSAGE
        return QueryOutcome.empty(searched_term, notice=notice)

    try:
        groups = resolve(snapshot, raw_query)
    except QueryFault:
        logger.exception(f"Search failed for {searched_term!r}")
        return QueryOutcome.failed(SEARCH_FAILED_MESSAGE)

    if not groups:
        return QueryOutcome.empty(searched_term)
    return QueryOutcome.results(searched_term, groups)

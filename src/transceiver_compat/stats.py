"""Snapshot statistics and data-quality counts."""

from typing import Any

from .models import Database, canonical_key


def list_switch_models(snapshot: Database) -> list[str]:
    """Distinct switch models, first-seen spelling, sorted case-insensitively."""
    seen: dict[str, str] = {}
    for bay in snapshot.switch_bays:
        key = canonical_key(bay.switch_model)
        if key is not None and key not in seen:
            seen[key] = bay.switch_model.strip()
    return [seen[key] for key in sorted(seen)]


def get_stats(snapshot: Database) -> dict[str, Any]:
    """Get snapshot statistics.

    Args:
        snapshot: Loaded dataset snapshot

    Returns:
        Dict with row counts, malformed row counts per relation, and
        references that cannot be joined (slots with no compatibility entry,
        compatible parts with no catalog product).
    """
    stats: dict[str, Any] = {}

    stats["products"] = len(snapshot.products)
    stats["compatibility_entries"] = len(snapshot.compatibility)
    stats["switch_bays"] = len(snapshot.switch_bays)
    stats["switch_models"] = len(list_switch_models(snapshot))

    # Rows kept but missing a join key
    stats["malformed_rows"] = {
        "products": sum(1 for p in snapshot.products if canonical_key(p.oem_part_number) is None),
        "compatibility": sum(
            1 for c in snapshot.compatibility
            if canonical_key(c.device_id) is None or canonical_key(c.oem_part_number) is None
        ),
        "switchBays": sum(
            1 for b in snapshot.switch_bays
            if canonical_key(b.switch_model) is None or canonical_key(b.supported_module_id) is None
        ),
    }
    stats["skipped_rows"] = dict(snapshot.skipped_rows)

    device_ids = {canonical_key(c.device_id) for c in snapshot.compatibility} - {None}
    compatible_parts = {canonical_key(c.oem_part_number) for c in snapshot.compatibility} - {None}
    catalog_parts = {canonical_key(p.oem_part_number) for p in snapshot.products} - {None}
    slot_ids = {canonical_key(b.supported_module_id) for b in snapshot.switch_bays} - {None}

    stats["slots_without_compatibility"] = len(slot_ids - device_ids)
    stats["parts_without_product"] = len(compatible_parts - catalog_parts)

    return stats

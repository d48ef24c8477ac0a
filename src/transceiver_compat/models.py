"""Record types for the compatibility dataset snapshot.

Rows arrive as loosely shaped JSON objects. Each relation row is parsed once
into a frozen record; required keys that are missing or not strings are kept
as None so the engine can skip the row instead of failing on it.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal

from .config import COMPATIBILITY_KEY, FIXED_SLOT_PREFIX, PRODUCTS_KEY, SWITCH_BAYS_KEY
from .errors import LoadError

logger = logging.getLogger(__name__)

SlotKind = Literal["fixed", "module"]


def canonical_key(value: Any) -> str | None:
    """Canonical comparison form for join keys (trimmed, upper-cased).

    Returns None for anything that is not a non-empty string.
    """
    if not isinstance(value, str):
        return None
    key = value.strip().upper()
    return key or None


def _key_field(row: Mapping[str, Any], name: str) -> str | None:
    value = row.get(name)
    return value if isinstance(value, str) else None


def _text_field(row: Mapping[str, Any], name: str) -> str:
    value = row.get(name)
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class Slot:
    """A fixed port group or pluggable module bay on a switch.

    Examples:
        Slot.parse("Fixed_4x_10G_SFP+")  -> Slot(id="Fixed_4x_10G_SFP+", kind="fixed")
        Slot.parse("C9300-NM-8X")        -> Slot(id="C9300-NM-8X", kind="module")
    """
    id: str
    kind: SlotKind

    @classmethod
    def parse(cls, raw_id: str) -> "Slot":
        kind: SlotKind = "fixed" if raw_id.startswith(FIXED_SLOT_PREFIX) else "module"
        return cls(id=raw_id, kind=kind)

    @property
    def label(self) -> str:
        """Display name: fixed slots drop the marker and use spaces for underscores."""
        if self.kind == "fixed":
            return self.id[len(FIXED_SLOT_PREFIX):].replace("_", " ")
        return self.id

    @property
    def heading(self) -> str:
        if self.kind == "fixed":
            return f"For Fixed Uplink Ports ({self.label})"
        return f"For Uplink Module {self.label}"


@dataclass(frozen=True)
class Product:
    """A first-party catalog SKU implementing a vendor (OEM) part."""
    sku_id: str | None
    oem_part_number: str | None
    description: str = ""
    rate: str = ""
    form_factor: str = ""
    reach: str = ""
    cable_type: str = ""
    media: str = ""
    connector_type: str = ""
    wavelength: str = ""
    case_temp: str = ""
    product_page_url: str = ""

    @classmethod
    def from_row(cls, row: Any) -> "Product | None":
        if not isinstance(row, Mapping):
            return None
        return cls(
            sku_id=_key_field(row, "Your_SKU"),
            oem_part_number=_key_field(row, "OEM_Part_Number"),
            description=_text_field(row, "Description"),
            rate=_text_field(row, "Rate"),
            form_factor=_text_field(row, "Form_Factor"),
            reach=_text_field(row, "Reach"),
            cable_type=_text_field(row, "Cable_Type"),
            media=_text_field(row, "Media"),
            connector_type=_text_field(row, "Connector_Type"),
            wavelength=_text_field(row, "Wavelength"),
            case_temp=_text_field(row, "Case_Temp"),
            product_page_url=_text_field(row, "Product_Page_URL"),
        )


@dataclass(frozen=True)
class CompatibilityEntry:
    """Device/port/module ``device_id`` accepts vendor part ``oem_part_number``."""
    device_id: str | None
    oem_part_number: str | None
    description: str = ""

    @classmethod
    def from_row(cls, row: Any) -> "CompatibilityEntry | None":
        if not isinstance(row, Mapping):
            return None
        return cls(
            device_id=_key_field(row, "Device_ID"),
            oem_part_number=_key_field(row, "OEM_Part_Number"),
            description=_text_field(row, "Description"),
        )


@dataclass(frozen=True)
class SwitchBayEntry:
    """Switch model ``switch_model`` exposes slot ``supported_module_id``."""
    switch_model: str | None
    supported_module_id: str | None

    @classmethod
    def from_row(cls, row: Any) -> "SwitchBayEntry | None":
        if not isinstance(row, Mapping):
            return None
        return cls(
            switch_model=_key_field(row, "Switch_Model"),
            supported_module_id=_key_field(row, "Supported_Module_ID"),
        )


@dataclass(frozen=True)
class ResultGroup:
    """Products matching one slot of the queried switch."""
    slot: Slot
    products: tuple[Product, ...]

    @property
    def module_or_port_id(self) -> str:
        return self.slot.id


def _parse_relation(doc: Mapping[str, Any], key: str, parse) -> tuple[tuple[Any, ...], int]:
    """Parse one relation into records. Returns (records, skipped_row_count)."""
    rows = doc.get(key)
    if rows is None:
        logger.warning(f"Dataset has no '{key}' relation, treating it as empty")
        return (), 0
    if not isinstance(rows, list):
        raise LoadError("malformed", f"'{key}' must be a list, got {type(rows).__name__}")

    records = []
    skipped = 0
    for index, row in enumerate(rows):
        record = parse(row)
        if record is None:
            logger.debug(f"Skipping non-object row {index} in '{key}'")
            skipped += 1
            continue
        records.append(record)
    return tuple(records), skipped


@dataclass(frozen=True)
class Database:
    """Immutable snapshot of the three relations.

    Never mutated after construction; a reload builds a new instance.
    """
    products: tuple[Product, ...] = ()
    compatibility: tuple[CompatibilityEntry, ...] = ()
    switch_bays: tuple[SwitchBayEntry, ...] = ()
    # Rows dropped at parse time because they were not objects, per relation key
    skipped_rows: Mapping[str, int] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        # Read-only view; callers must not be able to edit the counts
        object.__setattr__(self, "skipped_rows", MappingProxyType(dict(self.skipped_rows)))

    @classmethod
    def from_dict(cls, doc: Any) -> "Database":
        """Build a snapshot from the dataset document.

        Raises:
            LoadError: If the document or one of its relations has the wrong shape.
        """
        if not isinstance(doc, Mapping):
            raise LoadError("malformed", f"Top-level document must be an object, got {type(doc).__name__}")

        products, skipped_products = _parse_relation(doc, PRODUCTS_KEY, Product.from_row)
        compatibility, skipped_compat = _parse_relation(doc, COMPATIBILITY_KEY, CompatibilityEntry.from_row)
        switch_bays, skipped_bays = _parse_relation(doc, SWITCH_BAYS_KEY, SwitchBayEntry.from_row)

        return cls(
            products=products,
            compatibility=compatibility,
            switch_bays=switch_bays,
            skipped_rows={
                PRODUCTS_KEY: skipped_products,
                COMPATIBILITY_KEY: skipped_compat,
                SWITCH_BAYS_KEY: skipped_bays,
            },
        )

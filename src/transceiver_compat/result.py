"""Query outcomes and their dict form for the presentation layer."""

from dataclasses import dataclass
from typing import Any, Literal

from .models import Product, ResultGroup

OutcomeStatus = Literal["not_searched", "empty", "results", "failed"]


def product_to_dict(product: Product) -> dict[str, Any]:
    """Convert a product record to the dict shape returned to clients."""
    return {
        "sku": product.sku_id,
        "oem_part_number": product.oem_part_number,
        "description": product.description,
        "rate": product.rate,
        "form_factor": product.form_factor,
        "reach": product.reach,
        "cable_type": product.cable_type,
        "media": product.media,
        "connector_type": product.connector_type,
        "wavelength": product.wavelength,
        "case_temp": product.case_temp,
        "product_url": product.product_page_url,
    }


def group_to_dict(group: ResultGroup) -> dict[str, Any]:
    return {
        "module_or_port_id": group.module_or_port_id,
        "slot_kind": group.slot.kind,
        "slot_label": group.slot.label,
        "heading": group.slot.heading,
        "products": [product_to_dict(p) for p in group.products],
    }


@dataclass(frozen=True)
class QueryOutcome:
    """State of a compatibility search as seen by the presentation layer.

    not_searched: no search issued yet
    empty:        searched, zero matching groups (``message`` carries a
                  load-failure notice when the dataset was unavailable)
    results:      searched, one or more groups
    failed:       resolution raised an unexpected fault (``message`` is user-readable)
    """
    status: OutcomeStatus
    searched_term: str | None = None
    groups: tuple[ResultGroup, ...] = ()
    message: str | None = None

    @classmethod
    def not_searched(cls) -> "QueryOutcome":
        return cls(status="not_searched")

    @classmethod
    def empty(cls, searched_term: str, notice: str | None = None) -> "QueryOutcome":
        return cls(status="empty", searched_term=searched_term, message=notice)

    @classmethod
    def results(cls, searched_term: str, groups: list[ResultGroup]) -> "QueryOutcome":
        return cls(status="results", searched_term=searched_term, groups=tuple(groups))

    @classmethod
    def failed(cls, message: str) -> "QueryOutcome":
        return cls(status="failed", message=message)

    @property
    def total_products(self) -> int:
        return sum(len(g.products) for g in self.groups)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"status": self.status}
        if self.searched_term is not None:
            result["searched_term"] = self.searched_term
        if self.status == "results":
            result["groups"] = [group_to_dict(g) for g in self.groups]
            result["total_products"] = self.total_products
        elif self.status == "empty":
            result["groups"] = []
            result["total_products"] = 0
        if self.status == "failed":
            result["error"] = self.message
        elif self.message:
            result["notice"] = self.message
        return result

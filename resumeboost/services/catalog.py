"""Immutable plan, add-on and coupon catalog loaded at process start."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from config.settings import CATALOG_PATH

logger = logging.getLogger(__name__)

ADDON_ONLY_PLAN_ID = "addon_only_purchase"
WEBINAR_PLAN_ID = "webinar_payment"

COUPON_PERCENTAGE = "percentage"
COUPON_FULL_WAIVER = "full_waiver"


@dataclass(frozen=True)
class PlanConfig:
    id: str
    name: str
    price: int
    mrp: int = 0
    discount_percentage: int = 0
    duration_in_hours: int = 0
    optimizations: int = 0
    score_checks: int = 0
    features: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def price_minor(self) -> int:
        """Price in minor currency units (paise)."""
        return self.price * 100


@dataclass(frozen=True)
class AddOn:
    id: str
    name: str
    price: int
    type: str
    quantity: int = 1


@dataclass(frozen=True)
class CouponRule:
    code: str
    kind: str
    plan_id: Optional[str] = None
    percent: int = 0
    usage_cap: Optional[int] = None

    def applies_to(self, plan_id: Optional[str]) -> bool:
        return self.plan_id is None or self.plan_id == plan_id

    def discount_for(self, original_amount: int) -> int:
        """Discount in minor units, floored, never above ``original_amount``."""
        if self.kind == COUPON_FULL_WAIVER:
            return original_amount
        return min(original_amount, original_amount * self.percent // 100)


@dataclass(frozen=True)
class Catalog:
    plans: Mapping[str, PlanConfig]
    add_ons: Mapping[str, AddOn]
    coupons: Mapping[str, CouponRule]

    def get_plan(self, plan_id: str) -> Optional[PlanConfig]:
        return self.plans.get(plan_id)

    def get_coupon(self, code: str) -> Optional[CouponRule]:
        return self.coupons.get(code)


def addon_only_plan() -> PlanConfig:
    return PlanConfig(id=ADDON_ONLY_PLAN_ID, name="Add-on Only Purchase", price=0)


def webinar_plan(title: Optional[str] = None) -> PlanConfig:
    """Synthetic plan for a webinar seat.

    Webinar seats carry no catalog price; the order amount comes from the request.
    """
    return PlanConfig(id=WEBINAR_PLAN_ID, name=title or "Webinar Registration", price=0)


def build_catalog(raw: Dict[str, Any]) -> Catalog:
    """Build a read-only Catalog from its JSON representation."""
    plans = {}
    for entry in raw.get("plans", []):
        plan = PlanConfig(
            id=entry["id"],
            name=entry["name"],
            price=int(entry["price"]),
            mrp=int(entry.get("mrp", entry["price"])),
            discount_percentage=int(entry.get("discountPercentage", 0)),
            duration_in_hours=int(entry.get("durationInHours", 0)),
            optimizations=int(entry.get("optimizations", 0)),
            score_checks=int(entry.get("scoreChecks", 0)),
            features=tuple(entry.get("features", [])),
        )
        plans[plan.id] = plan

    add_ons = {}
    for entry in raw.get("addOns", []):
        add_on = AddOn(
            id=entry["id"],
            name=entry["name"],
            price=int(entry["price"]),
            type=entry.get("type", ""),
            quantity=int(entry.get("quantity", 1)),
        )
        add_ons[add_on.id] = add_on

    coupons = {}
    for entry in raw.get("coupons", []):
        kind = entry.get("kind", COUPON_PERCENTAGE)
        if kind not in (COUPON_PERCENTAGE, COUPON_FULL_WAIVER):
            raise ValueError(f"Unknown coupon kind {kind!r} for {entry.get('code')!r}")
        code = entry["code"].strip().lower()
        coupons[code] = CouponRule(
            code=code,
            kind=kind,
            plan_id=entry.get("planId"),
            percent=int(entry.get("percent", 0)),
            usage_cap=entry.get("usageCap"),
        )

    return Catalog(
        plans=MappingProxyType(plans),
        add_ons=MappingProxyType(add_ons),
        coupons=MappingProxyType(coupons),
    )


def load_catalog(path: Path = CATALOG_PATH) -> Catalog:
    with open(path, "r", encoding="utf-8") as handle:
        raw = json.load(handle)
    catalog = build_catalog(raw)
    logger.info(
        "Loaded catalog from %s: %d plans, %d add-ons, %d coupons",
        path,
        len(catalog.plans),
        len(catalog.add_ons),
        len(catalog.coupons),
    )
    return catalog

import pytest

from resumeboost.services.catalog import WEBINAR_PLAN_ID, build_catalog, load_catalog, webinar_plan


def test_default_catalog_prices():
    catalog = load_catalog()

    starter = catalog.get_plan("starter_plan")
    assert starter is not None
    assert starter.price == 640
    assert starter.price_minor == 64000
    assert "jd_optimization_single_purchase" in catalog.add_ons
    assert catalog.get_coupon("first500").usage_cap == 500


def test_coupon_rules():
    catalog = load_catalog()

    waiver = catalog.get_coupon("fullsupport")
    assert waiver.applies_to("career_pro_max")
    assert not waiver.applies_to("starter_plan")
    assert waiver.discount_for(199900) == 199900

    first500 = catalog.get_coupon("first500")
    assert first500.discount_for(9900) == 9702
    assert first500.discount_for(99) == 97

    diwali = catalog.get_coupon("diwali")
    assert diwali.applies_to("leader_plan")
    assert diwali.applies_to("kickstart_plan")


def test_coupon_codes_are_normalized():
    catalog = build_catalog({"coupons": [{"code": " SUMMER ", "kind": "percentage", "percent": 10}]})
    assert catalog.get_coupon("summer") is not None


def test_catalog_is_read_only():
    catalog = load_catalog()
    with pytest.raises(TypeError):
        catalog.plans["free"] = None


def test_unknown_coupon_kind_is_rejected():
    with pytest.raises(ValueError):
        build_catalog({"coupons": [{"code": "x", "kind": "bogo"}]})


def test_webinar_plan_has_no_catalog_price():
    plan = webinar_plan("Resume Masterclass")

    assert plan.id == WEBINAR_PLAN_ID
    assert plan.name == "Resume Masterclass"
    assert plan.price == 0
    assert plan.price_minor == 0
    assert webinar_plan().name == "Webinar Registration"

import json

import pytest

from printshop_pricing.engine import ChargeThreshold, PricingPolicy
from printshop_pricing.services.settings_service import PricingSettingsService


@pytest.fixture
def service(tmp_path):
    return PricingSettingsService(tmp_path / "pricing_settings.json")


def test_first_access_creates_defaults(service):
    assert not service.settings_path.exists()

    policy = service.get_policy()

    assert service.settings_path.exists()
    assert policy.settings_id == "global"
    assert [(t.min_amount, t.charge) for t in policy.delivery_thresholds] == [(0, 50), (200, 30), (500, 0)]
    assert [(t.min_amount, t.charge) for t in policy.packing_thresholds] == [(0, 20), (1000, 0)]
    assert policy.is_delivery_enabled and policy.is_packing_enabled
    assert policy.regional_delivery_charge_outside_tn == 30
    assert policy.created_at is not None


def test_defaults_persist_across_instances(service):
    service.get_policy()
    data = json.loads(service.settings_path.read_text(encoding="utf-8"))
    assert data["settingsId"] == "global"
    assert data["deliveryThresholds"][0] == {"minAmount": 0, "charge": 50}

    again = PricingSettingsService(service.settings_path).get_policy()
    assert again.created_at == service.get_policy().created_at


def test_partial_update_keeps_other_fields(service):
    service.get_policy()
    policy = service.update_policy({"isPackingEnabled": False}, updated_by="admin-1")

    assert policy.is_packing_enabled is False
    assert policy.is_delivery_enabled is True
    assert len(policy.delivery_thresholds) == 3
    assert policy.last_updated_by == "admin-1"

    reloaded = service.get_policy()
    assert reloaded.is_packing_enabled is False
    assert reloaded.last_updated_by == "admin-1"


def test_update_sorts_thresholds(service):
    policy = service.update_policy({
        "deliveryThresholds": [
            {"minAmount": 500, "charge": 0},
            {"minAmount": 0, "charge": 60},
            {"minAmount": 250, "charge": 25},
        ]
    })
    assert [t.min_amount for t in policy.delivery_thresholds] == [0, 250, 500]


def test_update_accepts_attribute_names_and_threshold_objects(service):
    policy = service.update_policy({
        "packing_thresholds": [ChargeThreshold(min_amount=0, charge=15)],
        "regional_delivery_charge_tn": 10,
    })
    assert policy.packing_thresholds[0].charge == 15
    assert policy.regional_delivery_charge_tn == 10


def test_none_and_unknown_keys_are_ignored(service):
    before = service.get_policy()
    after = service.update_policy({"isDeliveryEnabled": None, "settingsId": "other", "bogus": 1})

    assert after.is_delivery_enabled == before.is_delivery_enabled
    assert after.settings_id == "global"


def test_negative_values_rejected(service):
    service.get_policy()
    with pytest.raises(ValueError, match="charge cannot be negative"):
        service.update_policy({"deliveryThresholds": [{"minAmount": 0, "charge": -5}]})
    with pytest.raises(ValueError, match="cannot be negative"):
        service.update_policy({"regionalDeliveryChargeOutsideTN": -1})

    # Nothing was written
    assert service.get_policy().delivery_thresholds[0].charge == 50


def test_merge_updates_does_not_save(service):
    service.get_policy()
    merged = service.merge_updates({"isDeliveryEnabled": False})
    assert merged.is_delivery_enabled is False
    assert service.get_policy().is_delivery_enabled is True


def test_validate_policy_warnings(service):
    policy = PricingPolicy(
        delivery_thresholds=[
            ChargeThreshold(min_amount=100, charge=20),
            ChargeThreshold(min_amount=100, charge=10),
            ChargeThreshold(min_amount=500, charge=40),
        ],
        packing_thresholds=[],
    )
    result = service.validate_policy(policy)

    assert result.valid
    assert any("no tier starting at 0" in w for w in result.warnings)
    assert any("duplicate minimum amounts: 100.00" in w for w in result.warnings)
    assert any("charge increases" in w for w in result.warnings)
    assert any(w.startswith("Packing has no thresholds") for w in result.warnings)


def test_validate_default_policy_is_clean(service):
    result = service.validate_policy(PricingPolicy())
    assert result.valid
    assert result.errors == []
    assert result.warnings == []


def test_reads_singleton_from_document_list(tmp_path):
    path = tmp_path / "pricing_settings.json"
    path.write_text(json.dumps([
        {"settingsId": "old", "isDeliveryEnabled": True},
        {"settingsId": "global", "isDeliveryEnabled": False, "deliveryThresholds": []},
    ]), encoding="utf-8")

    policy = PricingSettingsService(path).get_policy()
    assert policy.is_delivery_enabled is False


@pytest.mark.parametrize("updates,message", [
    ({"deliveryThresholds": [{"minAmount": 0, "charge": float("inf")}]}, "Delivery threshold 1: amounts must be finite"),
    ({"packingThresholds": [{"minAmount": float("nan"), "charge": 10}]}, "Packing threshold 1: amounts must be finite"),
    ({"regionalDeliveryChargeOutsideTN": float("nan")}, "must be a finite number"),
    ({"regionalDeliveryChargeTN": "Infinity"}, "must be a finite number"),
])
def test_non_finite_values_rejected(service, updates, message):
    service.get_policy()
    with pytest.raises(ValueError, match=message):
        service.update_policy(updates)

    stored = service.get_policy()
    assert stored.delivery_thresholds[0].charge == 50
    assert stored.regional_delivery_charge_outside_tn == 30


def test_writes_leave_no_temp_files(service):
    service.get_policy()
    service.update_policy({"isPackingEnabled": False})
    assert [p.name for p in service.settings_path.parent.iterdir()] == ["pricing_settings.json"]

import pytest

from logiroute.services.routing.cost import CostModel


def test_truck_cost_is_distance_rate_plus_fixed_fee():
    model = CostModel(cost_per_km=1.5, cost_per_truck_fixed=50.0)

    assert model.truck_cost(100) == pytest.approx(200.0)
    assert model.truck_cost(0) == pytest.approx(50.0)


def test_total_cost_charges_fixed_fee_per_truck():
    model = CostModel(cost_per_km=2.0, cost_per_truck_fixed=10.0)

    assert model.total_cost([5, 5, 0]) == pytest.approx(50.0)
    assert model.total_cost([]) == 0


def test_negative_rates_are_rejected():
    with pytest.raises(ValueError):
        CostModel(cost_per_km=-1.0, cost_per_truck_fixed=0.0)


def test_default_rates_follow_current_settings(monkeypatch):
    from logiroute.services.routing import cost

    monkeypatch.setattr(cost.settings, "cost_per_km", 3.0)
    monkeypatch.setattr(cost.settings, "cost_per_truck_fixed", 7.0)

    model = CostModel()

    assert model.truck_cost(10) == pytest.approx(37.0)

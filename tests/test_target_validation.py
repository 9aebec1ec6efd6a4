from datetime import date

import json
import pytest

from target_distribution import (
    SpecialDay,
    TargetSpecification,
    WeekdayWeights,
    compute_daily_targets,
    to_request_body,
    validate_specification,
)


def make_spec(**overrides):
    values = dict(
        branch_id=3,
        month=4,
        year=2025,
        target_amount=30000.0,
        weekday_weights=WeekdayWeights(),
        special_days=(SpecialDay(date(2025, 4, 10), "Holiday", 2.5, "holiday"),),
    )
    values.update(overrides)
    return TargetSpecification(**values)


def fields(errors):
    return [e.field for e in errors]


def test_valid_spec_has_no_errors():
    assert validate_specification(make_spec()) == []


@pytest.mark.parametrize("overrides, field", [
    ({"branch_id": 0}, "branch_id"),
    ({"month": 13}, "month"),
    ({"month": 0}, "month"),
    ({"year": 0}, "year"),
    ({"target_amount": 0.0}, "target_amount"),
    ({"target_amount": -10.0}, "target_amount"),
    ({"target_amount": float("inf")}, "target_amount"),
])
def test_basic_field_errors(overrides, field):
    assert field in fields(validate_specification(make_spec(**overrides)))


def test_negative_weight_is_reported():
    spec = make_spec(weekday_weights=WeekdayWeights().replace(5, -1.0))
    errors = validate_specification(spec)
    assert fields(errors) == ["weekday_weights.5"]
    assert "Friday" in errors[0].message


def test_zero_weight_is_allowed():
    spec = make_spec(weekday_weights=WeekdayWeights((0.0,) * 7))
    assert validate_specification(spec) == []


def test_special_day_errors():
    spec = make_spec(special_days=(
        SpecialDay("not-a-date", "Broken", 1.0, "holiday"),
        SpecialDay(date(2025, 4, 12), "  ", -1.0, "sale"),
    ))
    assert fields(validate_specification(spec)) == [
        "special_days[0].date",
        "special_days[1].name",
        "special_days[1].multiplier",
        "special_days[1].category",
    ]


def test_duplicate_special_day_date_is_reported():
    spec = make_spec(special_days=(
        SpecialDay(date(2025, 4, 10), "Holiday", 2.5, "holiday"),
        SpecialDay(date(2025, 4, 10), "Promo", 1.5, "promotion"),
    ))
    errors = validate_specification(spec)
    assert fields(errors) == ["special_days[1].date"]
    assert "Holiday" in errors[0].message


def test_special_day_outside_month_is_reported():
    spec = make_spec(special_days=(SpecialDay(date(2025, 5, 1), "Labour Day", 2.0, "holiday"),))
    assert fields(validate_specification(spec)) == ["special_days[0].date"]


def test_request_body_shape():
    spec = make_spec()
    body = to_request_body(spec)

    assert body["branchId"] == 3
    assert body["month"] == 4
    assert body["year"] == 2025
    assert body["targetAmount"] == 30000.0
    assert body["weekdayWeights"]["5"] == 1.5
    assert body["specialDays"] == [
        {"date": "2025-04-10", "name": "Holiday", "multiplier": 2.5, "type": "holiday"}
    ]
    assert body["dailyTargets"] == compute_daily_targets(spec)
    assert body["distributionPattern"] == {}
    # must be plain JSON
    json.dumps(body)


def test_request_body_uses_given_daily_targets():
    body = to_request_body(make_spec(), {"2025-04-01": 1.0})
    assert body["dailyTargets"] == {"2025-04-01": 1.0}


def test_from_dict_reads_request_body():
    spec = make_spec()
    loaded = TargetSpecification.from_dict(json.loads(json.dumps(to_request_body(spec))))
    assert loaded == spec


def test_from_dict_rejects_bad_payload():
    with pytest.raises(ValueError):
        TargetSpecification.from_dict({"month": 4})
    with pytest.raises(ValueError):
        TargetSpecification.from_dict({
            "branchId": 1, "month": 4, "year": 2025, "targetAmount": 10,
            "specialDays": [{"date": "someday", "name": "x", "multiplier": 1}],
        })


@pytest.mark.parametrize("extra", [
    {"weekdayWeights": [1.0] * 7},
    {"specialDays": ["2025-04-10"]},
    {"weekdayWeights": {"sunday": 1.0}},
    {"specialDays": [{"date": "2025-04-10", "name": "x", "multiplier": "lots"}]},
])
def test_from_dict_wrong_shapes_raise_value_error(extra):
    payload = {"branchId": 1, "month": 4, "year": 2025, "targetAmount": 10}
    payload.update(extra)
    with pytest.raises(ValueError, match="Invalid monthly target payload"):
        TargetSpecification.from_dict(payload)

import json

import pytest

from order_calculator.errors import DataFileNotFoundError
from order_calculator.promotions.compile_promotions import compile_promotions, validate_promotion
from order_calculator.promotions.loader import load_promotions, read_compiled_promotions

HEADER = (
    "promotion_id,name,active,priority,min_order_amount,tax_inclusive,facets,facet_min_qty,"
    "variant_ids,variant_min_qty,start_date,end_date,action_type,action_value,notes\n"
)


def write_csv(tmp_path, *rows):
    path = tmp_path / "promotions.csv"
    path.write_text(HEADER + "".join(row + "\n" for row in rows))
    return path


def test_validate_promotion_builds_conditions_from_columns():
    row = {
        'promotion_id': 'HELMET-10', 'name': 'Helmets', 'active': 'true', 'priority': '10',
        'min_order_amount': '5000', 'tax_inclusive': 'true',
        'facets': 'category-helmets; brand-riddell', 'facet_min_qty': '2',
        'variant_ids': '', 'variant_min_qty': '',
        'action_type': 'item_percentage_discount', 'action_value': '10',
    }

    promotion, errors = validate_promotion(row, 2)

    assert errors == []
    assert [c.code for c in promotion.conditions] == ['minimum_order_amount', 'has_facet_values']
    assert promotion.conditions[0].args == {'amount': 5000, 'tax_inclusive': True}
    assert promotion.conditions[1].args == {'facets': ['category-helmets', 'brand-riddell'], 'minimum': 2}
    assert promotion.actions[0].args == {'discount': 10.0}
    assert promotion.priority == 10


def test_fixed_amounts_are_integers():
    row = {'promotion_id': 'FIVE', 'action_type': 'order_fixed_discount', 'action_value': '500'}

    promotion, errors = validate_promotion(row, 2)

    assert errors == []
    assert promotion.actions[0].args == {'amount': 500}
    assert promotion.enabled is False
    assert promotion.name == 'FIVE'


@pytest.mark.parametrize("row, message", [
    ({'promotion_id': ''}, "promotion_id is required"),
    ({'promotion_id': 'X', 'action_type': ''}, "action_type is required"),
    ({'promotion_id': 'X', 'action_type': 'buy_x_get_y', 'action_value': '1'}, "invalid action_type"),
    ({'promotion_id': 'X', 'action_type': 'order_fixed_discount'}, "action_value is required"),
    ({'promotion_id': 'X', 'action_type': 'order_fixed_discount', 'action_value': 'ten'}, "must be numeric"),
    ({'promotion_id': 'X', 'priority': 'high', 'action_type': 'order_fixed_discount', 'action_value': '1'}, "must be integers"),
    ({'promotion_id': 'X', 'start_date': '01/03/2026', 'action_type': 'order_fixed_discount', 'action_value': '1'}, "YYYY-MM-DD"),
    ({'promotion_id': 'X', 'start_date': '2026-05-01', 'end_date': '2026-04-01',
      'action_type': 'order_fixed_discount', 'action_value': '1'}, "start_date must be before end_date"),
])
def test_validate_promotion_errors(row, message):
    promotion, errors = validate_promotion(row, 7)

    assert promotion is None
    assert len(errors) == 1
    assert errors[0].startswith("Line 7:")
    assert message in errors[0]


def test_compile_writes_sorted_json(tmp_path):
    csv_path = write_csv(
        tmp_path,
        "LATE,Late,true,90,,,,,,,,,order_fixed_discount,100,",
        "EARLY,Early,true,5,,,,,301,2,,,item_fixed_discount,50,",
        "OFF,Off,false,1,,,,,,,,,order_percentage_discount,5,",
    )
    output = tmp_path / "out" / "compiled_promotions.json"

    success, promotions, errors = compile_promotions(csv_path, output, verbose=False)

    assert success is True
    assert errors == []
    assert [p.id for p in promotions] == ["OFF", "EARLY", "LATE"]

    data = json.loads(output.read_text())
    assert data["total_promotions"] == 3
    assert data["active_promotions"] == 2
    assert data["promotions"][1]["conditions"] == [
        {"code": "contains_variants", "args": {"variant_ids": ["301"], "minimum": 2}}
    ]
    assert read_compiled_promotions(output) == promotions


def test_compile_reports_errors_without_writing(tmp_path):
    csv_path = write_csv(
        tmp_path,
        "GOOD,Good,true,1,,,,,,,,,order_fixed_discount,100,",
        ",Missing id,true,1,,,,,,,,,order_fixed_discount,100,",
    )
    output = tmp_path / "compiled_promotions.json"

    success, promotions, errors = compile_promotions(csv_path, output, verbose=False)

    assert success is False
    assert errors == ["Line 3: promotion_id is required"]
    assert not output.exists()


def test_compile_missing_csv(tmp_path):
    success, promotions, errors = compile_promotions(tmp_path / "nope.csv", verbose=False)

    assert success is False
    assert promotions == []
    assert "not found" in errors[0]


def test_load_promotions_filters_by_date(tmp_path):
    csv_path = write_csv(
        tmp_path,
        "SPRING,Spring,true,20,,,,,,,2026-03-01,2026-05-31,order_percentage_discount,5,",
        "ALWAYS,Always,true,10,,,,,,,,,order_fixed_discount,100,",
        "OFF,Off,false,1,,,,,,,,,order_fixed_discount,100,",
    )
    output = tmp_path / "compiled_promotions.json"
    compile_promotions(csv_path, output, verbose=False)

    assert [p.id for p in load_promotions(output, as_of="2026-04-15")] == ["ALWAYS", "SPRING"]
    assert [p.id for p in load_promotions(output, as_of="2026-06-01")] == ["ALWAYS"]


def test_load_promotions_missing_file(tmp_path):
    with pytest.raises(DataFileNotFoundError):
        load_promotions(tmp_path / "compiled_promotions.json")


def test_facet_discount_takes_the_facets_column():
    row = {
        'promotion_id': 'BALLS', 'facets': 'category-balls', 'facet_min_qty': '1',
        'action_type': 'facet_values_discount', 'action_value': '20',
    }

    promotion, errors = validate_promotion(row, 2)

    assert errors == []
    assert promotion.actions[0].args == {'discount': 20.0, 'facets': ['category-balls']}


def test_facet_discount_without_facets_is_rejected():
    row = {'promotion_id': 'BALLS', 'action_type': 'facet_values_discount', 'action_value': '20'}

    promotion, errors = validate_promotion(row, 4)

    assert promotion is None
    assert errors == ["Line 4: facets are required for facet_values_discount"]

"""
Promotion Compiler - Validates and compiles promotions from CSV to JSON.

Reads promotions.csv, validates every row, and outputs compiled_promotions.json.
Each row defines one promotion with a single action; conditions come from
whichever condition columns are filled in.
"""
import csv
import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..csv_fields import parse_bool, parse_id_list, parse_optional_int, parse_optional_str
from ..errors import PromotionDefinitionError
from .promotion import Promotion, PromotionAction, PromotionCondition, VALID_ACTION_CODES

PERCENT_ACTIONS = {'item_percentage_discount', 'facet_values_discount', 'order_percentage_discount'}


def validate_promotion(row: dict, line_num: int) -> tuple[Optional[Promotion], list[str]]:
    """
    Validate and parse a promotion from a CSV row.

    Returns (promotion, errors) - promotion is None if validation failed.
    """
    errors = []

    promotion_id = parse_optional_str(row.get('promotion_id', ''))
    if not promotion_id:
        errors.append(f"Line {line_num}: promotion_id is required")
        return None, errors

    name = parse_optional_str(row.get('name', '')) or promotion_id
    active = parse_bool(row.get('active', 'false'))

    try:
        priority = int(row.get('priority') or '50')
        min_order_amount = parse_optional_int(row.get('min_order_amount', ''))
        facet_min_qty = parse_optional_int(row.get('facet_min_qty', '')) or 1
        variant_min_qty = parse_optional_int(row.get('variant_min_qty', '')) or 1
    except ValueError:
        errors.append(f"Line {line_num}: priority, min_order_amount and *_min_qty must be integers")
        return None, errors

    start_date = parse_optional_str(row.get('start_date', ''))
    end_date = parse_optional_str(row.get('end_date', ''))
    for label, date_val in (('start_date', start_date), ('end_date', end_date)):
        if date_val:
            try:
                datetime.fromisoformat(date_val)
            except ValueError:
                errors.append(f"Line {line_num}: {label} must be YYYY-MM-DD format")
    if start_date and end_date and start_date > end_date:
        errors.append(f"Line {line_num}: start_date must be before end_date")

    action_type = parse_optional_str(row.get('action_type', ''))
    if not action_type:
        errors.append(f"Line {line_num}: action_type is required")
        return None, errors

    if action_type not in VALID_ACTION_CODES:
        errors.append(f"Line {line_num}: invalid action_type '{action_type}', must be one of: {VALID_ACTION_CODES}")
        return None, errors

    action_value_str = parse_optional_str(row.get('action_value', ''))
    if action_value_str is None:
        errors.append(f"Line {line_num}: action_value is required")
        return None, errors

    try:
        action_value = float(action_value_str)
    except ValueError:
        errors.append(f"Line {line_num}: action_value must be numeric for {action_type}")
        return None, errors

    if errors:
        return None, errors

    conditions = []
    if min_order_amount is not None:
        conditions.append(PromotionCondition('minimum_order_amount', {
            'amount': min_order_amount,
            'tax_inclusive': parse_bool(row.get('tax_inclusive', 'false') or 'false'),
        }))
    facets = parse_id_list(row.get('facets', ''))
    if facets:
        conditions.append(PromotionCondition('has_facet_values', {'facets': facets, 'minimum': facet_min_qty}))
    variant_ids = parse_id_list(row.get('variant_ids', ''))
    if variant_ids:
        conditions.append(PromotionCondition('contains_variants', {'variant_ids': variant_ids, 'minimum': variant_min_qty}))

    if action_type == 'facet_values_discount':
        if not facets:
            return None, [f"Line {line_num}: facets are required for {action_type}"]
        action = PromotionAction(action_type, {'discount': action_value, 'facets': facets})
    elif action_type in PERCENT_ACTIONS:
        action = PromotionAction(action_type, {'discount': action_value})
    else:
        action = PromotionAction(action_type, {'amount': int(action_value)})

    return Promotion(
        id=promotion_id,
        name=name,
        conditions=conditions,
        actions=[action],
        enabled=active,
        priority=priority,
        start_date=start_date,
        end_date=end_date,
    ), []


def compile_promotions(
    promotions_csv: Path,
    output_json: Optional[Path] = None,
    verbose: bool = True
) -> tuple[bool, list[Promotion], list[str]]:
    """
    Compile promotions from CSV to JSON.

    The JSON file is only written when `output_json` is given and every row
    is valid. Returns (success, promotions, errors).
    """
    all_errors = []
    promotions = []

    if not promotions_csv.exists():
        all_errors.append(f"Promotions file not found: {promotions_csv}")
        return False, [], all_errors

    with open(promotions_csv, 'r', newline='', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for line_num, row in enumerate(reader, start=2):  # +2 for 1-indexed header row
            try:
                promotion, errors = validate_promotion(row, line_num)
            except PromotionDefinitionError as e:
                promotion, errors = None, [f"Line {line_num}: {e}"]

            if errors:
                all_errors.extend(errors)
            elif promotion:
                promotions.append(promotion)

    if all_errors:
        if verbose:
            print("Validation errors:")
            for err in all_errors:
                print(f"  ❌ {err}")
        return False, promotions, all_errors

    # Sort by priority (lower = applied first)
    promotions.sort(key=lambda p: p.priority)

    if output_json is not None:
        output_data = {
            "compiled_at": datetime.now().isoformat(),
            "source_file": str(promotions_csv),
            "total_promotions": len(promotions),
            "active_promotions": sum(1 for p in promotions if p.enabled),
            "promotions": [p.to_dict() for p in promotions],
        }
        output_json.parent.mkdir(parents=True, exist_ok=True)
        with open(output_json, 'w', encoding='utf-8') as f:
            json.dump(output_data, f, indent=2)

        if verbose:
            print(f"✅ Compiled {len(promotions)} promotions ({output_data['active_promotions']} active)")
            print(f"   Output: {output_json}")

    return True, promotions, []


def main():
    """CLI entry point."""
    import sys

    from ..config.settings import get_settings

    settings = get_settings()

    print("Compiling promotions...")
    success, promotions, errors = compile_promotions(settings.promotions_csv, settings.compiled_promotions)

    if not success:
        print(f"\n❌ Compilation failed with {len(errors)} errors")
        sys.exit(1)


if __name__ == "__main__":
    main()

"""
Prices a sample order against the bundled data files and prints the trace.

Usage:
    python scripts/debug_order.py [ISO date]
"""
import asyncio
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from order_calculator.config.logging_config import setup_logging
from order_calculator.config.settings import get_settings
from order_calculator.engine.factory import build_order_calculator, build_request_context
from order_calculator.engine.models import Order, OrderLine, TaxCategory
from order_calculator.promotions.compile_promotions import compile_promotions
from order_calculator.promotions.loader import select_active


async def debug(request_date=None):
    settings = get_settings()
    setup_logging("DEBUG")

    calculator = build_order_calculator(settings)
    ctx = build_request_context(settings, calculator.zone_service, request_date)

    success, promotions, errors = compile_promotions(settings.promotions_csv, verbose=True)
    if not success:
        sys.exit(1)
    promotions = select_active(promotions, request_date)
    print(f"Active promotions: {[p.id for p in promotions]}")

    standard = TaxCategory(id="standard", name="Standard")
    order = Order(
        code="DEBUG-1",
        lines=[
            OrderLine.create("1", "101", 12999, standard, 2),
            OrderLine.create("2", "301", 2499, standard, 1),
        ],
    )

    print(f"\n--- Pricing order {order.code} (zone {settings.default_tax_zone_id}) ---")
    await calculator.apply_price_adjustments(ctx, order, promotions)

    print("\nTrace:")
    print(order.get_trace_text())
    print("\nTotals:")
    print(f"  Sub total:            {order.sub_total}")
    print(f"  Sub total before tax: {order.sub_total_before_tax}")
    print(f"  Order adjustments:    {order.adjustment_total}")
    print(f"  Shipping ({order.shipping_method_id}):       {order.shipping_cost}")
    print(f"  Total:                {order.total}")


if __name__ == "__main__":
    asyncio.run(debug(sys.argv[1] if len(sys.argv) > 1 else None))

"""
Promotions - Discount rules tested against and applied to an order.

A promotion is a list of conditions and a list of actions drawn from a
closed set of codes. Conditions decide eligibility; actions produce the
discount amount for an item or for the whole order.
"""
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from ..engine.models import Adjustment, AdjustmentType, Order, OrderItem, OrderLine
from ..engine.promotion_utils import PromotionUtils
from ..errors import PromotionDefinitionError


VALID_CONDITION_CODES = {
    'minimum_order_amount',
    'has_facet_values',
    'contains_variants',
}

ITEM_ACTION_CODES = {
    'item_percentage_discount',
    'item_fixed_discount',
    'facet_values_discount',
}

# Item actions that only discount lines whose variant carries their facets
FACET_ACTION_CODES = {
    'facet_values_discount',
}

ORDER_ACTION_CODES = {
    'order_percentage_discount',
    'order_fixed_discount',
}

VALID_ACTION_CODES = ITEM_ACTION_CODES | ORDER_ACTION_CODES

# Arguments each code requires
REQUIRED_ARGS = {
    'minimum_order_amount': ('amount',),
    'has_facet_values': ('facets',),
    'contains_variants': ('variant_ids',),
    'item_percentage_discount': ('discount',),
    'item_fixed_discount': ('amount',),
    'facet_values_discount': ('discount', 'facets'),
    'order_percentage_discount': ('discount',),
    'order_fixed_discount': ('amount',),
}


def _other_promotions(adjustments: list[Adjustment], source: str) -> int:
    return sum(a.amount for a in adjustments if a.type == AdjustmentType.PROMOTION and a.source != source)


def _check_args(code: str, args: dict):
    missing = [a for a in REQUIRED_ARGS[code] if a not in args]
    if missing:
        raise PromotionDefinitionError(f"'{code}' is missing arguments: {', '.join(missing)}")


@dataclass
class PromotionCondition:
    """An eligibility test, identified by its code."""
    code: str
    args: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.code not in VALID_CONDITION_CODES:
            raise PromotionDefinitionError(
                f"invalid condition '{self.code}', must be one of: {VALID_CONDITION_CODES}"
            )
        _check_args(self.code, self.args)

    async def check(self, order: Order, utils: PromotionUtils) -> bool:
        if self.code == 'minimum_order_amount':
            if self.args.get('tax_inclusive', False):
                return order.sub_total >= int(self.args['amount'])
            return order.sub_total_before_tax >= int(self.args['amount'])

        elif self.code == 'has_facet_values':
            minimum = int(self.args.get('minimum', 1))
            matches = 0
            for line in order.lines:
                if await utils.has_facet_values(line, self.args['facets']):
                    matches += line.quantity
            return matches >= minimum

        elif self.code == 'contains_variants':
            minimum = int(self.args.get('minimum', 1))
            wanted = {str(v) for v in self.args['variant_ids']}
            matches = sum(line.quantity for line in order.lines if line.product_variant_id in wanted)
            return matches >= minimum

        raise PromotionDefinitionError(f"unhandled condition '{self.code}'")


@dataclass
class PromotionAction:
    """A discount formula, identified by its code. Amounts are negative."""
    code: str
    args: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.code not in VALID_ACTION_CODES:
            raise PromotionDefinitionError(
                f"invalid action '{self.code}', must be one of: {VALID_ACTION_CODES}"
            )
        _check_args(self.code, self.args)

    @property
    def is_item_action(self) -> bool:
        return self.code in ITEM_ACTION_CODES

    @property
    def is_facet_restricted(self) -> bool:
        return self.code in FACET_ACTION_CODES

    async def applies_to_line(self, line: OrderLine, utils: PromotionUtils) -> bool:
        if self.code == 'facet_values_discount':
            return await utils.has_facet_values(line, self.args['facets'])
        return True

    def execute_for_item(self, item: OrderItem, line: OrderLine) -> int:
        if self.code in ('item_percentage_discount', 'facet_values_discount'):
            return -round(item.unit_price * float(self.args['discount']) / 100)
        elif self.code == 'item_fixed_discount':
            return -min(int(self.args['amount']), item.unit_price)
        raise PromotionDefinitionError(f"'{self.code}' is not an item action")

    def execute_for_order(self, order: Order) -> int:
        if self.code == 'order_percentage_discount':
            return -round(order.sub_total * float(self.args['discount']) / 100)
        elif self.code == 'order_fixed_discount':
            return -min(int(self.args['amount']), max(order.sub_total, 0))
        raise PromotionDefinitionError(f"'{self.code}' is not an order action")


@dataclass
class Promotion:
    """A discount rule with eligibility conditions and discount actions."""
    id: str
    name: str
    conditions: list[PromotionCondition] = field(default_factory=list)
    actions: list[PromotionAction] = field(default_factory=list)
    enabled: bool = True
    priority: int = 50
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    @property
    def source_id(self) -> str:
        return f"PROMOTION:{self.id}"

    def is_active_on(self, date: str) -> bool:
        """Whether the promotion is enabled and inside its date range (ISO dates)."""
        if not self.enabled:
            return False
        if self.start_date and date < self.start_date:
            return False
        if self.end_date and date > self.end_date:
            return False
        return True

    async def test(self, order: Order, utils: PromotionUtils) -> bool:
        """True when every condition passes."""
        for condition in self.conditions:
            if not await condition.check(order, utils):
                return False
        return True

    async def match_line(self, line: OrderLine, utils: PromotionUtils) -> list[bool]:
        """Per action, whether it may discount the items of `line`."""
        return [await action.applies_to_line(line, utils) for action in self.actions]

    def apply(
        self,
        target: Union[OrderItem, Order],
        line: Optional[OrderLine] = None,
        line_matches: Optional[list[bool]] = None,
    ) -> Optional[Adjustment]:
        """
        Compute the adjustment for an item (item actions) or an order
        (order actions). Returns None when the actions yield no discount.

        The discount never exceeds what is left of the target's price after
        the other promotions applied to it. `line_matches` comes from
        `match_line`; without it facet-restricted actions discount nothing.
        """
        if isinstance(target, OrderItem):
            base = target.unit_price
        else:
            base = target.sub_total
        remaining = max(base + _other_promotions(target.pending_adjustments, self.source_id), 0)

        amount = 0
        for i, action in enumerate(self.actions):
            if isinstance(target, OrderItem):
                if not action.is_item_action:
                    continue
                if action.is_facet_restricted and not (line_matches and line_matches[i]):
                    continue
                discount = action.execute_for_item(target, line)
            elif action.is_item_action:
                continue
            else:
                discount = action.execute_for_order(target)

            discount = max(discount, -remaining)
            remaining += discount
            amount += discount

        if amount == 0:
            return None
        return Adjustment(
            type=AdjustmentType.PROMOTION,
            source=self.source_id,
            amount=amount,
            description=self.name,
        )

    def to_dict(self) -> dict:
        return {
            "promotion_id": self.id,
            "name": self.name,
            "active": self.enabled,
            "priority": self.priority,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "conditions": [{"code": c.code, "args": dict(c.args)} for c in self.conditions],
            "actions": [{"code": a.code, "args": dict(a.args)} for a in self.actions],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Promotion':
        if not data.get('promotion_id'):
            raise PromotionDefinitionError("promotion_id is required")
        return cls(
            id=str(data['promotion_id']),
            name=data.get('name') or str(data['promotion_id']),
            conditions=[
                PromotionCondition(code=c['code'], args=c.get('args', {}))
                for c in data.get('conditions', [])
            ],
            actions=[
                PromotionAction(code=a['code'], args=a.get('args', {}))
                for a in data.get('actions', [])
            ],
            enabled=bool(data.get('active', True)),
            priority=int(data.get('priority', 50)),
            start_date=data.get('start_date'),
            end_date=data.get('end_date'),
        )

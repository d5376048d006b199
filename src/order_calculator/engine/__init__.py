"""Engine subpackage - order model and the pricing pipeline."""
from .order_calculator import OrderCalculator
from .models import Adjustment, AdjustmentType, Order, OrderItem, OrderLine, RequestContext

__all__ = ['OrderCalculator', 'Adjustment', 'AdjustmentType', 'Order', 'OrderItem', 'OrderLine', 'RequestContext']

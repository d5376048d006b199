"""Promotions subpackage - discount rules, compiler and loader."""
from .promotion import Promotion, PromotionAction, PromotionCondition

__all__ = ['Promotion', 'PromotionAction', 'PromotionCondition']

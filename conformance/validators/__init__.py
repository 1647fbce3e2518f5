"""Validators package"""
from .base import BaseValidator
from .touch_target import TouchTargetValidator
from .modal_bounds import ModalBoundsValidator
from .overflow import OverflowValidator
from .navigation import NavigationPresenceValidator
from .performance import PerformanceBudgetValidator
from .column_count import ColumnCountValidator
from .state_consistency import StateConsistencyValidator
from .page_content import PageContentValidator
from .access_guard import AccessGuardValidator

__all__ = [
    "BaseValidator",
    "TouchTargetValidator",
    "ModalBoundsValidator",
    "OverflowValidator",
    "NavigationPresenceValidator",
    "PerformanceBudgetValidator",
    "ColumnCountValidator",
    "StateConsistencyValidator",
    "PageContentValidator",
    "AccessGuardValidator",
]

from .catalog import find_active_product
from .stock_adjustments import (
    StockAdjustmentError,
    StockAdjustmentResult,
    adjust_product_stock,
)

__all__ = [
    "find_active_product",
    "adjust_product_stock",
    "StockAdjustmentError",
    "StockAdjustmentResult",
]

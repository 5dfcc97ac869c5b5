# poi_core/formulas/__init__.py
# Các hàm tính toán thuần túy dùng trong đồng thuận
from .alignment import ALIGNMENT_SCALE, calculate_alignment, average_alignment
from .weighted_median import (
    DEFAULT_CLIP_SIGMA,
    WeightedValue,
    clip_outliers,
    sort_weighted_values,
    weighted_median,
)
from .stake_weight import calculate_stake_weight

__all__ = [
    "ALIGNMENT_SCALE",
    "calculate_alignment",
    "average_alignment",
    "DEFAULT_CLIP_SIGMA",
    "WeightedValue",
    "clip_outliers",
    "sort_weighted_values",
    "weighted_median",
    "calculate_stake_weight",
]

# poi_core/formulas/weighted_median.py
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

DEFAULT_CLIP_SIGMA = 2.0


@dataclass(frozen=True)
class WeightedValue:
    """A reported weight paired with the reporter's stake."""

    value: int
    stake: int


def sort_weighted_values(values: Sequence[WeightedValue]) -> List[WeightedValue]:
    # sorted() is stable, so equal weights keep insertion order
    return sorted(values, key=lambda v: v.value)


def weighted_median(values: Sequence[WeightedValue]) -> int:
    """
    Tính trung vị có trọng số theo stake.

    Walks the weight-sorted values accumulating stake and returns the first
    value whose cumulative stake is strictly greater than half the total stake
    (floor division). With no stake at all the first sorted value is used.
    The comparison is strict on purpose, not an inclusive ``>=``: equal
    stakes over 10/20/30 give 20.

    Args:
        values (Sequence[WeightedValue]): Các cặp (trọng số, stake).

    Returns:
        int: Trung vị có trọng số, 0 nếu không có dữ liệu.
    """
    if not values:
        return 0
    sorted_vals = sort_weighted_values(values)
    total_stake = sum(v.stake for v in sorted_vals)
    if total_stake <= 0:
        return sorted_vals[0].value
    target = total_stake // 2
    cumulative = 0
    for v in sorted_vals:
        cumulative += v.stake
        if cumulative > target:
            return v.value
    return sorted_vals[-1].value


def clip_outliers(
    median: int,
    values: Sequence[WeightedValue],
    clip_sigma: float = DEFAULT_CLIP_SIGMA
) -> int:
    """
    Loại bỏ ngoại lai theo quy tắc k-sigma rồi lấy trung bình phần còn lại.

    Stake is ignored here: mean and population standard deviation are taken
    over the raw weights. Weights strictly inside ``clip_sigma`` standard
    deviations of the mean are kept and averaged with floor division.
    The band is exclusive on purpose, not an inclusive ``<=``: a weight
    exactly on the edge is dropped, so 1000 in {10, 10, 10, 10, 1000} goes.

    Args:
        median (int): Trung vị có trọng số, dùng khi không còn giá trị nào.
        values (Sequence[WeightedValue]): Các cặp (trọng số, stake).
        clip_sigma (float): Số độ lệch chuẩn cho phép.

    Returns:
        int: Trọng số đồng thuận sau khi cắt ngoại lai.
    """
    if not values:
        return median

    raw = [v.value for v in values]
    arr = np.asarray(raw, dtype=np.float64)
    mean = float(np.mean(arr))
    std_dev = float(np.std(arr))
    threshold = clip_sigma * std_dev

    kept = [w for w, diff in zip(raw, np.abs(arr - mean)) if diff < threshold]
    if not kept:
        return median
    return sum(kept) // len(kept)

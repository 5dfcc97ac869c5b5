# poi_core/formulas/alignment.py

ALIGNMENT_SCALE = 10_000


def calculate_alignment(
    reported_weight: int,
    consensus_weight: int,
    scale: int = ALIGNMENT_SCALE
) -> int:
    """
    Tính độ khớp giữa một trọng số được báo cáo và trọng số đồng thuận.

    Saturating and symmetric: perfect agreement scores ``scale``, a deviation
    of ``scale`` or more scores 0.

    Args:
        reported_weight (int): Trọng số validator đã gửi.
        consensus_weight (int): Trọng số đồng thuận tham chiếu.
        scale (int): Thang điểm tối đa (mặc định 10000).

    Returns:
        int: Điểm khớp trong khoảng [0, scale].
    """
    diff = abs(reported_weight - consensus_weight)
    return scale - min(diff, scale)


def average_alignment(alignments: list) -> int:
    """Integer (floor) average; an empty sample scores 0."""
    if not alignments:
        return 0
    return sum(alignments) // len(alignments)

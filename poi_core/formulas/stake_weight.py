# poi_core/formulas/stake_weight.py

DELEGATION_NUMERATOR = 18
DELEGATION_DENOMINATOR = 100


def calculate_stake_weight(
    amount: int,
    delegated_amount: int,
    numerator: int = DELEGATION_NUMERATOR,
    denominator: int = DELEGATION_DENOMINATOR
) -> int:
    """
    Tính trọng số stake của validator: W = alpha + 0.18 * tau.

    Fixed-point: the delegated share is ``numerator / denominator`` (18/100).

    Args:
        amount (int): Tổng stake của tài khoản (đã bao gồm phần được ủy quyền).
        delegated_amount (int): Phần stake được ủy quyền (tau).
        numerator (int): Tử số của hệ số ủy quyền.
        denominator (int): Mẫu số của hệ số ủy quyền.

    Returns:
        int: Trọng số stake không âm.
    """
    direct = max(0, amount - delegated_amount)
    delegated = max(0, delegated_amount)
    return direct + (delegated * numerator) // denominator

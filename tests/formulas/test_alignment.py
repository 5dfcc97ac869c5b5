# tests/formulas/test_alignment.py
import pytest

from poi_core.formulas import ALIGNMENT_SCALE, average_alignment, calculate_alignment


@pytest.mark.parametrize(
    "reported, consensus, expected",
    [
        (5000, 5000, 10000),
        (4000, 5000, 9000),
        (6000, 5000, 9000),
        (0, 10000, 0),
        (20000, 0, 0),  # lệch vượt thang điểm -> bão hòa về 0
        (0, 0, 10000),
    ],
)
def test_calculate_alignment(reported, consensus, expected):
    assert calculate_alignment(reported, consensus) == expected


def test_alignment_is_symmetric():
    assert calculate_alignment(1234, 8765) == calculate_alignment(8765, 1234)


def test_alignment_custom_scale():
    assert calculate_alignment(40, 50, scale=100) == 90
    assert calculate_alignment(0, 500, scale=100) == 0


def test_alignment_never_exceeds_scale():
    assert calculate_alignment(7, 7) == ALIGNMENT_SCALE


def test_average_alignment_floors():
    assert average_alignment([10000, 9999]) == 9999
    assert average_alignment([9990, 10000, 9990]) == 9993


def test_average_alignment_empty_is_zero():
    assert average_alignment([]) == 0

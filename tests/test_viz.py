import pytest

from bitdata.bitsource import BitSource
from bitdata.viz import bit_grid, plot_bits


def test_bit_grid_marks_window():
    grid = bit_grid(BitSource.from_string("1010 11"), start=2, end=4, width=4)
    assert grid == [[1, 0, 3, 2], [1, 1, 4, 4]]


def test_bit_grid_empty_source():
    assert bit_grid(BitSource(), width=2) == [[4, 4]]


def test_plot_bits_returns_figure():
    matplotlib = pytest.importorskip("matplotlib")
    matplotlib.use("Agg")
    fig = plot_bits(BitSource.from_string("1" * 20), start=3, end=9, width=8, show=False)
    assert fig is not None

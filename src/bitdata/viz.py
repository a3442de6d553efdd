from __future__ import annotations
from typing import Optional
from .bitsource import BitSource

# cell codes: clear/set outside the window, clear/set inside it, past the end
_COLORS = ["#ffffff", "#404040", "#cfe3ff", "#1f5fbf", "#f0f0f0"]


def bit_grid(src: BitSource, *, start: int = 0, end: Optional[int] = None, width: int = 64) -> list[list[int]]:
    """Rows of ``width`` cell codes, the window ``[start, end)`` marked."""
    if width < 1:
        raise ValueError("width must be >= 1")
    end = len(src) if end is None else end
    rows = max(1, (len(src) + width - 1) // width)
    grid = []
    for r in range(rows):
        row = []
        for c in range(width):
            i = r * width + c
            if i >= len(src):
                row.append(4)
            else:
                row.append(int(src[i]) + (2 if start <= i < end else 0))
        grid.append(row)
    return grid


def plot_bits(src: BitSource, *, start: int = 0, end: Optional[int] = None, width: int = 64, show: bool = True):
    """Minimal bit grid for sanity-checking what a decode consumed."""
    import matplotlib.pyplot as plt
    from matplotlib.colors import ListedColormap

    grid = bit_grid(src, start=start, end=end, width=width)
    fig = plt.figure()
    plt.imshow(grid, cmap=ListedColormap(_COLORS), vmin=0, vmax=len(_COLORS) - 1, interpolation="nearest")
    plt.xlabel("Bit in row")
    plt.ylabel(f"Row ({width} bits)")
    plt.title(f"{len(src)} bits, window [{start}, {len(src) if end is None else end})")
    if show:
        plt.show()
    return fig

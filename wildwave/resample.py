"""Fixed-point sample interpolation: linear, Newton and Gauss."""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Sequence

FPBITS = 10
FPMASK = (1 << FPBITS) - 1
MAX_GAUSS_ORDER = 34
_MAX_NEWTON_ORDER = 57


def _cdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def _at(data: Sequence[int], index: int) -> int:
    """Read a sample, treating positions past either end as silence."""
    if 0 <= index < len(data):
        return data[index]
    return 0


def newton_coefficients(order: int) -> list[list[float]]:
    """Signed Newton forward-difference coefficients for rows 0..order."""
    if not 0 <= order <= _MAX_NEWTON_ORDER:
        raise ValueError(f"order must be between 0 and {_MAX_NEWTON_ORDER}")
    rows: list[list[float]] = []
    for i in range(order + 1):
        row = [0.0] * (i + 1)
        row[0] = 1.0
        row[i] = 1.0
        if i > 1:
            row[0] = rows[i - 1][0] / i
            row[i] = rows[i - 1][0] / i
        for j in range(1, i):
            value = rows[i - 1][j - 1] + rows[i - 1][j]
            row[j] = value / i if i > 1 else value
        rows.append(row)
    return [
        [value if (i + j) % 2 == 0 else -value for j, value in enumerate(row)]
        for i, row in enumerate(rows)
    ]


def gauss_table(order: int, fpbits: int = FPBITS) -> list[list[float]]:
    """Gauss interpolation weights for every fractional position.

    Returns ``1 << fpbits`` rows, each holding ``order + 1`` weights.
    """
    if not 1 <= order <= _MAX_NEWTON_ORDER:
        raise ValueError(f"order must be between 1 and {_MAX_NEWTON_ORDER}")
    if fpbits < 0:
        raise ValueError("fpbits must not be negative")
    n_half = order >> 1
    four_pi = 4 * math.pi
    z = [i / four_pi for i in range(order + 1)]
    denominators = []
    for k in range(order + 1):
        product = 1.0
        for i in range(order + 1):
            if i != k:
                product *= math.sin(z[k] - z[i])
        denominators.append(product)

    steps = 1 << fpbits
    table = []
    for m in range(steps):
        xz = (m / steps + n_half) / four_pi
        sines = [math.sin(xz - zi) for zi in z]
        prefix = [1.0]
        for s in sines:
            prefix.append(prefix[-1] * s)
        suffix = [1.0]
        for s in reversed(sines):
            suffix.append(suffix[-1] * s)
        suffix.reverse()
        table.append(
            [prefix[k] * suffix[k + 1] / denominators[k] for k in range(order + 1)]
        )
    return table


def linear_interpolate(data: Sequence[int], pos: int) -> int:
    """Linearly interpolate ``data`` at fixed-point position ``pos``."""
    if pos < 0:
        raise ValueError("position must not be negative")
    index = pos >> FPBITS
    current = _at(data, index)
    following = _at(data, index + 1)
    return current + _cdiv((following - current) * (pos & FPMASK), 1024)


@lru_cache(maxsize=None)
def _tables(order: int) -> tuple[tuple[tuple[float, ...], ...], tuple[tuple[float, ...], ...]]:
    newton = tuple(tuple(row) for row in newton_coefficients(order))
    gauss = tuple(tuple(row) for row in gauss_table(order, FPBITS))
    return newton, gauss


class GaussInterpolator:
    """Gauss interpolation, falling back to Newton near the sample ends."""

    def __init__(self, order: int = MAX_GAUSS_ORDER) -> None:
        if not 1 <= order <= _MAX_NEWTON_ORDER:
            raise ValueError(f"order must be between 1 and {_MAX_NEWTON_ORDER}")
        self.order = order
        self._newton, self._gauss = _tables(order)

    def interpolate(self, data: Sequence[int], pos: int) -> float:
        """Interpolate ``data`` at fixed-point position ``pos``."""
        if pos < 0:
            raise ValueError("position must not be negative")
        index = pos >> FPBITS
        left = index
        right = len(data) - left - 1
        window = (right << 1) - 1
        if window <= 0:
            window = 1
        if window > (left << 1) + 1:
            window = (left << 1) + 1

        if window < self.order:
            xd = (pos & FPMASK) / (1 << FPBITS) + (window >> 1)
            start = index - (window >> 1)
            y = 0.0
            ii = window
            while ii:
                row = self._newton[ii]
                y += sum(_at(data, start + jj) * row[jj] for jj in range(ii + 1))
                ii -= 1
                y *= xd - ii
            return y + _at(data, start)

        weights = self._gauss[pos & FPMASK]
        start = index - (self.order >> 1)
        return sum(_at(data, start + i) * w for i, w in enumerate(weights))
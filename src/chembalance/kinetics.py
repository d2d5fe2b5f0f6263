"""Rate laws for single-reactant kinetics.

Closed-form concentration of a reactant ``A`` for zero, first and second
order reactions, plus a numerical integrator for the same rate laws:

    order 0:  [A] = max(0, [A]0 - k t)
    order 1:  [A] = [A]0 exp(-k t)
    order 2:  1/[A] = 1/[A]0 + k t
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np
from scipy.integrate import solve_ivp

SUPPORTED_ORDERS = (0, 1, 2)

ArrayLike = Union[float, np.ndarray]


def _check_order(order: int) -> None:
    if order not in SUPPORTED_ORDERS:
        raise ValueError(f"Unsupported reaction order: {order}")


def concentration(order: int, c0: float, k: float, t: ArrayLike) -> ArrayLike:
    """Concentration of the reactant at time ``t`` (scalar or array)."""
    _check_order(order)
    t = np.asarray(t, dtype=float)
    if order == 0:
        result = np.maximum(0.0, c0 - k * t)
    elif order == 1:
        result = c0 * np.exp(-k * t)
    else:
        result = c0 / (1.0 + k * t * c0)
    return float(result) if result.ndim == 0 else result


def concentration_profile(
    order: int, c0: float, k: float, points: int = 21
) -> Tuple[np.ndarray, np.ndarray]:
    """Sample the concentration from ``t = 0`` up to ``5 / k``.

    Falls back to a 10 s window when ``k`` is not positive.
    """
    max_time = 5.0 / k if k > 0 else 10.0
    times = np.linspace(0.0, max_time, points)
    return times, concentration(order, c0, k, times)


@dataclass(frozen=True)
class RateLaw:
    order: int
    rate_constant: float

    def __post_init__(self) -> None:
        _check_order(self.order)

    def rate(self, c: float) -> float:
        """Consumption rate -d[A]/dt at concentration ``c``."""
        if c <= 0.0:
            return 0.0
        return self.rate_constant * c**self.order

    def concentration(self, c0: float, t: ArrayLike) -> ArrayLike:
        return concentration(self.order, c0, self.rate_constant, t)

    def integrate(self, c0: float, times: np.ndarray) -> np.ndarray:
        """Integrate d[A]/dt = -k [A]^n numerically over ``times``."""

        def rhs(_t: float, state: np.ndarray) -> np.ndarray:
            return np.array([-self.rate(state[0])])

        result = solve_ivp(
            rhs,
            (float(times[0]), float(times[-1])),
            np.array([c0]),
            t_eval=times,
            method="BDF",
            rtol=1e-8,
            atol=1e-10,
        )
        return result.y[0]

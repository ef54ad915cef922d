import dataclasses
import enum
import math
from collections.abc import Callable, Sequence
from typing import Self

import numpy as np


class Domain(enum.Enum):
    r"""Shape of an unbounded integration domain.

    The value of each member is the flag QUADPACK uses for the same domain.
    ``LEFT`` is :math:`(-\infty,\mathrm{bound}]`, ``RIGHT`` is
    :math:`[\mathrm{bound},+\infty)`, and ``BOTH`` is the whole real line.
    """

    LEFT = -1
    RIGHT = 1
    BOTH = 2


@dataclasses.dataclass(frozen=True, slots=True)
class Transform:
    r"""Map from the unit interval onto an unbounded domain.

    A point :math:`t\in(0,1)` is sent to

    .. math::

        x(t) = \mathrm{bound} + d\,\frac{1-t}{t},

    where :math:`d=1` for :attr:`Domain.RIGHT` and :attr:`Domain.BOTH`, and
    :math:`d=-1` for :attr:`Domain.LEFT`. Multiplying the integrand by the Jacobian
    :math:`1/t^2` yields an integrand on :math:`(0,1)`. For :attr:`Domain.BOTH` the two
    half-lines are folded onto the same coordinate, so that the transformed integrand is
    :math:`(f(x)+f(-x))/t^2` with bound 0.

    Attributes
    ----------
    bound : float
        Finite end of the domain (ignored for :attr:`Domain.BOTH`).
    domain : Domain
    sign : float
        ``-1.0`` if the limits were given in decreasing order, otherwise ``1.0``.
    """

    bound: float
    domain: Domain
    sign: float = 1.0

    @classmethod
    def from_limits(cls, a: float, b: float) -> Self:
        """Build the transform for the integral from `a` to `b`.

        Raises
        ------
        ValueError
            If either limit is NaN, if both limits are finite, or if both limits are the
            same infinity.
        """
        a = float(a)
        b = float(b)

        if math.isnan(a) or math.isnan(b):
            raise ValueError("integration limits must not be NaN")

        match math.isinf(a), math.isinf(b):
            case True, True:
                if a == b:
                    raise ValueError("integration limits must not be equal")

                return cls(0.0, Domain.BOTH, 1.0 if a < b else -1.0)

            case True, False:
                domain = Domain.LEFT if a < 0 else Domain.RIGHT
                return cls(b, domain, 1.0 if a < 0 else -1.0)

            case False, True:
                domain = Domain.RIGHT if b > 0 else Domain.LEFT
                return cls(a, domain, 1.0 if b > 0 else -1.0)

            case _:
                raise ValueError(
                    "at least one integration limit must be infinite, "
                    f"got ({a!r}, {b!r})"
                )

    @property
    def folds(self) -> int:
        """Number of integrand evaluations per transformed abscissa."""
        return 2 if self.domain is Domain.BOTH else 1

    def abscissa(self, t: float) -> float:
        """Return the point of the domain corresponding to `t`."""
        boun = 0.0 if self.domain is Domain.BOTH else self.bound
        dinf = float(min(1, self.domain.value))
        return boun + dinf * (1.0 - t) / t

    def __call__(self, fun: Callable[[float], float], t: float) -> float:
        """Evaluate the transformed integrand at `t`."""
        x = self.abscissa(t)
        value = fun(x)

        if self.domain is Domain.BOTH:
            value += fun(-x)

        return float(value) / t / t

    def evaluate_many(
        self, fun: Callable[[np.ndarray], np.ndarray], ts: Sequence[float]
    ) -> list[float]:
        """Evaluate the transformed integrand at every point of `ts` with one call of
        `fun` (two calls for :attr:`Domain.BOTH`).

        Raises
        ------
        ValueError
            If `fun` does not return an array of the same shape as its argument.
        """
        t = np.asarray(ts, dtype=np.float64)
        boun = 0.0 if self.domain is Domain.BOTH else self.bound
        dinf = float(min(1, self.domain.value))
        x = boun + dinf * (1.0 - t) / t
        value = np.asarray(fun(x), dtype=np.float64)

        if self.domain is Domain.BOTH:
            value = value + np.asarray(fun(-x), dtype=np.float64)

        if value.shape != t.shape:
            raise ValueError(
                f"vectorized integrand returned shape {value.shape}, expected {t.shape}"
            )

        return (value / t / t).tolist()

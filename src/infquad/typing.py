"""
##############################
Typing (:mod:`infquad.typing`)
##############################

This module provides type definitions commonly used between modules.

.. autoclass:: Integrand
    :show-inheritance:
    :no-members:

.. autoclass:: VectorizedIntegrand
    :show-inheritance:
    :no-members:

"""

from abc import abstractmethod
from typing import Protocol

import numpy as np
import numpy.typing as npt


class Integrand(Protocol):
    """Protocol for scalar integrands.

    An integrand maps a real number to a real number. It must be free of side effects
    that influence its value, since it may be evaluated any number of times and in no
    particular order.
    """

    __slots__ = ()

    @abstractmethod
    def __call__(self, x: float, /) -> float: ...


class VectorizedIntegrand(Protocol):
    """Protocol for integrands evaluated on many abscissas at once.

    The argument is a one-dimensional array, and the returned array must have the same
    shape.
    """

    __slots__ = ()

    @abstractmethod
    def __call__(
        self, x: npt.NDArray[np.float64], /
    ) -> npt.NDArray[np.float64] | npt.ArrayLike: ...

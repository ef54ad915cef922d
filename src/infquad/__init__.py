from .context import Context, getcontext, localcontext, setcontext
from .quadrature import (
    AbortIntegration,
    InfiniteAdaptiveGaussKronrod,
    QuadResult,
    QuadStatus,
    integrate,
)

__all__ = [
    "Context",
    "getcontext",
    "localcontext",
    "setcontext",
    "AbortIntegration",
    "InfiniteAdaptiveGaussKronrod",
    "QuadResult",
    "QuadStatus",
    "integrate",
]

"""
######################################
Configuration (:mod:`infquad.context`)
######################################

.. currentmodule:: infquad.context

This module provides the defaults used by :func:`infquad.integrate` when tolerances or
the subdivision limit are omitted.

Context
=======

.. autosummary::
    :toctree: generated/

    Context
    getcontext
    localcontext
    setcontext

"""

import contextlib
import contextvars
from typing import Self


class Context:
    """Create a new context.

    Parameters
    ----------
    epsabs : float, default=0.0
        Default absolute tolerance.
    epsrel : float, default=1e-3
        Default relative tolerance.
    limit : int, default=100
        Default upper bound on the number of subintervals.

    Examples
    --------
    >>> ctx = Context(epsrel=1e-8)
    >>> print(ctx)
    Context(epsabs=0.0, epsrel=1e-08, limit=100)
    """

    __slots__ = ("_epsabs", "_epsrel", "_limit")
    _epsabs: float
    _epsrel: float
    _limit: int

    def __init__(self, epsabs: float = 0.0, epsrel: float = 1e-3, limit: int = 100):
        if not isinstance(limit, int) or isinstance(limit, bool):
            raise TypeError("limit must be an integer")

        if epsabs < 0 or epsrel < 0:
            raise ValueError("tolerances must be non-negative")

        self._epsabs = float(epsabs)
        self._epsrel = float(epsrel)
        self._limit = limit

    @property
    def epsabs(self) -> float:
        return self._epsabs

    @property
    def epsrel(self) -> float:
        return self._epsrel

    @property
    def limit(self) -> int:
        return self._limit

    def copy(self) -> Self:
        return self.__class__(self._epsabs, self._epsrel, self._limit)

    def __str__(self):
        name = type(self).__name__
        return (
            f"{name}(epsabs={self._epsabs!r}, epsrel={self._epsrel!r}, "
            f"limit={self._limit!r})"
        )

    def __repr__(self):
        return str(self)

    def __copy__(self) -> Self:
        return self.copy()


_var: contextvars.ContextVar[Context] = contextvars.ContextVar("infquad")


def getcontext() -> Context:
    """Return the current context for the active thread."""
    if context := _var.get(None):
        return context

    context = Context()
    _var.set(context)
    return context


def setcontext(ctx: Context) -> None:
    """Set the current context for the active thread to `ctx`."""
    if not isinstance(ctx, Context):
        raise TypeError

    _var.set(ctx)


@contextlib.contextmanager
def localcontext(
    ctx: Context | None = None,
    *,
    epsabs: float | None = None,
    epsrel: float | None = None,
    limit: int | None = None,
):
    """Return a context manager that will set the current context for the active thread
    to a copy of `ctx` on entry to the with-statement and restore the previous context
    when exiting the with-statement.

    Keyword arguments that are not ``None`` override the corresponding fields of the
    copy.

    Examples
    --------
    >>> with localcontext(limit=200) as ctx:
    ...     ctx.limit
    200
    >>> getcontext().limit
    100
    """
    if ctx is None:
        ctx = getcontext()

    if epsabs is None:
        epsabs = ctx._epsabs

    if epsrel is None:
        epsrel = ctx._epsrel

    if limit is None:
        limit = ctx._limit

    ctx = Context(epsabs, epsrel, limit)
    token = _var.set(ctx)

    try:
        yield ctx
    finally:
        _var.reset(token)

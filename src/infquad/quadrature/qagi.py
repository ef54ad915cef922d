import dataclasses
import enum
import logging
from collections.abc import Callable

from infquad.context import getcontext
from infquad.quadrature._machine import EPMACH, OFLOW, UFLOW
from infquad.quadrature.epsilon import EpsilonTable
from infquad.quadrature.kronrod import qk15i
from infquad.quadrature.transform import Transform
from infquad.quadrature.worklist import WorkList
from infquad.typing import Integrand, VectorizedIntegrand

logger = logging.getLogger(__name__)


class QuadStatus(enum.Enum):
    """Reason for the termination of :func:`integrate`."""

    SUCCESS = enum.auto()
    MAX_SUBDIVISIONS_REACHED = enum.auto()
    ROUNDOFF_LIMITED = enum.auto()
    BAD_INTEGRAND_BEHAVIOR = enum.auto()
    EXTRAPOLATION_STALLED = enum.auto()
    PROBABLY_DIVERGENT = enum.auto()
    INPUT_INVALID = enum.auto()
    ABORTED = enum.auto()


_MESSAGES = {
    QuadStatus.SUCCESS: "success",
    QuadStatus.MAX_SUBDIVISIONS_REACHED: "maximum number of subdivisions reached",
    QuadStatus.ROUNDOFF_LIMITED: "roundoff error prevents the requested tolerance",
    QuadStatus.BAD_INTEGRAND_BEHAVIOR: "extremely bad integrand behaviour detected",
    QuadStatus.EXTRAPOLATION_STALLED: "the algorithm does not converge",
    QuadStatus.PROBABLY_DIVERGENT: "the integral is probably divergent",
    QuadStatus.INPUT_INVALID: "invalid input",
}


class AbortIntegration(Exception):
    """Raised by a callback function to abort :func:`integrate`.

    Parameters
    ----------
    message : str, default="aborted"
    """

    message: str

    def __init__(self, message="aborted", *args, **kwargs):
        super().__init__(message, *args, **kwargs)
        self.message = message


@dataclasses.dataclass(frozen=True, slots=True)
class QuadResult:
    """Output of :func:`integrate`.

    Attributes
    ----------
    value : float
        Approximation to the integral.
    error : float
        Estimate of the modulus of the absolute error.
    neval : int
        Number of integrand evaluations.
    nintervals : int
        Number of subintervals produced by the subdivision process.
    status : QuadStatus
    message : str
        Description of `status`.
    """

    value: float
    error: float
    neval: int
    nintervals: int
    status: QuadStatus
    message: str


@dataclasses.dataclass(frozen=True, slots=True)
class QuadCallbackArg:
    """Argument of callback functions passed to :func:`integrate`.

    Attributes
    ----------
    nintervals : int
        Current number of subintervals.
    area : float
        Sum of the areas over all subintervals.
    errsum : float
        Sum of the error estimates over all subintervals.
    intervals : tuple[tuple[float, float], ...]
        Current partition of :math:`(0,1)` in the transformed variable.
    """

    nintervals: int
    area: float
    errsum: float
    intervals: tuple[tuple[float, float], ...]


def _result(
    transform: Transform,
    value: float,
    error: float,
    last: int,
    status: QuadStatus,
    message: str | None = None,
) -> QuadResult:
    neval = (30 * last - 15) * transform.folds if last > 0 else 0

    if message is None:
        message = _MESSAGES[status]

    logger.debug(
        "integration finished: status=%s value=%r error=%r neval=%d intervals=%d",
        status.name,
        value,
        error,
        neval,
        last,
    )
    return QuadResult(transform.sign * value, error, neval, last, status, message)


def integrate(
    fun: Integrand | VectorizedIntegrand,
    a: float,
    b: float,
    epsabs: float | None = None,
    epsrel: float | None = None,
    *,
    limit: int | None = None,
    vectorized: bool = False,
    callback: Callable[[QuadCallbackArg], None] | None = None,
) -> QuadResult:
    r"""Integrate `fun` over an infinite or semi-infinite interval.

    The interval is mapped onto :math:`(0,1)` and integrated by a globally adaptive
    15-point Gauss-Kronrod scheme, accelerated by Wynn's epsilon algorithm (QUADPACK's
    QAGI).

    Parameters
    ----------
    fun : Callable
        Integrand. If `vectorized` is ``False``, `fun` takes and returns a float.
    a : float
        Lower limit of integration.
    b : float
        Upper limit of integration. At least one of `a` and `b` must be infinite.
    epsabs : float, optional
        Absolute tolerance (the default is ``getcontext().epsabs``).
    epsrel : float, optional
        Relative tolerance (the default is ``getcontext().epsrel``).
    limit : int, optional
        Maximum number of subintervals (the default is ``getcontext().limit``).
    vectorized : bool, default=False
        If ``True``, `fun` takes a one-dimensional array of abscissae and returns an
        array of the same shape.
    callback : Callable[[QuadCallbackArg], None], optional
        Callback function called after each bisection. You can abort the integration by
        raising :class:`AbortIntegration`.

    Returns
    -------
    QuadResult
        The best available estimate is returned whatever the status is. The integration
        is considered successful when ``error <= max(epsabs, epsrel * abs(value))``.

    Raises
    ------
    ValueError
        If a limit is NaN, both limits are finite, or both are the same infinity.

    Warnings
    --------
    The error estimate is heuristic; it is not a verified bound.

    Examples
    --------
    >>> import math
    >>> r = integrate(lambda x: math.exp(-x * x), -math.inf, math.inf)
    >>> print(r.status.name)
    SUCCESS
    >>> abs(r.value - math.sqrt(math.pi)) <= r.error
    True

    The integral of :math:`x` over :math:`[0,\infty)` does not exist.

    >>> r = integrate(lambda x: x, 0, math.inf)
    >>> print(r.status.name)
    PROBABLY_DIVERGENT
    """
    transform = Transform.from_limits(a, b)

    if callback is not None and not callable(callback):
        raise TypeError

    ctx = getcontext()
    epsabs = ctx.epsabs if epsabs is None else float(epsabs)
    epsrel = ctx.epsrel if epsrel is None else float(epsrel)
    limit = ctx.limit if limit is None else limit

    if limit < 1:
        return _result(transform, 0.0, 0.0, 0, QuadStatus.INPUT_INVALID)

    if epsabs <= 0.0 and epsrel < max(EPMACH * 50.0, 5e-15):
        return _result(transform, 0.0, 0.0, 0, QuadStatus.INPUT_INVALID)

    return _Bisection(fun, transform, epsabs, epsrel, limit, vectorized, callback).run()


class _Bisection:
    """State of one run of the adaptive bisection (QUADPACK's QAGIE)."""

    __slots__ = (
        "fun",
        "transform",
        "epsabs",
        "epsrel",
        "limit",
        "vectorized",
        "callback",
        "worklist",
        "epsilon",
        "status",
        "result",
        "abserr",
        "area",
        "errsum",
        "defabs",
        "correc",
        "ksgn",
        "ierro",
        "last",
    )

    def __init__(self, fun, transform, epsabs, epsrel, limit, vectorized, callback):
        self.fun = fun
        self.transform = transform
        self.epsabs = epsabs
        self.epsrel = epsrel
        self.limit = limit
        self.vectorized = vectorized
        self.callback = callback
        self.worklist = WorkList(limit)
        self.epsilon = EpsilonTable()
        self.status = QuadStatus.SUCCESS
        self.correc = 0.0
        self.ierro = False
        self.last = 0

    def _rule(self, a: float, b: float):
        return qk15i(self.fun, self.transform, a, b, self.vectorized)

    def run(self) -> QuadResult:
        # Phase 1: first approximation over the whole of (0, 1).
        rule = self._rule(0.0, 1.0)
        self.result = rule.result
        self.abserr = rule.abserr
        self.defabs = rule.resabs
        resasc = rule.resasc
        self.last = 1
        self.worklist.start(rule.result, rule.abserr)
        dres = abs(rule.result)
        errbnd = max(self.epsabs, self.epsrel * dres)

        if self.abserr <= EPMACH * 100.0 * self.defabs and self.abserr > errbnd:
            self.status = QuadStatus.ROUNDOFF_LIMITED

        if self.limit == 1:
            self.status = QuadStatus.MAX_SUBDIVISIONS_REACHED

        if (
            self.status is not QuadStatus.SUCCESS
            or (self.abserr <= errbnd and self.abserr != resasc)
            or self.abserr == 0.0
        ):
            return self._finish()

        self.epsilon.append(self.result)
        self.area = self.result
        self.errsum = self.abserr
        self.abserr = OFLOW
        self.ksgn = 1 if dres >= (1.0 - EPMACH * 50.0) * self.defabs else -1

        # Phase 2: bisection loop.
        match self._bisect():
            case "SUM":
                return self._sum()

            case "ABORTED", message:
                return _result(
                    self.transform,
                    self.area,
                    self.errsum,
                    self.last,
                    QuadStatus.ABORTED,
                    message,
                )

        # Phase 3: choose between the extrapolated and the summed result.
        return self._select()

    def _bisect(self):
        worklist = self.worklist
        epsilon = self.epsilon
        limit = self.limit
        epsabs = self.epsabs
        epsrel = self.epsrel
        extrap = False
        noext = False
        iroff1 = iroff2 = iroff3 = 0
        ktmin = 0
        small = 0.0
        erlarg = 0.0
        ertest = 0.0

        for last in range(2, limit + 1):
            self.last = last

            # Bisect the subinterval with the nrmax-th largest error estimate.
            maxerr = worklist.maxerr
            errmax = worklist.errmax
            a1 = worklist.alist[maxerr]
            b1 = (worklist.alist[maxerr] + worklist.blist[maxerr]) * 0.5
            a2 = b1
            b2 = worklist.blist[maxerr]
            erlast = errmax
            rule1 = self._rule(a1, b1)
            rule2 = self._rule(a2, b2)

            # Improve the previous approximations to integral and error.
            area12 = rule1.result + rule2.result
            erro12 = rule1.abserr + rule2.abserr
            self.errsum = self.errsum + erro12 - errmax
            self.area = self.area + area12 - worklist.rlist[maxerr]

            if rule1.resasc != rule1.abserr and rule2.resasc != rule2.abserr:
                if (
                    abs(worklist.rlist[maxerr] - area12) <= abs(area12) * 1e-5
                    and erro12 >= errmax * 0.99
                ):
                    if extrap:
                        iroff2 += 1
                    else:
                        iroff1 += 1

                if last > 10 and erro12 > errmax:
                    iroff3 += 1

            errbnd = max(epsabs, epsrel * abs(self.area))

            if iroff1 + iroff2 >= 10 or iroff3 >= 20:
                self.status = QuadStatus.ROUNDOFF_LIMITED

            if iroff2 >= 5:
                self.ierro = True

            if last == limit:
                self.status = QuadStatus.MAX_SUBDIVISIONS_REACHED

            # The bisected interval is too narrow to be split at a representable point.
            if max(abs(a1), abs(b2)) <= (EPMACH * 100.0 + 1.0) * (
                abs(a2) + UFLOW * 1e3
            ):
                self.status = QuadStatus.BAD_INTEGRAND_BEHAVIOR

            worklist.split(
                a1, b1, rule1.result, rule1.abserr, a2, b2, rule2.result, rule2.abserr
            )

            if self.callback is not None:
                arg = QuadCallbackArg(last, self.area, self.errsum, worklist.intervals())

                try:
                    self.callback(arg)
                except AbortIntegration as exc:
                    logger.debug("integration aborted by callback: %s", exc.message)
                    return "ABORTED", exc.message

            if self.errsum <= errbnd:
                return "SUM"

            if self.status is not QuadStatus.SUCCESS:
                return None

            if last == 2:
                small = 0.375
                erlarg = self.errsum
                ertest = errbnd
                epsilon.append(self.area)
                continue

            if noext:
                continue

            erlarg -= erlast

            if abs(b1 - a1) > small:
                erlarg += erro12

            if not extrap:
                # Extrapolate only once the interval to be bisected next is among the
                # smallest ones.
                if worklist.width(worklist.maxerr) > small:
                    continue

                extrap = True
                worklist.nrmax = 1

            # The smallest interval has the largest error. Before bisecting, decrease the
            # sum of the errors over the larger intervals (erlarg) and extrapolate.
            if not self.ierro and erlarg > ertest and self._select_large(small):
                continue

            # Perform extrapolation.
            epsilon.append(self.area)
            reseps, abseps = epsilon.extrapolate()
            ktmin += 1

            if ktmin > 5 and self.abserr < self.errsum * 1e-3:
                self.status = QuadStatus.EXTRAPOLATION_STALLED

            if abseps < self.abserr:
                ktmin = 0
                self.abserr = abseps
                self.result = reseps
                self.correc = erlarg
                ertest = max(epsabs, epsrel * abs(reseps))
                logger.debug(
                    "extrapolated result accepted: value=%r error=%r intervals=%d",
                    reseps,
                    abseps,
                    last,
                )

                if self.abserr <= ertest:
                    return None

            # Prepare bisection of the smallest interval.
            if epsilon.n == 1:
                noext = True

            if self.status is QuadStatus.EXTRAPOLATION_STALLED:
                return None

            worklist.select(0)
            extrap = False
            small *= 0.5
            erlarg = self.errsum

        return None

    def _select_large(self, small: float) -> bool:
        """Walk down the ordering from `nrmax` to the first interval wider than `small`
        and select it. Return ``False`` if every interval that can still be bisected is
        small."""
        worklist = self.worklist
        jupbnd = self.last

        if self.last > self.limit // 2 + 2:
            jupbnd = self.limit + 3 - self.last

        for _ in range(jupbnd - worklist.nrmax):
            worklist.select(worklist.nrmax)

            if worklist.width(worklist.maxerr) > small:
                return True

            worklist.nrmax += 1

        return False

    def _select(self) -> QuadResult:
        if self.abserr == OFLOW:
            return self._sum()

        if self.status is not QuadStatus.SUCCESS or self.ierro:
            if self.ierro:
                self.abserr += self.correc

            if self.status is QuadStatus.SUCCESS:
                self.status = QuadStatus.ROUNDOFF_LIMITED

            if self.result != 0.0 and self.area != 0.0:
                if self.abserr / abs(self.result) > self.errsum / abs(self.area):
                    return self._sum()
            elif self.abserr > self.errsum:
                return self._sum()
            elif self.area == 0.0:
                return self._finish()

        # Test on divergence.
        if (
            self.ksgn == -1
            and max(abs(self.result), abs(self.area)) <= self.defabs * 0.01
        ):
            return self._finish()

        if self.area == 0.0:
            # result / area is infinite or NaN
            divergent = self.result != 0.0 or self.errsum > 0.0
        else:
            ratio = self.result / self.area
            divergent = ratio < 0.01 or ratio > 100.0 or self.errsum > abs(self.area)

        if divergent:
            self.status = QuadStatus.PROBABLY_DIVERGENT

        return self._finish()

    def _sum(self) -> QuadResult:
        self.result = self.worklist.total()
        self.abserr = self.errsum
        return self._finish()

    def _finish(self) -> QuadResult:
        return _result(
            self.transform, self.result, self.abserr, self.last, self.status
        )


class InfiniteAdaptiveGaussKronrod:
    """Integrator over infinite and semi-infinite intervals that keeps the outcome of
    its last run.

    Parameters
    ----------
    fun : Callable
        Integrand.
    a : float
        Lower limit of integration.
    b : float
        Upper limit of integration. At least one of `a` and `b` must be infinite.
    epsabs : float, optional
        Absolute tolerance (the default is ``getcontext().epsabs``).
    epsrel : float, optional
        Relative tolerance (the default is ``getcontext().epsrel``).
    limit : int, optional
        Maximum number of subintervals (the default is ``getcontext().limit``).

    Examples
    --------
    >>> import math
    >>> itor = InfiniteAdaptiveGaussKronrod(lambda x: math.exp(-x), 0, math.inf)
    >>> round(itor.compute(), 6)
    1.0
    >>> itor.evaluations == 30 * itor.result.nintervals - 15
    True
    """

    __slots__ = ("fun", "a", "b", "epsabs", "epsrel", "limit", "_result")
    fun: Integrand
    a: float
    b: float
    epsabs: float | None
    epsrel: float | None
    limit: int | None
    _result: QuadResult | None

    def __init__(
        self,
        fun: Integrand,
        a: float,
        b: float,
        epsabs: float | None = None,
        epsrel: float | None = None,
        limit: int | None = None,
    ):
        Transform.from_limits(a, b)
        self.fun = fun
        self.a = a
        self.b = b
        self.epsabs = epsabs
        self.epsrel = epsrel
        self.limit = limit
        self._result = None

    def compute(self) -> float:
        """Integrate and return the approximation to the integral."""
        self._result = integrate(
            self.fun, self.a, self.b, self.epsabs, self.epsrel, limit=self.limit
        )
        return self._result.value

    @property
    def result(self) -> QuadResult:
        """Outcome of the last call of :meth:`compute`.

        Raises
        ------
        RuntimeError
            If :meth:`compute` has not been called.
        """
        if self._result is None:
            raise RuntimeError("compute() has not been called")

        return self._result

    @property
    def area(self) -> float:
        return self.result.value

    @property
    def error(self) -> float:
        return self.result.error

    @property
    def evaluations(self) -> int:
        return self.result.neval

    @property
    def status(self) -> QuadStatus:
        return self.result.status

    @staticmethod
    def integrate_value(fun: Integrand, a: float, b: float) -> float:
        """Return the integral of `fun` from `a` to `b` with the default tolerances."""
        return integrate(fun, a, b).value

import logging
import math

import mpmath
import numpy as np
import pytest

from infquad import QuadStatus, integrate, localcontext
from infquad.quadrature.qagi import AbortIntegration, InfiniteAdaptiveGaussKronrod

INF = math.inf


@pytest.mark.parametrize(
    "fun, a, b, expected",
    [
        (lambda x: math.exp(-x), 0, INF, 1.0),
        (lambda x: math.exp(-x * x), -INF, INF, math.sqrt(math.pi)),
        (lambda x: 1 / x**2, 1, INF, 1.0),
        (lambda x: math.exp(x), -INF, 0, 1.0),
        (lambda x: 1 / (1 + x * x), 0, INF, math.pi / 2),
        (lambda x: 1 / (1 + x**4), -INF, INF, math.pi / math.sqrt(2)),
    ],
)
def test_closed_form(fun, a, b, expected):
    r = integrate(fun, a, b)
    assert r.status is QuadStatus.SUCCESS
    assert r.value == pytest.approx(expected, rel=1e-3)
    assert abs(r.value - expected) <= r.error


def test_endpoint_singularity():
    # Example of the QUADPACK documentation for QAGI.
    r = integrate(lambda x: math.log(x) / (1 + 100 * x * x), 0, INF)
    assert r.status is QuadStatus.SUCCESS
    assert r.value == pytest.approx(-math.pi * math.log(10) / 20, rel=1e-3)


@pytest.mark.parametrize(
    "fun, mpfun, a, b",
    [
        (
            lambda x: math.exp(-x) * math.log1p(x),
            lambda x: mpmath.exp(-x) * mpmath.log(1 + x),
            0,
            INF,
        ),
        (
            lambda x: math.exp(-x * x) * math.cos(x),
            lambda x: mpmath.exp(-x * x) * mpmath.cos(x),
            -INF,
            INF,
        ),
        (
            lambda x: math.exp(x) / math.sqrt(1 - x),
            lambda x: mpmath.exp(x) / mpmath.sqrt(1 - x),
            -INF,
            0.5,
        ),
    ],
)
def test_reference(fun, mpfun, a, b):
    expected = float(mpmath.quad(mpfun, [a, b]))
    r = integrate(fun, a, b, epsrel=1e-8)
    assert r.status is QuadStatus.SUCCESS
    assert r.value == pytest.approx(expected, rel=1e-7)


def test_determinism():
    def fun(x):
        return math.log(x) / (1 + 100 * x * x)

    assert integrate(fun, 0, INF) == integrate(fun, 0, INF)


def test_orientation():
    forward = integrate(lambda x: math.exp(-x), 0, INF)
    backward = integrate(lambda x: math.exp(-x), INF, 0)
    assert backward.value == -forward.value
    assert backward.error == forward.error
    assert backward.neval == forward.neval

    r = integrate(lambda x: math.exp(-x * x), INF, -INF)
    assert r.value == pytest.approx(-math.sqrt(math.pi), rel=1e-3)


@pytest.mark.parametrize(
    "fun",
    [lambda x: math.exp(-x), lambda x: 1 / (1 + x * x), lambda x: x * math.exp(-x)],
)
def test_tolerance(fun):
    error = math.inf

    for k in range(12):
        epsrel = 1e-3 * 0.5**k
        r = integrate(fun, 0, INF, epsrel=epsrel)
        assert r.status is QuadStatus.SUCCESS
        assert r.error <= epsrel * abs(r.value)
        assert r.error <= error
        error = r.error


@pytest.mark.parametrize("a, b, folds", [(0, INF, 1), (-INF, 2, 1), (-INF, INF, 2)])
def test_evaluation_count(a, b, folds):
    calls = 0

    def fun(x):
        nonlocal calls
        calls += 1
        return math.exp(-abs(x)) * math.cos(x) ** 2

    r = integrate(fun, a, b, epsrel=1e-6)
    assert r.nintervals > 1
    assert r.neval == calls
    assert r.neval == (30 * r.nintervals - 15) * folds


def test_partition():
    seen = []

    def callback(arg):
        assert len(arg.intervals) == arg.nintervals
        assert all(0 <= x < y <= 1 for x, y in arg.intervals)
        assert math.fsum(y - x for x, y in arg.intervals) == 1.0
        seen.append(arg.nintervals)

    r = integrate(
        lambda x: math.log(x) / (1 + 100 * x * x), 0, INF, callback=callback
    )
    assert seen == list(range(2, r.nintervals + 1))


def test_abort():
    def callback(arg):
        if arg.nintervals == 3:
            raise AbortIntegration("enough")

    r = integrate(lambda x: math.log(x) / (1 + 100 * x * x), 0, INF, callback=callback)
    assert r.status is QuadStatus.ABORTED
    assert r.message == "enough"
    assert r.nintervals == 3
    assert r.neval == 75
    assert math.isfinite(r.value)


def test_divergent():
    r = integrate(lambda x: x, 0, INF)
    assert r.status is QuadStatus.PROBABLY_DIVERGENT


def test_bad_integrand_behavior():
    r = integrate(lambda x: 1 / abs(x - 0.3), 0, INF, epsrel=1e-6, limit=2000)
    assert r.status is QuadStatus.BAD_INTEGRAND_BEHAVIOR
    assert r.nintervals < 2000


def test_roundoff_limited():
    rng = np.random.default_rng(42)

    def fun(x):
        return math.exp(-x) * (1 + 1e-6 * rng.random())

    r = integrate(fun, 0, INF, epsrel=1e-10)
    assert r.status is QuadStatus.ROUNDOFF_LIMITED
    assert r.value == pytest.approx(1.0, rel=1e-5)


def test_extrapolation_stalled():
    r = integrate(lambda x: 1 / math.sqrt(x), 0, INF)
    assert r.status is QuadStatus.EXTRAPOLATION_STALLED


def test_max_subdivisions():
    r = integrate(lambda x: math.log(x) / (1 + 100 * x * x), 0, INF, limit=3)
    assert r.status is QuadStatus.MAX_SUBDIVISIONS_REACHED
    assert r.nintervals == 3
    assert r.neval == 75

    with localcontext(limit=1):
        r = integrate(lambda x: math.exp(-x), 0, INF)

    assert r.status is QuadStatus.MAX_SUBDIVISIONS_REACHED
    assert r.neval == 15


@pytest.mark.parametrize(
    "kwargs", [{"limit": 0}, {"epsabs": 0.0, "epsrel": 1e-16}, {"epsrel": 0.0}]
)
def test_input_invalid(kwargs):
    r = integrate(lambda x: math.exp(-x), 0, INF, **kwargs)
    assert r.status is QuadStatus.INPUT_INVALID
    assert (r.value, r.error, r.neval, r.nintervals) == (0.0, 0.0, 0, 0)


@pytest.mark.parametrize("a, b", [(0, 1), (INF, INF), (math.nan, INF)])
def test_invalid_limits(a, b):
    calls = 0

    def fun(x):
        nonlocal calls
        calls += 1
        return x

    with pytest.raises(ValueError):
        integrate(fun, a, b)

    assert calls == 0


def test_invalid_callback():
    with pytest.raises(TypeError):
        integrate(lambda x: math.exp(-x), 0, INF, callback=42)


def test_integrand_exception():
    def fun(x):
        raise ZeroDivisionError

    with pytest.raises(ZeroDivisionError):
        integrate(fun, 0, INF)


def test_absolute_tolerance():
    r = integrate(lambda x: math.exp(-x), 0, INF, epsabs=1e-9, epsrel=0.0)
    assert r.status is QuadStatus.SUCCESS
    assert r.error <= 1e-9


def test_vectorized():
    r0 = integrate(lambda x: math.exp(-x * x), -INF, INF)
    r1 = integrate(lambda x: np.exp(-x * x), -INF, INF, vectorized=True)
    assert r1.status is r0.status
    assert r1.nintervals == r0.nintervals
    assert r1.neval == r0.neval
    assert r1.value == pytest.approx(r0.value, rel=1e-12)


def test_logging(caplog):
    with caplog.at_level(logging.DEBUG, logger="infquad.quadrature.qagi"):
        integrate(lambda x: math.exp(-x), 0, INF)

    assert any("integration finished" in rec.message for rec in caplog.records)


def test_infinite_adaptive_gauss_kronrod():
    itor = InfiniteAdaptiveGaussKronrod(lambda x: math.exp(-x), 0, INF)

    with pytest.raises(RuntimeError):
        itor.area

    value = itor.compute()
    assert value == pytest.approx(1.0, rel=1e-3)
    assert itor.area == value
    assert itor.status is QuadStatus.SUCCESS
    assert itor.evaluations == 30 * itor.result.nintervals - 15
    itor.epsrel = 1e-8
    itor.compute()
    assert itor.error <= 1e-8 * itor.area
    assert itor.area == pytest.approx(1.0, rel=1e-8)

    value = InfiniteAdaptiveGaussKronrod.integrate_value(math.exp, -INF, 0)
    assert value == pytest.approx(1.0, rel=1e-3)

    with pytest.raises(ValueError):
        InfiniteAdaptiveGaussKronrod(math.exp, 0, 1)


def test_slowly_decaying():
    # Reference subdivision of QUADPACK's double-precision QAGI.
    r = integrate(lambda x: x**-1.01, 1, INF, epsrel=1e-12)
    assert r.nintervals == 10
    assert r.value == pytest.approx(100.0, rel=1e-8)

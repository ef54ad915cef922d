import math

import numpy as np
import pytest

from infquad.quadrature.transform import Domain, Transform


def test_from_limits():
    inf = math.inf
    assert Transform.from_limits(1, inf) == Transform(1.0, Domain.RIGHT, 1.0)
    assert Transform.from_limits(-inf, 2) == Transform(2.0, Domain.LEFT, 1.0)
    assert Transform.from_limits(-inf, inf) == Transform(0.0, Domain.BOTH, 1.0)
    assert Transform.from_limits(inf, 0) == Transform(0.0, Domain.RIGHT, -1.0)
    assert Transform.from_limits(3, -inf) == Transform(3.0, Domain.LEFT, -1.0)
    assert Transform.from_limits(inf, -inf) == Transform(0.0, Domain.BOTH, -1.0)


@pytest.mark.parametrize(
    "a, b",
    [(0, 1), (-2.5, 7), (math.inf, math.inf), (-math.inf, -math.inf), (math.nan, 1)],
)
def test_from_limits_invalid(a, b):
    with pytest.raises(ValueError):
        Transform.from_limits(a, b)


def test_abscissa():
    right = Transform(1.0, Domain.RIGHT)
    assert right.abscissa(0.5) == 2.0
    assert right.abscissa(1.0) == 1.0

    left = Transform(1.0, Domain.LEFT)
    assert left.abscissa(0.5) == 0.0
    assert left.abscissa(0.25) == -2.0

    both = Transform(5.0, Domain.BOTH)
    assert both.abscissa(0.5) == 1.0


def test_call():
    right = Transform(0.0, Domain.RIGHT)
    assert right(lambda x: 1 / (1 + x) ** 2, 0.25) == pytest.approx(1.0)
    assert right.folds == 1

    both = Transform(0.0, Domain.BOTH)
    assert both(lambda x: x * x, 0.5) == 8.0
    assert both(lambda x: x**3, 0.5) == 0.0
    assert both.folds == 2


def test_evaluate_many():
    ts = [0.1, 0.25, 0.5, 0.9]

    for domain in Domain:
        transform = Transform(-0.5, domain)
        expected = [transform(lambda x: float(np.exp(-x * x)), t) for t in ts]
        actual = transform.evaluate_many(lambda x: np.exp(-x * x), ts)
        assert actual == pytest.approx(expected, rel=1e-13)


def test_evaluate_many_shape():
    transform = Transform(0.0, Domain.RIGHT)

    with pytest.raises(ValueError):
        transform.evaluate_many(lambda x: np.zeros(3), [0.25, 0.5])

"""
#############################################################
Quadrature on unbounded intervals (:mod:`infquad.quadrature`)
#############################################################

.. currentmodule:: infquad.quadrature

This module provides an adaptive Gauss-Kronrod integrator for infinite and
semi-infinite intervals, after QUADPACK's QAGI.

Integration
===========

.. autosummary::
    :toctree: generated/

    integrate
    InfiniteAdaptiveGaussKronrod

Results
=======

.. autosummary::
    :toctree: generated/

    AbortIntegration
    QuadCallbackArg
    QuadResult
    QuadStatus

Building blocks
===============

.. autosummary::
    :toctree: generated/

    Domain
    EpsilonTable
    RuleResult
    Transform
    WorkList
    qk15i

"""

from .epsilon import EpsilonTable
from .kronrod import RuleResult, qk15i
from .qagi import (
    AbortIntegration,
    InfiniteAdaptiveGaussKronrod,
    QuadCallbackArg,
    QuadResult,
    QuadStatus,
    integrate,
)
from .transform import Domain, Transform
from .worklist import WorkList

__all__ = [
    "EpsilonTable",
    "RuleResult",
    "qk15i",
    "AbortIntegration",
    "InfiniteAdaptiveGaussKronrod",
    "QuadCallbackArg",
    "QuadResult",
    "QuadStatus",
    "integrate",
    "Domain",
    "Transform",
    "WorkList",
]

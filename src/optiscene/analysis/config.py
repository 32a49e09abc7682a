#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Configuration records of scene analyses

    :class:`SceneContext` holds the settings shared by all nodes of a scene,
    the other classes select an analysis mode and its parameters. All of
    them are immutable; a changed setting means a new record.

.. Created on Thu Mar 28 09:33:50 2024

.. codeauthor: The optiscene developers
"""
from enum import Enum
import math

import attr

from optiscene.opmerror import OtherError
from optiscene.elem.fluence import FluenceEstimator
from optiscene.elem.medium import refr_index_vacuum
from optiscene.raytr.raytrace import MissedSurfaceStrategy


class AnalyzerKind(Enum):
    ENERGY = 'energy'
    RAYTRACE = 'ray trace'
    GHOSTFOCUS = 'ghost focus'


class RayTracingMode(Enum):
    """ only sequential ray tracing is available """
    SEQUENTIAL = 'sequential'


def _check_wavelength(instance, attribute, value):
    if not (math.isfinite(value) and value > 0.0):
        raise OtherError("alignment wavelength must be > 0.0 and finite")


def _check_min_energy(instance, attribute, value):
    if not (math.isfinite(value) and value >= 0.0):
        raise OtherError("minimum energy per ray must be >= 0.0 and finite")


def _check_count(instance, attribute, value):
    if value < 0:
        raise OtherError(f"{attribute.name} must be >= 0")


@attr.s(frozen=True)
class SceneContext():
    """ Settings visible to every node during an analysis run.

    Attributes:
        ambient_refractive_index: refractive index model of the medium
            between the nodes
        alignment_wavelength: wavelength (nm) of the optical axis ray used to
            position the nodes
    """
    ambient_refractive_index = attr.ib(factory=refr_index_vacuum)
    alignment_wavelength = attr.ib(default=1000.0,
                                   validator=_check_wavelength)


@attr.s(frozen=True)
class EnergyConfig():
    kind = AnalyzerKind.ENERGY


@attr.s(frozen=True)
class RayTraceConfig():
    """ Parameters of a ray tracing analysis.

    Attributes:
        min_energy_per_ray: rays below this energy (J) are invalidated
        max_number_of_bounces: rays with more reflections are invalidated
        max_number_of_refractions: rays reaching this number of refractions
            are invalidated
        missed_surface_strategy: handling of rays missing a surface
        mode: ray tracing mode
    """
    kind = AnalyzerKind.RAYTRACE

    min_energy_per_ray = attr.ib(default=1.0e-12,
                                 validator=_check_min_energy)
    max_number_of_bounces = attr.ib(default=1000, validator=_check_count)
    max_number_of_refractions = attr.ib(default=1000, validator=_check_count)
    missed_surface_strategy = attr.ib(default=MissedSurfaceStrategy.STOP)
    mode = attr.ib(default=RayTracingMode.SEQUENTIAL)


@attr.s(frozen=True)
class GhostFocusConfig():
    """ Parameters of a ghost focus analysis.

    Attributes:
        max_bounces: highest number of reflections followed
        fluence_estimator: estimator for the fluence check against the
            damage threshold of each surface
        missed_surface_strategy: handling of rays missing a surface
    """
    kind = AnalyzerKind.GHOSTFOCUS

    max_bounces = attr.ib(default=1, validator=_check_count)
    fluence_estimator = attr.ib(default=FluenceEstimator.VORONOI)
    missed_surface_strategy = attr.ib(default=MissedSurfaceStrategy.STOP)


def positioning_config():
    """ ray trace settings of the node positioning pass """
    return RayTraceConfig(min_energy_per_ray=0.0)

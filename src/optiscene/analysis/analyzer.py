#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Analyzers running an analysis mode on a scene

    A scene is a top level :class:`~.group.NodeGroup`. Each analyzer takes
    its configuration record from :mod:`~.config` and analyzes a scene with
    its context. The results stay in the nodes: detectors record the light
    they see, surfaces record hit maps. Use :meth:`~.OpticNode.report` to
    collect them.

    The ray tracing and ghost focus analyzers start with a positioning pass
    that places every node along the optical axis leaving the sources.

.. Created on Thu Apr  4 09:30:12 2024

.. codeauthor: The optiscene developers
"""
import logging

from optiscene.opmerror import AnalysisError
from optiscene.analysis.config import (AnalyzerKind, EnergyConfig,
                                       RayTraceConfig, GhostFocusConfig)

logger = logging.getLogger(__name__)


def scenery_label(scenery):
    return f" '{scenery.name}'" if scenery.name else ""


class Analyzer():
    """ Base class of the analyzers

    Attributes:
        config: the configuration record of the analysis mode
        result: the light leaving the external output ports of the scene
    """
    config_cls = None

    def __init__(self, config=None):
        self.config = config if config is not None else self.config_cls()
        self.result = {}

    def __repr__(self):
        return "{!s}({!r})".format(type(self).__name__, self.config)

    def calc_node_positions(self, scenery):
        """ place all nodes along the optical axis, then clear the hits """
        logger.info("Calculate node positions of "
                    f"scenery{scenery_label(scenery)}.")
        scenery.clear_positions()
        scenery.clear_edges()
        scenery.calc_node_position({}, scenery.context)
        scenery.reset_data()

    def analyze(self, scenery):
        logger.info(f"Performing {self.config.kind.value} analysis of "
                    f"scenery{scenery_label(scenery)}.")
        scenery.clear_edges()
        self.result = scenery.analyze({}, self.config, scenery.context)
        return self.result


class EnergyAnalyzer(Analyzer):
    """ spectral energy flow, geometry and apertures are ignored """
    config_cls = EnergyConfig


class RayTracingAnalyzer(Analyzer):
    """ sequential ray tracing of the ray bundles emitted by the sources """
    config_cls = RayTraceConfig

    def analyze(self, scenery):
        self.calc_node_positions(scenery)
        return super().analyze(scenery)


class GhostFocusAnalyzer(Analyzer):
    """ Ray tracing of the reflections between surfaces.

    The scene is traversed `max_bounces` + 1 times, alternating forward and
    inverted. Each pass re-injects the bundles reflected during the previous
    pass. Bundles leaving the scene through unconnected ports are gathered
    in `ray_collection`.
    """
    config_cls = GhostFocusConfig

    def __init__(self, config=None):
        super().__init__(config)
        self.ray_collection = []

    def analyze(self, scenery):
        self.calc_node_positions(scenery)
        logger.info(f"Performing {self.config.kind.value} analysis of "
                    f"scenery{scenery_label(scenery)}.")
        self.ray_collection = []
        self.result = {}
        inverted = scenery.inverted
        try:
            for bounce in range(self.config.max_bounces + 1):
                logger.debug(f"ghost focus pass, bounce level {bounce}")
                scenery.clear_edges()
                scenery.set_inverted(inverted != (bounce % 2 == 1))
                result = scenery.analyze({}, self.config, scenery.context,
                                         bounce_lvl=bounce,
                                         ray_collection=self.ray_collection)
                for port, data in result.items():
                    self.ray_collection.extend(data.bundles)
                    self.result[port] = data
        finally:
            scenery.set_inverted(inverted)
        return self.result

    def total_collected_energy(self):
        return sum(rays.total_energy() for rays in self.ray_collection)


def create_analyzer(config):
    """ the analyzer matching the kind of `config` """
    analyzers = {AnalyzerKind.ENERGY: EnergyAnalyzer,
                 AnalyzerKind.RAYTRACE: RayTracingAnalyzer,
                 AnalyzerKind.GHOSTFOCUS: GhostFocusAnalyzer}
    kind = getattr(config, 'kind', None)
    if kind not in analyzers:
        raise AnalysisError(f"no analyzer for configuration {config!r}")
    return analyzers[kind](config)


def analyze(scenery, config):
    """ Analyze `scenery` as configured by `config`.

    Returns:
        the analyzer used, holding the results leaving the scene
    """
    if not scenery.is_group():
        raise AnalysisError("only a node group can be analyzed as a scene")
    analyzer = create_analyzer(config)
    analyzer.analyze(scenery)
    return analyzer

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" All node types of the catalogue, registered for :func:`create_node`

.. Created on Thu Apr  4 08:55:31 2024

.. codeauthor: The optiscene developers
"""
from optiscene.nodes.opticnode import OpticNode, create_node  # noqa: F401
from optiscene.nodes.source import Source  # noqa: F401
from optiscene.nodes.dummy import Dummy  # noqa: F401
from optiscene.nodes.beamsplitter import BeamSplitter  # noqa: F401
from optiscene.nodes.idealfilter import IdealFilter  # noqa: F401
from optiscene.nodes.detectors import (  # noqa: F401
    Detector, EnergyMeter, Spectrometer, SpotDiagram, FluenceDetector,
    WaveFront, RayPropagationVisualizer)
from optiscene.nodes.lenses import (  # noqa: F401
    Lens, CylindricLens, Wedge, ParaxialSurface)
from optiscene.nodes.mirrors import (  # noqa: F401
    ThinMirror, ParabolicMirror, ReflectiveGrating)
from optiscene.nodes.reference import NodeReference  # noqa: F401
from optiscene.nodes.group import NodeGroup  # noqa: F401


def node_types():
    """ sorted list of the registered node type strings """
    return sorted(OpticNode._registry)

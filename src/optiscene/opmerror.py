#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Exception classes for scene construction and analysis

    The hierarchy mirrors the kinds of failures that can happen while
    building or analyzing an optical scene:

        - :class:`GraphStructureError`: bad port names, cycles, dangling or
          duplicate connections
        - :class:`AnalysisError`: wrong light data, missing or physically
          impossible node parameters, failed node analysis
        - :class:`PropertiesError`: invalid property values or read-only
          violations
        - :class:`SpectrumError`: invalid spectrum construction or operations
        - :class:`OtherError`: everything else, e.g. invalid ray parameters

.. Created on Tue Mar 12 10:14:07 2024

.. codeauthor: The optiscene developers
"""


class OpmError(Exception):
    """ Base class of all exceptions raised by optiscene """


class GraphStructureError(OpmError):
    """ Exception raised when a scene graph operation is invalid """


class OpticPortError(GraphStructureError):
    """ Exception raised for a missing or wrongly used port """


class AnalysisError(OpmError):
    """ Exception raised when analysis of a node or a scene fails """


class PropertiesError(OpmError):
    """ Exception raised for invalid property access """


class SpectrumError(OpmError):
    """ Exception raised for invalid spectrum data """


class OtherError(OpmError):
    """ Exception raised for invalid parameters not covered elsewhere """

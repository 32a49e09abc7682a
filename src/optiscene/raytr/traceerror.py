#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Support for ray trace exception handling

    These exceptions signal events of a single ray at a single surface. They
    are caught by the ray operations in :mod:`~.raytr.ray` and turned into
    ray state changes (invalidation, reflection), so they never abort an
    analysis run.

.. Created on Wed Mar 13 15:22:40 2024

.. codeauthor: The optiscene developers
"""


class TraceError(Exception):
    """ Exception raised when ray tracing a surface """


class TraceMissedSurfaceError(TraceError):
    """ Exception raised when ray misses a surface """
    def __init__(self, surface=None, pos=None, direction=None):
        self.surface = surface
        self.pos = pos
        self.direction = direction


class TraceTIRError(TraceError):
    """ Exception raised when ray TIRs at a surface """
    def __init__(self, inc_dir, normal, prev_indx, follow_indx):
        self.inc_dir = inc_dir
        self.normal = normal
        self.prev_indx = prev_indx
        self.follow_indx = follow_indx


class TraceEvanescentRayError(TraceError):
    """ Exception raised when ray diffracts evanescently at a surface """
    def __init__(self, inc_dir, normal, order, wvl):
        self.inc_dir = inc_dir
        self.normal = normal
        self.order = order
        self.wvl = wvl

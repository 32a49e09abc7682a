#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Physical quantity helpers

    optiscene works with plain floats in a fixed set of base units:

        - lengths in mm
        - wavelengths in nm
        - energies in J
        - fluences in J/cm²
        - angles in degrees

    The functions here convert user values into these base units and
    validate them.

.. Created on Wed Mar 13 11:02:45 2024

.. codeauthor: The optiscene developers
"""
import math

from optiscene.opmerror import OtherError

length_units = {
    'm': 1.0e3,
    'cm': 10.0,
    'mm': 1.0,
    'um': 1.0e-3,
    'nm': 1.0e-6,
    }

wavelength_units = {
    'm': 1.0e9,
    'mm': 1.0e6,
    'um': 1.0e3,
    'nm': 1.0,
    }

energy_units = {
    'J': 1.0,
    'mJ': 1.0e-3,
    'uJ': 1.0e-6,
    'nJ': 1.0e-9,
    'pJ': 1.0e-12,
    }

#: conversion factor from J/mm² to J/cm²
MM2_PER_CM2 = 100.0


def to_mm(value: float, unit: str = 'mm') -> float:
    """ convert a length given in `unit` to mm """
    return value*length_units[unit]


def to_nm(value: float, unit: str = 'nm') -> float:
    """ convert a wavelength given in `unit` to nm """
    return value*wavelength_units[unit]


def to_joule(value: float, unit: str = 'J') -> float:
    """ convert an energy given in `unit` to J """
    return value*energy_units[unit]


def nm_to_mm(wvl: float) -> float:
    return wvl*1.0e-6


def fluence_from(energy: float, area_mm2: float) -> float:
    """ fluence in J/cm² of `energy` (J) spread over `area_mm2` (mm²) """
    return MM2_PER_CM2*energy/area_mm2


def check_finite(value, label: str):
    if not math.isfinite(value):
        raise OtherError(f"{label} must be finite")
    return value


def check_non_negative(value, label: str):
    if math.isnan(value) or not math.isfinite(value) or value < 0.0:
        raise OtherError(f"{label} must be >= 0.0 and finite")
    return value


def check_positive(value, label: str):
    if math.isnan(value) or not math.isfinite(value) or value <= 0.0:
        raise OtherError(f"{label} must be > 0.0 and finite")
    return value

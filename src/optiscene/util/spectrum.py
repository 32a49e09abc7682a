#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Sampled spectra used for energy analysis and spectral filters

    A :class:`Spectrum` is a spectral energy density sampled on an ascending
    wavelength grid (in nm). The value of a sample is the density (J/nm)
    for the interval starting at that sample, so the energy of the spectrum
    is the sum over all intervals of interval width times the density at its
    lower edge. Transmission spectra use the same class with values in
    [0, 1].

.. Created on Thu Mar 14 08:41:12 2024

.. codeauthor: The optiscene developers
"""
import copy
import logging
import math

import numpy as np

from optiscene.opmerror import SpectrumError

logger = logging.getLogger(__name__)


def lorentz(center: float, width: float, x):
    """ area normalized Lorentzian line shape of full width `width` """
    hwhm = 0.5*width
    return (hwhm/math.pi)/((x - center)**2 + hwhm**2)


class Spectrum():
    """ Spectral energy density on an ascending wavelength grid

    Args:
        start: first wavelength of the grid (nm)
        end: wavelength limit (nm), not part of the grid
        resolution: grid spacing (nm)
    """

    def __init__(self, start: float, end: float, resolution: float):
        if not resolution > 0.0:
            raise SpectrumError("resolution must be positive")
        if not start < end:
            raise SpectrumError("wavelength range must be in ascending order"
                                " and not empty")
        if start < 0.0 or end < 0.0:
            raise SpectrumError("wavelength range limits must both be "
                                "positive")
        nr_of_elements = int(round((end - start)/resolution))
        self.lambdas = start + resolution*np.arange(nr_of_elements)
        self.data = np.zeros(nr_of_elements)

    @classmethod
    def from_data(cls, lambdas, values):
        """ Create a spectrum from sampled data.

        Args:
            lambdas: strictly ascending wavelengths (nm)
            values: spectral density or transmission at each wavelength
        """
        lambdas = np.array(lambdas, dtype=float)
        values = np.array(values, dtype=float)
        if len(lambdas) < 2 or len(lambdas) != len(values):
            raise SpectrumError("spectrum data needs at least two samples "
                                "and one value per wavelength")
        if np.any(np.diff(lambdas) <= 0.0) or lambdas[0] < 0.0:
            raise SpectrumError("wavelengths must be positive and strictly "
                                "ascending")
        spec = cls.__new__(cls)
        spec.lambdas = lambdas
        spec.data = values
        return spec

    @classmethod
    def from_laser_lines(cls, lines, resolution: float):
        """ Create a spectrum from a list of (wavelength, energy) lines. """
        if len(lines) == 0:
            raise SpectrumError("no laser lines provided")
        if not resolution > 0.0:
            raise SpectrumError("resolution must be positive")
        wvls = [line[0] for line in lines]
        spec = cls(min(wvls), max(wvls) + 2.0*resolution, resolution)
        for wvl, energy in lines:
            spec.add_single_peak(wvl, energy)
        return spec

    def __repr__(self):
        start, end = self.range()
        return "{!s}({!r}..{!r} nm, {} samples, energy={!r})".format(
            type(self).__name__, start, end, len(self.lambdas),
            self.total_energy())

    def __eq__(self, other):
        if not isinstance(other, Spectrum):
            return NotImplemented
        return (np.array_equal(self.lambdas, other.lambdas)
                and np.array_equal(self.data, other.data))

    def listobj_str(self):
        start, end = self.range()
        o_str = f"spectrum: {start:.3f}..{end:.3f} nm, {len(self.lambdas)} samples\n"
        o_str += f"energy={self.total_energy():.6g} J, "
        o_str += f"center={self.center_wavelength():.3f} nm\n"
        return o_str

    def copy(self):
        return copy.deepcopy(self)

    def range(self):
        """ (first, last) wavelength of the grid in nm """
        return self.lambdas[0], self.lambdas[-1]

    def average_resolution(self):
        start, end = self.range()
        return (end - start)/(len(self.lambdas) - 1)

    def add_single_peak(self, wavelength: float, value: float):
        """ Add the energy `value` as a narrow line at `wavelength`.

        The energy is shared between the two neighboring samples so that
        the total energy grows by exactly `value`.
        """
        start, end = self.range()
        if not start <= wavelength < end:
            logger.warning("peak wavelength is not in spectrum range. "
                           "Spectrum unmodified.")
            return
        if value < 0.0:
            raise SpectrumError("energy must be positive")
        if len(self.lambdas) < 2:
            raise SpectrumError("spectrum size is too small")
        idx = int(np.searchsorted(self.lambdas, wavelength, side='left'))
        if idx == 0:
            delta = self.lambdas[1] - self.lambdas[0]
            self.data[0] += value/delta
        else:
            lower = self.lambdas[idx-1]
            delta = self.lambdas[idx] - lower
            energy_per_nm = value/delta
            energy_part = energy_per_nm*(wavelength - lower)/delta
            self.data[idx] += energy_part
            self.data[idx-1] += energy_per_nm - energy_part

    def add_lorentzian_peak(self, center: float, width: float, energy: float):
        if center < 0.0:
            raise SpectrumError("center wavelength must be positive")
        if width < 0.0:
            raise SpectrumError("line width must be positive")
        if energy < 0.0:
            raise SpectrumError("energy must be positive")
        self.data = self.data + energy*lorentz(center, width, self.lambdas)

    def is_transmission_spectrum(self) -> bool:
        return bool(np.all((self.data >= 0.0) & (self.data <= 1.0)))

    def total_energy(self) -> float:
        return math.fsum(np.diff(self.lambdas)*self.data[:-1])

    def center_wavelength(self) -> float:
        weights = np.diff(self.lambdas)*self.data[:-1]
        total_weight = weights.sum()
        if total_weight == 0.0:
            raise SpectrumError("center wavelength of an empty spectrum is "
                                "undefined")
        return float(np.dot(self.lambdas[:-1], weights)/total_weight)

    def get_value(self, wavelength: float):
        """ linearly interpolated value at `wavelength`, None if outside """
        start, end = self.range()
        if not start <= wavelength <= end:
            return None
        return float(np.interp(wavelength, self.lambdas, self.data))

    def scale_vertical(self, factor: float):
        if factor < 0.0:
            raise SpectrumError("scaling factor must be >= 0.0")
        self.data = self.data*factor

    def cumulative_energy(self, wavelengths):
        """ energy contained below each of the given wavelengths """
        cum = np.concatenate(([0.], np.cumsum(np.diff(self.lambdas)
                                              * self.data[:-1])))
        return np.interp(wavelengths, self.lambdas, cum,
                         left=0.0, right=cum[-1])

    def resample(self, spectrum):
        """ Replace the data of self by `spectrum` binned onto self's grid.

        The energy of `spectrum` inside the grid range is conserved.
        """
        cum = spectrum.cumulative_energy(self.lambdas)
        data = np.zeros_like(self.data)
        data[:-1] = np.diff(cum)/np.diff(self.lambdas)
        self.data = data

    def _transmission_on_grid(self, filter_spectrum):
        return np.array([t if t is not None else 0.0
                         for t in (filter_spectrum.get_value(wvl)
                                   for wvl in self.lambdas)])

    def filter(self, filter_spectrum):
        """ multiply by the transmission spectrum `filter_spectrum` """
        self.data = self.data*self._transmission_on_grid(filter_spectrum)

    def filter_constant(self, transmission: float):
        if not 0.0 <= transmission <= 1.0:
            raise SpectrumError("transmission factor must be within "
                                "[0.0, 1.0]")
        self.data = self.data*transmission

    def split_by_spectrum(self, filter_spectrum):
        """ Filter self by `filter_spectrum` and return the rejected part. """
        transmission = self._transmission_on_grid(filter_spectrum)
        split = self.copy()
        split.data = self.data*(1.0 - transmission)
        self.data = self.data*transmission
        return split

    def split_by_ratio(self, ratio: float):
        """ Keep `ratio` of the energy and return the remaining part. """
        if not 0.0 <= ratio <= 1.0:
            raise SpectrumError("splitting ratio must be within [0.0, 1.0]")
        split = self.copy()
        split.data = self.data*(1.0 - ratio)
        self.data = self.data*ratio
        return split

    def add(self, spectrum):
        """ add `spectrum`, resampled onto self's grid """
        other = self.copy()
        other.resample(spectrum)
        self.data = self.data + other.data

    def sub(self, spectrum):
        """ subtract `spectrum`, resampled onto self's grid, clamped at 0 """
        other = self.copy()
        other.resample(spectrum)
        self.data = np.clip(self.data - other.data, 0.0, None)


def merge_spectra(s1, s2):
    """ Return the sum of two optional spectra, None if both are None.

    The merged spectrum spans both wavelength ranges at the finer of the two
    average resolutions, so the energy of both spectra is kept.
    """
    if s1 is None and s2 is None:
        return None
    if s1 is None:
        return s2.copy()
    if s2 is None:
        return s1.copy()
    start1, end1 = s1.range()
    start2, end2 = s2.range()
    resolution = min(s1.average_resolution(), s2.average_resolution())
    # the last sample of a grid only closes the interval below it
    s_merged = Spectrum(min(start1, start2),
                        max(end1, end2) + 2.0*resolution, resolution)
    s_merged.resample(s1)
    s_merged.add(s2)
    return s_merged

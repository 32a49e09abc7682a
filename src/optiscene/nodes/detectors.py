#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Detector nodes

    Detectors pass light unchanged from `input_1` to `output_1` and record
    the light they see. The recorded data is evaluated in
    :meth:`DetectorNode.report` and cleared by :meth:`DetectorNode.reset_data`.
    In a ghost focus analysis the bundles of all passes are accumulated.

.. Created on Fri Mar 29 09:12:40 2024

.. codeauthor: The optiscene developers
"""
from enum import Enum
import logging
import math

import numpy as np

from optiscene.opmerror import OtherError
from optiscene.elem.fluence import FluenceEstimator
from optiscene.raytr.rays import Rays
from optiscene.raytr.lightdata import (DataEnergy, DataGeometric,
                                       DataGhostFocus)
from optiscene.nodes.opticnode import OpticNode

logger = logging.getLogger(__name__)


class DetectorNode(OpticNode):
    """ Base class of pass-through-plus-recording nodes

    Attributes:
        light_data: the recorded light data or None
    """
    def __init__(self, name=None):
        super().__init__(name=name)
        self.ports.create_input('input_1')
        self.ports.create_output('output_1')
        self.light_data = None

    def is_detector(self):
        return True

    def record(self, data):
        if isinstance(data, DataGhostFocus) and \
           isinstance(self.light_data, DataGhostFocus):
            self.light_data.bundles.extend(data.copy().bundles)
        else:
            self.light_data = data.copy()

    def analyze_energy(self, incoming, config, context):
        in_port, out_port, data = self.single_path_energy(incoming)
        if data is None:
            return {}
        self.record(data)
        return {out_port: data}

    def analyze_raytrace(self, incoming, config, context):
        in_port, out_port, data = self.single_path_rays(incoming)
        if data is None:
            return {}
        rays = data.rays
        self.trace_through_surface(in_port, None, rays, config)
        self.record(DataGeometric(rays))
        return {out_port: DataGeometric(rays)}

    def analyze_ghostfocus(self, incoming, config, context, **kwargs):
        in_port = self.input_port_names()[0]
        out_port = self.output_port_names()[0]
        bundles = self.get_input_bundles(incoming, in_port)
        self.pass_through_surface(in_port, None, bundles, config)
        if not bundles:
            return {}
        self.record(DataGhostFocus(bundles))
        return {out_port: DataGhostFocus(bundles)}

    def recorded_rays(self):
        """ the recorded rays merged into one bundle, None without rays """
        if isinstance(self.light_data, DataGeometric):
            return self.light_data.rays
        if isinstance(self.light_data, DataGhostFocus):
            merged = Rays()
            for rays in self.light_data.bundles:
                merged.merge(rays)
            return merged
        return None

    def report_data(self):
        """ dict of evaluated results of the recorded data """
        if self.light_data is None:
            return {}
        return {'light data': self.light_data.listobj_str()}

    def report(self):
        node_report = super().report()
        node_report.data = self.report_data()
        return node_report

    def reset_data(self):
        super().reset_data()
        self.light_data = None


class Detector(DetectorNode):
    """ generic detector, reports the recorded light data """
    node_type = 'detector'


class MeterType(Enum):
    IDEAL_ENERGY_METER = 'ideal energy meter'
    IDEAL_POWER_METER = 'ideal power meter'


class EnergyMeter(DetectorNode):
    """ Measures the total energy of the light passing through. """
    node_type = 'energy meter'

    def __init__(self, meter_type=MeterType.IDEAL_ENERGY_METER, name=None):
        super().__init__(name=name)
        self.props.create('meter type', 'model type of the meter',
                          meter_type, MeterType)

    @property
    def meter_type(self):
        return self.props.get('meter type')

    def total_energy(self):
        """ recorded energy (J), None if nothing was recorded """
        if self.light_data is None:
            return None
        return self.light_data.total_energy()

    def report_data(self):
        energy = self.total_energy()
        if energy is None:
            return {}
        return {'energy': energy, 'meter type': self.meter_type.value}


class SpectrometerType(Enum):
    IDEAL = 'ideal spectrometer'


class Spectrometer(DetectorNode):
    """ Records the spectrum of the light passing through.

    Ray data is converted to a spectrum of laser lines with the given
    resolution (nm).
    """
    node_type = 'spectrometer'

    def __init__(self, spectrometer_type=SpectrometerType.IDEAL,
                 resolution=0.1, name=None):
        super().__init__(name=name)
        self.props.create('spectrometer type',
                          'model type of the spectrometer',
                          spectrometer_type, SpectrometerType)
        self.props.create('resolution',
                          'resolution of spectra generated from rays (nm)',
                          resolution, float)

    def spectrum(self):
        if isinstance(self.light_data, DataEnergy):
            return self.light_data.spectrum
        rays = self.recorded_rays()
        if rays is None or rays.nr_of_rays(True) == 0:
            return None
        return rays.to_spectrum(self.props.get('resolution'))

    def report_data(self):
        spectrum = self.spectrum()
        if spectrum is None:
            return {}
        return {'spectrum': spectrum,
                'model': self.props.get('spectrometer type').value}


class SpotDiagram(DetectorNode):
    """ Records ray positions on its input surface """
    node_type = 'spot diagram'

    def analyze_energy(self, incoming, config, context):
        return self._not_supported('energy')

    def spot_positions(self):
        """ 2d ray positions in the frame of the input surface """
        rays = self.recorded_rays()
        if rays is None:
            return np.zeros((0, 2))
        iso = self.surface(self.input_port_names()[0]).isometry
        return rays.get_xy_rays_pos(iso)

    def report_data(self):
        rays = self.recorded_rays()
        if rays is None or rays.nr_of_rays(True) == 0:
            return {}
        pts = self.spot_positions()
        centroid = pts.mean(axis=0)
        r_sqr = np.sum((pts - centroid)**2, axis=1)
        return {'spot diagram': pts,
                'centroid x (mm)': centroid[0],
                'centroid y (mm)': centroid[1],
                'geo beam radius (mm)': math.sqrt(r_sqr.max()),
                'rms beam radius (mm)': math.sqrt(r_sqr.mean())}


class FluenceDetector(DetectorNode):
    """ Estimates the fluence distribution on its input surface """
    node_type = 'fluence detector'

    def __init__(self, estimator=FluenceEstimator.VORONOI, name=None):
        super().__init__(name=name)
        self.props.create('fluence estimator',
                          'estimator of the fluence distribution', estimator,
                          FluenceEstimator)

    def analyze_energy(self, incoming, config, context):
        return self._not_supported('energy')

    def fluence_data(self):
        """ |FluenceData| of all hits on the input surface, or None """
        hit_map = self.surface(self.input_port_names()[0]).hit_map
        if hit_map.is_empty():
            return None
        return hit_map.calc_fluence_map(self.props.get('fluence estimator'))

    def report_data(self):
        try:
            fluence_data = self.fluence_data()
        except OtherError as err:
            logger.warning(f"{self}: fluence estimation failed: {err}")
            return {'warning': str(err)}
        if fluence_data is None:
            return {}
        estimator = fluence_data.estimator
        rays = self.recorded_rays()
        data = {f'Fluence ({estimator})': fluence_data,
                f'Peak Fluence ({estimator})': fluence_data.peak,
                f'Average Fluence ({estimator})': fluence_data.average}
        if rays is not None:
            data['Total energy'] = rays.total_energy()
        return data


class WaveFront(DetectorNode):
    """ Wavefront error on the input surface wrt the ray closest to the axis

    The error is evaluated per wavelength in units of that wavelength.
    """
    node_type = 'wavefront monitor'

    def analyze_energy(self, incoming, config, context):
        return self._not_supported('energy')

    def wavefront_maps(self):
        """ dict of wavelength to array of (x, y, wavefront error) """
        rays = self.recorded_rays()
        if rays is None:
            return {}
        iso = self.surface(self.input_port_names()[0]).isometry
        maps = {}
        for wvl in rays.get_unique_wavelengths():
            mono = Rays([r for r in rays if r.valid and r.wvl == wvl])
            maps[wvl] = mono.wavefront_error_at(iso)
        return maps

    def report_data(self):
        data = {}
        for wvl, wf_map in self.wavefront_maps().items():
            wf = wf_map[:, 2]
            data[f'Wavefront Map ({wvl:.2f} nm)'] = wf_map
            data[f'Wavefront PtV ({wvl:.2f} nm)'] = wf.max() - wf.min()
            data[f'Wavefront RMS ({wvl:.2f} nm)'] = math.sqrt(
                np.mean((wf - wf.mean())**2))
        return data


class RayPropagationVisualizer(DetectorNode):
    """ Records the position histories of the rays """
    node_type = 'ray propagation'

    def analyze_energy(self, incoming, config, context):
        return self._not_supported('energy')

    def report_data(self):
        rays = self.recorded_rays()
        if rays is None:
            return {}
        return {'Ray plot': rays.position_history_df()}

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Base class of all optical nodes

    An :class:`OpticNode` is a vertex of the scene graph. It has a unique id,
    a set of typed properties, named input and output ports each owning an
    :class:`~.OpticSurface`, and a pose in space that is determined by the
    positioning pass of a ray tracing analysis.

    The analysis of a node maps incoming light, a dict of input port name to
    light data, onto outgoing light, a dict of output port name to light
    data. The analysis mode selects one of :meth:`OpticNode.analyze_energy`,
    :meth:`OpticNode.analyze_raytrace` and
    :meth:`OpticNode.analyze_ghostfocus`. A mode not supported by a node
    logs a warning and returns an empty result.

    Inverting a node swaps the roles of its input and output ports. The
    surfaces stay where they are; rays simply cross them in reverse order.

    Every concrete node class declares its `node_type` string and is
    registered under it, see :func:`create_node`.

.. Created on Wed Mar 27 16:20:48 2024

.. codeauthor: The optiscene developers
"""
import logging
import uuid

import attr
import numpy as np

from optiscene.opmerror import AnalysisError, OtherError
from optiscene.util.transform import Isometry
from optiscene.nodes.properties import Properties
from optiscene.nodes.ports import OpticPorts, PortType
from optiscene.analysis.config import AnalyzerKind, positioning_config
from optiscene.raytr.lightdata import (DataEnergy, DataGeometric,
                                       DataGhostFocus)

logger = logging.getLogger(__name__)

rot_around_y = np.array([[-1, 0, 0], [0, 1, 0], [0, 0, -1]])


@attr.s
class NodeReport():
    """ Summary of a node for reporting.

    Attributes:
        node_type: type string of the node
        name: name of the node
        uuid: unique id of the node
        properties: dict of property name to value
        data: analysis results of detector nodes
        children: reports of the nodes of a group
    """
    node_type = attr.ib()
    name = attr.ib()
    uuid = attr.ib()
    properties = attr.ib(factory=dict)
    data = attr.ib(factory=dict)
    children = attr.ib(factory=list)

    def listobj_str(self):
        o_str = f"{self.name} ({self.node_type})\n"
        for key, value in self.data.items():
            o_str += f"  {key}: {value}\n"
        for child in self.children:
            o_str += "  " + child.listobj_str().replace("\n", "\n  ")
            o_str = o_str.rstrip(" ")
        return o_str


def create_node(node_type: str, *args, **kwargs):
    """ Instantiate the node class registered under `node_type`.

    Only node classes that have been imported are registered;
    :mod:`optiscene.nodes.catalog` imports all of them.
    """
    try:
        node_cls = OpticNode._registry[node_type]
    except KeyError:
        raise OtherError(f"unknown node type <{node_type}>") from None
    return node_cls(*args, **kwargs)


class OpticNode():
    """ Base class of the node catalogue.

    Attributes:
        uuid: unique id
        props: the :class:`~.properties.Properties` of the node
        ports: the :class:`~.ports.OpticPorts` of the node
        isometry: pose of the node in space, None until placed
    """
    node_type = None
    _registry = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if cls.node_type is not None:
            OpticNode._registry[cls.node_type] = cls

    def __init__(self, name=None):
        self.uuid = uuid.uuid4()
        self.props = Properties()
        self.props.create('name', 'name of the optical element',
                          name if name is not None else self.node_type, str)
        self.props.create('node_type', 'specific optical type of this node',
                          self.node_type, str, read_only=True)
        self.props.create('inverted', 'inverse propagation?', False, bool)
        self.props.create('alignment', 'local offset and tilt of the node',
                          None, Isometry)
        self.ports = OpticPorts()
        self.isometry = None

    def __repr__(self):
        return "{!s}('{}')".format(type(self).__name__, self.name)

    def __str__(self):
        return f"'{self.name}' ({self.node_type})"

    def listobj_str(self):
        o_str = f"{self}\n"
        o_str += self.ports.listobj_str()
        if self.isometry is not None:
            o_str += "position: " + self.isometry.listobj_str()
        return o_str

    @property
    def name(self):
        return self.props.get('name')

    @property
    def inverted(self):
        return self.props.get('inverted')

    @property
    def alignment(self):
        return self.props.get('alignment')

    def set_name(self, name):
        self.props.set('name', name)

    def set_property(self, name, value):
        """ set a property and update the node from the new value """
        self.props.set(name, value)
        if name == 'inverted':
            self.ports.set_inverted(value)
        self.update_from_props(name)

    def update_from_props(self, name):
        """ rebuild node state depending on property `name` """
        pass

    def set_inverted(self, inverted: bool):
        """ set the inversion state, used when a graph gets inverted """
        self.props.set_internal('inverted', inverted)
        self.ports.set_inverted(inverted)

    def set_alignment(self, alignment):
        self.props.set('alignment', alignment)

    def input_port_names(self):
        return self.ports.input_names()

    def output_port_names(self):
        return self.ports.output_names()

    def port_names(self, port_type):
        if port_type == PortType.INPUT:
            return self.input_port_names()
        return self.output_port_names()

    def surface(self, port_name):
        return self.ports.surface(port_name)

    def set_coating(self, port_name, coating):
        self.ports.set_coating(port_name, coating)

    def set_aperture(self, port_name, aperture):
        self.ports.set_aperture(port_name, aperture)

    def set_lidt(self, port_name, lidt):
        self.ports.set_lidt(port_name, lidt)

    def is_detector(self) -> bool:
        return False

    def is_source(self) -> bool:
        return False

    def is_group(self) -> bool:
        return False

    def refers_to(self, node_id) -> bool:
        """ True if this node is an alias of node `node_id` """
        return False

    def node_length(self) -> float:
        """ distance of the output surfaces from the node origin (mm) """
        return 0.0

    def set_isometry(self, isometry):
        self.isometry = isometry
        self.ports.set_isometry(isometry)

    def placement_isometry(self, arrival_iso):
        """ Node pose for an optical axis arriving at `arrival_iso`.

        An inverted node is turned around so that its output surfaces face
        the arriving light. The alignment of the node is applied last.
        """
        iso = arrival_iso
        if self.inverted:
            iso = iso.append(Isometry(rot_around_y,
                                      [0., 0., self.node_length()]))
        if self.alignment is not None:
            iso = iso.append(self.alignment)
        return iso

    def analyze(self, incoming, config, context, **kwargs):
        """ Analyze `incoming` light in the mode selected by `config`.

        Args:
            incoming: dict of input port name to light data
            config: one of the analysis configuration records
            context: the :class:`~.config.SceneContext` of the run
            kwargs: ghost focus analysis passes `bounce_lvl`

        Returns:
            dict of output port name to light data
        """
        if config.kind == AnalyzerKind.ENERGY:
            return self.analyze_energy(incoming, config, context)
        elif config.kind == AnalyzerKind.RAYTRACE:
            return self.analyze_raytrace(incoming, config, context)
        elif config.kind == AnalyzerKind.GHOSTFOCUS:
            return self.analyze_ghostfocus(incoming, config, context,
                                           **kwargs)
        raise AnalysisError(f"unknown analysis mode {config.kind}")

    def _not_supported(self, mode):
        logger.warning(f"{self}: no {mode} analysis function defined. "
                       "Result is empty")
        return {}

    def analyze_energy(self, incoming, config, context):
        return self._not_supported('energy')

    def analyze_raytrace(self, incoming, config, context):
        return self._not_supported('ray trace')

    def analyze_ghostfocus(self, incoming, config, context, **kwargs):
        return self._not_supported('ghost focus')

    def calc_node_position(self, incoming, context):
        """ propagate the optical axis ray, see :class:`RayTracingAnalyzer` """
        return self.analyze_raytrace(incoming, positioning_config(), context)

    def get_input(self, incoming, port_name, data_cls):
        """ Light data at input `port_name` if present.

        Raises:
            AnalysisError: if the data is not of type `data_cls`
        """
        data = incoming.get(port_name)
        if data is None:
            return None
        if not isinstance(data, data_cls):
            raise AnalysisError(f"expected {data_cls.__name__} at input port "
                                f"{port_name}, got {type(data).__name__}")
        return data

    def get_input_bundles(self, incoming, port_name):
        """ ray bundles at `port_name` for ghost focus analysis """
        data = self.get_input(incoming, port_name, DataGhostFocus)
        if data is None:
            return []
        return list(data.bundles)

    def single_path_energy(self, incoming):
        """ in, out port names and incoming spectrum data of 1:1 nodes """
        in_port = self.input_port_names()[0]
        out_port = self.output_port_names()[0]
        return in_port, out_port, self.get_input(incoming, in_port,
                                                 DataEnergy)

    def single_path_rays(self, incoming):
        in_port = self.input_port_names()[0]
        out_port = self.output_port_names()[0]
        return in_port, out_port, self.get_input(incoming, in_port,
                                                 DataGeometric)

    def trace_through_surface(self, port_name, refractive_index, rays,
                              config):
        """ Ray trace `rays` through the surface of `port_name`.

        The reflected part is discarded. Rays blocked by the aperture, below
        the energy threshold or beyond the bounce and refraction limits of
        `config` are invalidated.
        """
        surface = self.ports.surface(port_name)
        rays.refract_on_surface(surface, refractive_index,
                                config.missed_surface_strategy)
        self.apply_ray_limits(port_name, rays, config)

    def apply_ray_limits(self, port_name, rays, config):
        surface = self.ports.surface(port_name)
        rays.apodize(surface.aperture, surface.isometry)
        rays.invalidate_by_threshold_energy(config.min_energy_per_ray)
        rays.filter_by_nr_of_bounces(config.max_number_of_bounces)
        rays.filter_by_nr_of_refractions(config.max_number_of_refractions)

    def pass_through_surface(self, port_name, refractive_index, bundles,
                             config):
        """ Ghost focus pass of all `bundles` through a surface.

        Each bundle is refracted; its reflected part is parked on the
        surface for the next pass running in the reflected direction. The
        bundles parked by the previous pass for the current direction are
        appended to `bundles`. Each incoming bundle is checked against the
        damage threshold of the surface.
        """
        surface = self.ports.surface(port_name)
        for rays in bundles:
            bounce_lvl = rays.bounce_lvl()
            reflected = rays.refract_on_surface(
                surface, refractive_index, config.missed_surface_strategy)
            rays.apodize(surface.aperture, surface.isometry)
            reflected.apodize(surface.aperture, surface.isometry)
            reflected.filter_by_nr_of_bounces(config.max_bounces)
            if reflected.nr_of_rays(True) > 0:
                surface.add_to_rays_cache(reflected,
                                          backward=not self.inverted)
            surface.evaluate_fluence_of_ray_bundle(rays,
                                                   config.fluence_estimator,
                                                   bounce_lvl)
        bundles.extend(surface.take_rays_cache(backward=self.inverted))

    def report(self):
        return NodeReport(self.node_type, self.name, self.uuid,
                          self.props.as_dict())

    def hit_maps(self):
        """ dict of port name to :class:`~.HitMap` """
        return self.ports.hit_maps()

    def reset_data(self):
        """ clear hit maps, ray caches and recorded detector data """
        self.ports.reset_data()

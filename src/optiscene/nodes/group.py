#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Group node, an :class:`~.OpticGraph` used as a node

    A :class:`NodeGroup` owns a subgraph of nodes. The group ports are the
    internal ports exposed through the port maps of the subgraph. Analyzing
    the group analyzes every node of the subgraph in topological order:

        - gather the light on the incoming edges and the external inputs
        - analyze the node
        - put each output on its edge, expose it on a mapped external port
          or, in a ghost focus analysis, hand it to the ray collection

    The top level group of a scene additionally holds the
    :class:`~.config.SceneContext` of the analysis runs.

    Inverting a group inverts its subgraph for the duration of an analysis.

.. Created on Wed Apr  3 15:40:22 2024

.. codeauthor: The optiscene developers
"""
import logging

from anytree import Node, RenderTree
import attr
import numpy as np

from optiscene.opmerror import AnalysisError, OpmError
from optiscene.analysis.config import AnalyzerKind, SceneContext
from optiscene.graph.opticgraph import OpticGraph
from optiscene.raytr.lightdata import DataGhostFocus
from optiscene.nodes.opticnode import OpticNode

logger = logging.getLogger(__name__)


class NodeGroup(OpticNode):
    """ Node containing a graph of nodes

    Attributes:
        graph: the :class:`~.OpticGraph` of the contained nodes
        context: :class:`~.config.SceneContext` used when the group is
            analyzed as the scene
    """
    node_type = 'group'

    def __init__(self, name=None):
        super().__init__(name=name)
        self.graph = OpticGraph()
        self.context = SceneContext()

    def listobj_str(self):
        o_str = f"{self}\n"
        o_str += self.graph.listobj_str()
        return o_str

    def set_context(self, ambient_refractive_index=None,
                    alignment_wavelength=None):
        """ replace the scene context, unspecified fields are kept """
        changes = {}
        if ambient_refractive_index is not None:
            changes['ambient_refractive_index'] = ambient_refractive_index
        if alignment_wavelength is not None:
            changes['alignment_wavelength'] = alignment_wavelength
        self.context = attr.evolve(self.context, **changes)

    def is_group(self):
        return True

    # --- graph construction

    def add_node(self, node):
        return self.graph.add_node(node)

    def node(self, node_id):
        return self.graph.node(node_id)

    def node_by_name(self, name):
        return self.graph.node_by_name(name)

    def nodes(self):
        return self.graph.nodes()

    def delete_node(self, node_id):
        self.graph.delete_node(node_id)

    def connect_nodes(self, src_id, src_port, target_id, target_port,
                      distance):
        self.graph.connect_nodes(src_id, src_port, target_id, target_port,
                                 distance)

    def disconnect_nodes(self, src_id, src_port):
        self.graph.disconnect_nodes(src_id, src_port)

    def map_input_port(self, node_id, internal_name, external_name):
        self.graph.map_input_port(node_id, internal_name, external_name)

    def map_output_port(self, node_id, internal_name, external_name):
        self.graph.map_output_port(node_id, internal_name, external_name)

    def input_port_names(self):
        if self.inverted:
            return self.graph.output_map.names()
        return self.graph.input_map.names()

    def output_port_names(self):
        if self.inverted:
            return self.graph.input_map.names()
        return self.graph.output_map.names()

    def surface(self, port_name):
        """ the surface of the internal port mapped to `port_name` """
        for port_map in (self.graph.input_map, self.graph.output_map):
            mapped = port_map.get(port_name)
            if mapped is not None:
                node_id, internal_name = mapped
                return self.graph.node(node_id).surface(internal_name)
        return super().surface(port_name)

    def set_isometry(self, isometry):
        # contained nodes are positioned individually
        self.isometry = isometry

    # --- analysis

    def _run_oriented(self, func, *args, **kwargs):
        """ run `func` with the subgraph inverted if the group is """
        if self.inverted:
            self.graph.invert_graph()
        try:
            return func(*args, **kwargs)
        finally:
            if self.inverted:
                self.graph.invert_graph()

    def _check_structure(self):
        if not self.graph.is_single_tree():
            logger.warning("group contains unconnected sub-trees. Analysis "
                           "might not be complete.")

    def _is_stale(self, node_id, node):
        if self.graph.is_stale_node(node_id):
            logger.warning(f"stale (unconnected) node {node} found. "
                           "Analysis skipped.")
            return True
        return False

    def _collect_incoming(self, node_id, incoming, propagate=False):
        graph = self.graph
        node_in = graph.get_incoming(node_id)
        if propagate:
            for port, (_, distance) in graph.incoming_distances(
                    node_id).items():
                if port in node_in:
                    node_in[port].rays.propagate(distance)
        input_map = graph.effective_input_map()
        for ext_name, data in incoming.items():
            mapped = input_map.get(ext_name)
            if mapped is not None and mapped[0] == node_id:
                node_in[mapped[1]] = data
        return node_in

    def _distribute(self, node_id, node_out, outgoing, ray_collection=None):
        for port, data in node_out.items():
            if self.graph.set_outgoing_edge_data(node_id, port, data):
                continue
            ext_name = self.graph.external_output_name(node_id, port)
            if ext_name is not None:
                outgoing[ext_name] = data
            elif ray_collection is not None and \
                    isinstance(data, DataGhostFocus):
                ray_collection.extend(data.bundles)

    def _analyze_graph(self, incoming, config, context, ray_collection=None,
                       **kwargs):
        self._check_structure()
        outgoing = {}
        for node_id in self.graph.topologically_sorted():
            node = self.graph.node(node_id)
            if self._is_stale(node_id, node):
                continue
            node_in = self._collect_incoming(node_id, incoming)
            try:
                if node.is_group():
                    node_out = node.analyze(node_in, config, context,
                                            ray_collection=ray_collection,
                                            **kwargs)
                else:
                    node_out = node.analyze(node_in, config, context,
                                            **kwargs)
            except (OpmError, ValueError, TypeError, ArithmeticError) as err:
                raise AnalysisError(f"analysis of node {node.name} failed: "
                                    f"{err}") from err
            if config.kind == AnalyzerKind.GHOSTFOCUS:
                for data in node_out.values():
                    for rays in data.bundles:
                        rays.filter_by_nr_of_bounces(config.max_bounces)
            self._distribute(node_id, node_out, outgoing, ray_collection)
        return outgoing

    def analyze(self, incoming, config, context, **kwargs):
        return self._run_oriented(self._analyze_graph, incoming, config,
                                  context, **kwargs)

    def _place_node(self, node, node_in):
        """ place `node` where the optical axis arrives """
        arrivals = []
        for port in node.input_port_names():
            data = node_in.get(port)
            if data is None:
                continue
            axis_ray = next((r for r in data.rays if r.valid), None)
            if axis_ray is not None:
                arrivals.append(node.placement_isometry(
                    axis_ray.to_isometry()))
        if not arrivals:
            if node.isometry is None:
                logger.warning(f"optical axis does not reach node {node}, "
                               "node cannot be positioned")
            return
        if node.isometry is None:
            node.set_isometry(arrivals[0])
        for iso in arrivals:
            if not np.allclose(iso.translation, node.isometry.translation):
                logger.warning(f"node {node} is reached by the optical axis "
                               "at different positions, the first one is "
                               "used")
                break

    def _position_graph(self, incoming, context):
        self._check_structure()
        outgoing = {}
        for node_id in self.graph.topologically_sorted():
            node = self.graph.node(node_id)
            if self._is_stale(node_id, node):
                continue
            node_in = self._collect_incoming(node_id, incoming,
                                             propagate=True)
            if not node.is_source() and not node.is_group():
                self._place_node(node, node_in)
            try:
                node_out = node.calc_node_position(node_in, context)
            except (OpmError, ValueError, TypeError, ArithmeticError) as err:
                raise AnalysisError(f"positioning of node {node.name} "
                                    f"failed: {err}") from err
            self._distribute(node_id, node_out, outgoing)
        return outgoing

    def calc_node_position(self, incoming, context):
        """ position all nodes of the subgraph along the optical axis """
        return self._run_oriented(self._position_graph, incoming, context)

    def clear_positions(self):
        """ mark all nodes as unplaced before a new positioning pass """
        self.isometry = None
        for node in self.graph.nodes():
            if node.is_group():
                node.clear_positions()
            else:
                node.isometry = None

    def clear_edges(self):
        """ remove the light data on all edges, including nested groups """
        self.graph.clear_edges()
        for node in self.graph.nodes():
            if node.is_group():
                node.clear_edges()

    def reset_data(self):
        self.graph.reset_data()

    def hit_maps(self):
        return {}

    # --- reporting

    def report(self):
        node_report = super().report()
        node_report.children = [node.report() for node in self.graph.nodes()]
        return node_report

    def hierarchy_tree(self, parent=None):
        """ anytree Node of this group with all contained nodes """
        tree_node = Node(self.name, id=self, tag='#group', parent=parent)
        for node in self.graph.nodes():
            if node.is_group():
                node.hierarchy_tree(parent=tree_node)
            else:
                Node(node.name, id=node, tag=f'#{node.node_type}',
                     parent=tree_node)
        return tree_node

    def list_tree(self):
        """ text rendering of :meth:`hierarchy_tree` """
        tree = RenderTree(self.hierarchy_tree())
        return "\n".join(f"{pre}{node.name}" for pre, _, node in tree)

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Directed graph of optical nodes connected port to port

    The :class:`OpticGraph` stores its nodes in a
    :class:`networkx.MultiDiGraph` keyed by node uuid. Every edge connects an
    output port of its source node to an input port of its target node and
    carries the free propagation distance between them (mm) and the light
    data currently travelling along it.

    Ports of internal nodes can be exposed to the outside through the input
    and output :class:`~.portmap.PortMap`. This is how a
    :class:`~optiscene.nodes.group.NodeGroup` connects its subgraph.

    Inverting the graph swaps the roles of all ports without touching the
    edge storage: edges are read in reverse, the input and output port maps
    trade places and each node is inverted.

.. Created on Mon Apr  1 10:52:17 2024

.. codeauthor: The optiscene developers
"""
import logging
import math

import networkx as nx

from optiscene.opmerror import GraphStructureError, OpticPortError
from optiscene.graph.portmap import PortMap

logger = logging.getLogger(__name__)


class OpticGraph():
    """ Optical nodes connected by directed, port-to-port edges.

    Attributes:
        g: the networkx MultiDiGraph, node attribute 'node' holds the
           :class:`~.OpticNode`
        input_map: :class:`~.PortMap` of external input ports
        output_map: :class:`~.PortMap` of external output ports
        is_inverted: True if the graph is read in reverse
    """

    def __init__(self):
        self.g = nx.MultiDiGraph()
        self.input_map = PortMap()
        self.output_map = PortMap()
        self.is_inverted = False
        self._sorted_cache = {}

    def __repr__(self):
        return "{!s}(nodes={}, edges={}, inverted={})".format(
            type(self).__name__, self.g.number_of_nodes(),
            self.g.number_of_edges(), self.is_inverted)

    def listobj_str(self):
        o_str = ""
        for node in self.nodes():
            o_str += f"{node}\n"
        for src, src_port, tgt, tgt_port, dist in self.connections():
            o_str += (f"  {src.name}:{src_port} -> {tgt.name}:{tgt_port}"
                      f"  {dist} mm\n")
        return o_str

    def _invalidate_order(self):
        self._sorted_cache.clear()

    # --- nodes

    def add_node(self, node):
        """ add `node` to the graph and return its uuid """
        if self.is_inverted:
            raise GraphStructureError("cannot add a node to an inverted "
                                      "graph")
        self.g.add_node(node.uuid, node=node)
        self._invalidate_order()
        return node.uuid

    def contains_node(self, node_id) -> bool:
        return self.g.has_node(node_id)

    def node(self, node_id):
        if not self.g.has_node(node_id):
            raise GraphStructureError(f"node {node_id} not found")
        return self.g.nodes[node_id]['node']

    def node_by_name(self, name):
        """ first node with `name`, or None """
        for node in self.nodes():
            if node.name == name:
                return node
        return None

    def nodes(self):
        return [attrs['node'] for _, attrs in self.g.nodes(data=True)]

    def delete_node(self, node_id):
        """ Remove a node, its edges, port map entries and references to it.
        """
        if self.is_inverted:
            raise GraphStructureError("cannot delete a node of an inverted "
                                      "graph")
        self.node(node_id)
        referencing = [node.uuid for node in self.nodes()
                       if node.uuid != node_id and node.refers_to(node_id)]
        for nid in [node_id] + referencing:
            self.g.remove_node(nid)
            self.input_map.remove_node(nid)
            self.output_map.remove_node(nid)
        self._invalidate_order()

    # --- edges

    def _edges_in(self, node_id):
        """ effective incoming edges as (own port, other id, edge attrs) """
        if self.is_inverted:
            for _, other, attrs in self.g.out_edges(node_id, data=True):
                yield attrs['src_port'], other, attrs
        else:
            for other, _, attrs in self.g.in_edges(node_id, data=True):
                yield attrs['target_port'], other, attrs

    def _edges_out(self, node_id):
        """ effective outgoing edges as (own port, other id, edge attrs) """
        if self.is_inverted:
            for other, _, attrs in self.g.in_edges(node_id, data=True):
                yield attrs['target_port'], other, attrs
        else:
            for _, other, attrs in self.g.out_edges(node_id, data=True):
                yield attrs['src_port'], other, attrs

    def _stored_edge(self, src_id, src_port):
        for _, tgt_id, key, attrs in self.g.out_edges(src_id, keys=True,
                                                       data=True):
            if attrs['src_port'] == src_port:
                return tgt_id, key, attrs
        return None

    def connect_nodes(self, src_id, src_port, target_id, target_port,
                      distance):
        """ Connect an output port of `src_id` to an input port of `target_id`.

        Args:
            distance: free propagation distance between the ports (mm)

        Raises:
            OpticPortError: port does not exist, has the wrong role or is
                already connected
            GraphStructureError: unknown node, negative or non-finite
                distance, inverted graph, or the edge would create a cycle
        """
        if self.is_inverted:
            raise GraphStructureError("cannot connect nodes of an inverted "
                                      "graph")
        src = self.node(src_id)
        target = self.node(target_id)
        if src_port not in src.output_port_names():
            raise OpticPortError(f"source node {src} does not have an "
                                 f"output port {src_port}")
        if target_port not in target.input_port_names():
            raise OpticPortError(f"target node {target} does not have an "
                                 f"input port {target_port}")
        if self._stored_edge(src_id, src_port) is not None:
            raise OpticPortError(f"port {src_port} of {src} already "
                                 "connected")
        for _, _, attrs in self.g.in_edges(target_id, data=True):
            if attrs['target_port'] == target_port:
                raise OpticPortError(f"port {target_port} of {target} "
                                     "already connected")
        if not math.isfinite(distance) or distance < 0.0:
            raise GraphStructureError("distance between nodes must be >= 0.0 "
                                      "and finite")
        self.g.add_edge(src_id, target_id, key=src_port, src_port=src_port,
                        target_port=target_port, distance=float(distance),
                        data=None)
        if not nx.is_directed_acyclic_graph(self.g):
            self.g.remove_edge(src_id, target_id, key=src_port)
            raise GraphStructureError(f"connecting {src} to {target} would "
                                      "create a cycle")
        self.output_map.remove_node_port(src_id, src_port)
        self.input_map.remove_node_port(target_id, target_port)
        self._invalidate_order()

    def disconnect_nodes(self, src_id, src_port):
        """ remove the edge leaving `src_port` of node `src_id` """
        if self.is_inverted:
            raise GraphStructureError("cannot disconnect nodes of an "
                                      "inverted graph")
        edge = self._stored_edge(src_id, src_port)
        if edge is None:
            raise OpticPortError(f"port {src_port} of node {src_id} is not "
                                 "connected")
        tgt_id, key, _ = edge
        self.g.remove_edge(src_id, tgt_id, key=key)
        self._invalidate_order()

    def update_connection_distance(self, src_id, src_port, distance):
        if not math.isfinite(distance) or distance < 0.0:
            raise GraphStructureError("distance between nodes must be >= 0.0 "
                                      "and finite")
        edge = self._stored_edge(src_id, src_port)
        if edge is None:
            raise OpticPortError(f"port {src_port} of node {src_id} is not "
                                 "connected")
        edge[2]['distance'] = float(distance)

    def connections(self):
        """ list of (src node, src port, target node, target port, distance)

        The connections are listed in the effective direction of the graph.
        """
        conns = []
        for node_id in self.g.nodes:
            for port, other, attrs in self._edges_out(node_id):
                other_port = (attrs['src_port'] if self.is_inverted
                              else attrs['target_port'])
                conns.append((self.node(node_id), port, self.node(other),
                              other_port, attrs['distance']))
        return conns

    def is_port_connected(self, node_id, port_name) -> bool:
        return any(port == port_name
                   for port, _, _ in self._edges_in(node_id)) or \
            any(port == port_name for port, _, _ in self._edges_out(node_id))

    # --- port maps

    def _effective_maps(self):
        if self.is_inverted:
            return self.output_map, self.input_map
        return self.input_map, self.output_map

    def effective_input_map(self):
        return self._effective_maps()[0]

    def effective_output_map(self):
        return self._effective_maps()[1]

    def map_input_port(self, node_id, internal_name, external_name):
        """ expose input port `internal_name` of `node_id` as `external_name`
        """
        node = self.node(node_id)
        if internal_name not in node.input_port_names():
            raise OpticPortError(f"node {node} does not have an input port "
                                 f"{internal_name}")
        if self.is_port_connected(node_id, internal_name):
            raise OpticPortError(f"port {internal_name} of {node} is "
                                 "connected internally")
        if external_name in self.output_map:
            raise OpticPortError(f"external port name {external_name} "
                                 "already used as output")
        self.effective_input_map().add(external_name, node_id, internal_name)

    def map_output_port(self, node_id, internal_name, external_name):
        node = self.node(node_id)
        if internal_name not in node.output_port_names():
            raise OpticPortError(f"node {node} does not have an output port "
                                 f"{internal_name}")
        if self.is_port_connected(node_id, internal_name):
            raise OpticPortError(f"port {internal_name} of {node} is "
                                 "connected internally")
        if external_name in self.input_map:
            raise OpticPortError(f"external port name {external_name} "
                                 "already used as input")
        self.effective_output_map().add(external_name, node_id, internal_name)

    def external_output_name(self, node_id, port_name):
        return self.effective_output_map().external_name(node_id, port_name)

    # --- traversal

    def topologically_sorted(self):
        """ Node uuids in topological order of the effective graph.

        Raises:
            GraphStructureError: if the graph has a cycle
        """
        order = self._sorted_cache.get(self.is_inverted)
        if order is None:
            graph = self.g.reverse(copy=False) if self.is_inverted else self.g
            try:
                order = list(nx.topological_sort(graph))
            except nx.NetworkXUnfeasible as err:
                raise GraphStructureError(
                    f"graph is not acyclic: {err}") from err
            self._sorted_cache[self.is_inverted] = order
        return list(order)

    def invert_graph(self):
        """ invert all nodes, edges and port maps; applied twice it is a no-op
        """
        for node in self.nodes():
            node.set_inverted(not node.inverted)
        self.is_inverted = not self.is_inverted

    def is_single_tree(self) -> bool:
        if self.g.number_of_nodes() == 0:
            return True
        return nx.is_weakly_connected(self.g)

    def is_stale_node(self, node_id) -> bool:
        """ True for an isolated node that is not exposed to the outside """
        if self.g.number_of_nodes() < 2:
            return False
        if self.g.degree(node_id) > 0:
            return False
        return not (self.input_map.contains_node(node_id) or
                    self.output_map.contains_node(node_id))

    def get_incoming(self, node_id):
        """ dict of input port name to light data on the incoming edges """
        incoming = {}
        for port, _, attrs in self._edges_in(node_id):
            if attrs['data'] is not None:
                incoming[port] = attrs['data']
        return incoming

    def incoming_distances(self, node_id):
        """ dict of input port name to (source node id, distance) """
        return {port: (other, attrs['distance'])
                for port, other, attrs in self._edges_in(node_id)}

    def set_outgoing_edge_data(self, node_id, port_name, data) -> bool:
        """ put `data` on the edge leaving `port_name`, False if unconnected
        """
        for port, _, attrs in self._edges_out(node_id):
            if port == port_name:
                attrs['data'] = data
                return True
        return False

    def clear_edges(self):
        for _, _, attrs in self.g.edges(data=True):
            attrs['data'] = None

    def reset_data(self):
        """ clear all edges and the recorded data of all nodes """
        self.clear_edges()
        for node in self.nodes():
            node.reset_data()

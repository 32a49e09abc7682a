#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Reference node, a second appearance of another node in the graph

    A :class:`NodeReference` has no geometry of its own. It shares the
    surfaces, hit maps and pose of the referenced node, so light passing the
    reference interacts with the very same physical element. Typically the
    reference is inverted to model light going back through an element,
    e.g. in a double pass setup.

.. Created on Wed Apr  3 11:17:04 2024

.. codeauthor: The optiscene developers
"""
from optiscene.opmerror import AnalysisError
from optiscene.nodes.opticnode import OpticNode


class NodeReference(OpticNode):
    """ Alias of `node` with its own inversion state """
    node_type = 'reference'

    def __init__(self, node=None, name=None):
        super().__init__(name=name)
        self.props.create('reference id', 'uuid of the referenced node', None,
                          object, read_only=True)
        self.reference = None
        if node is not None:
            self.set_reference(node)

    def set_reference(self, node):
        self.reference = node
        self.props.set_internal('reference id', node.uuid)

    def refers_to(self, node_id) -> bool:
        return self.reference is not None and self.reference.uuid == node_id

    def _referenced(self):
        if self.reference is None:
            raise AnalysisError(f"{self}: no node referenced")
        return self.reference

    def input_port_names(self):
        ports = self._referenced().ports
        return list(ports.outputs if self.inverted else ports.inputs)

    def output_port_names(self):
        ports = self._referenced().ports
        return list(ports.inputs if self.inverted else ports.outputs)

    def surface(self, port_name):
        return self._referenced().surface(port_name)

    def node_length(self):
        return self._referenced().node_length()

    @property
    def isometry(self):
        if self.reference is None:
            return None
        return self.reference.isometry

    @isometry.setter
    def isometry(self, iso):
        # the pose is owned by the referenced node
        pass

    def set_isometry(self, isometry):
        node = self._referenced()
        if node.isometry is None:
            node.set_isometry(isometry)

    def is_detector(self):
        return self._referenced().is_detector()

    def analyze(self, incoming, config, context, **kwargs):
        """ analyze the referenced node with the inversion of the reference """
        node = self._referenced()
        inverted = node.inverted
        node.set_inverted(self.inverted)
        try:
            return node.analyze(incoming, config, context, **kwargs)
        finally:
            node.set_inverted(inverted)

    def calc_node_position(self, incoming, context):
        node = self._referenced()
        inverted = node.inverted
        node.set_inverted(self.inverted)
        try:
            return node.calc_node_position(incoming, context)
        finally:
            node.set_inverted(inverted)

    def hit_maps(self):
        return {}

    def reset_data(self):
        pass

    def report(self):
        node_report = super().report()
        if self.reference is not None:
            node_report.data = {'reference': self.reference.name}
        return node_report

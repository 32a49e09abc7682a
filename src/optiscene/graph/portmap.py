#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Mapping of external group ports onto ports of internal nodes

.. Created on Mon Apr  1 10:08:51 2024

.. codeauthor: The optiscene developers
"""
from optiscene.opmerror import OpticPortError


class PortMap():
    """ External port name -> (internal node id, internal port name) """

    def __init__(self):
        self.port_map = {}

    def __repr__(self):
        return "{!s}({!r})".format(type(self).__name__, self.port_map)

    def __len__(self):
        return len(self.port_map)

    def __contains__(self, external_name):
        return external_name in self.port_map

    def names(self):
        return list(self.port_map)

    def add(self, external_name: str, node_id, internal_name: str):
        if external_name in self.port_map:
            raise OpticPortError(f"external port name {external_name} "
                                 "already assigned")
        self.port_map[external_name] = (node_id, internal_name)

    def get(self, external_name):
        """ (node id, internal port name) or None """
        return self.port_map.get(external_name)

    def external_name(self, node_id, internal_name):
        """ external name mapped onto a node port, or None """
        for ext_name, (nid, int_name) in self.port_map.items():
            if nid == node_id and int_name == internal_name:
                return ext_name
        return None

    def contains_node(self, node_id) -> bool:
        return any(nid == node_id for nid, _ in self.port_map.values())

    def assigned_ports_for_node(self, node_id):
        """ list of (external name, internal name) of `node_id` """
        return [(ext, int_name)
                for ext, (nid, int_name) in self.port_map.items()
                if nid == node_id]

    def remove(self, external_name):
        self.port_map.pop(external_name, None)

    def remove_node_port(self, node_id, internal_name):
        ext_name = self.external_name(node_id, internal_name)
        if ext_name is not None:
            del self.port_map[ext_name]

    def remove_node(self, node_id):
        for ext_name, _ in self.assigned_ports_for_node(node_id):
            del self.port_map[ext_name]

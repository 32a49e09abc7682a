""" Package for the directed graph connecting optical nodes

    The :mod:`~.graph` subpackage provides the :class:`~.opticgraph.OpticGraph`
    holding nodes and port-to-port edges, and the :class:`~.portmap.PortMap`
    exposing internal ports of a group to the outside.
"""

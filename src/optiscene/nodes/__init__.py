""" Package of the optical nodes of a scene graph

    The :mod:`~.nodes` subpackage provides the node catalogue. Every node
    derives from :class:`~.opticnode.OpticNode`:

        - Light sources, :mod:`~.source`
        - Passive elements, :mod:`~.dummy`, :mod:`~.idealfilter` and
          :mod:`~.beamsplitter`
        - Refractive elements, :mod:`~.lenses`
        - Reflective elements, :mod:`~.mirrors`
        - Detectors, :mod:`~.detectors`
        - Aliases of other nodes, :mod:`~.reference`
        - Nested subgraphs, :mod:`~.group`

    Node properties are managed by :mod:`~.properties` and ports by
    :mod:`~.ports`. Importing :mod:`~.catalog` registers all node types with
    :func:`~.opticnode.create_node`.
"""

""" Package providing the physical constituents of optical surfaces

    The :mod:`~.elem` subpackage provides classes and functions
    for the surfaces that light interacts with. These include:

        - Geometric surface shapes, :mod:`~.geosurface`
        - Clear aperture shapes, :mod:`~.aperture`
        - Reflectivity models, :mod:`~.coatings`
        - Refractive index models, :mod:`~.medium`
        - Recording of ray strikes, :mod:`~.hitmap`, and fluence estimation
          from them, :mod:`~.fluence`

    A surface of a node is managed by the :class:`~.opticsurface.OpticSurface`
    class
"""

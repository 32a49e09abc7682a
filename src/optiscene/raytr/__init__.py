""" Package for rays, ray bundles and the light data flowing through a scene

    The :mod:`~.raytr` subpackage provides core classes and functions
    for geometric ray tracing. These include:

        - Base level refraction, reflection and diffraction of a ray
          direction, :mod:`~.raytrace`
        - A single ray with its history and counters, :mod:`~.ray`
        - Ray bundles with bulk operations and helper rays for fluence
          tracking, :mod:`~.rays`
        - Position, energy and fluence distributions for generating ray
          bundles, :mod:`~.distributions`
        - The light data variants passed along the edges of a scene graph,
          :mod:`~.lightdata`
        - Exception classes for reporting ray trace events,
          :mod:`~.traceerror`
"""

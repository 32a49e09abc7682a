# -*- coding: utf-8 -*-
""" The **optiscene** optical scene graph and light propagation analysis
    package

    An optical setup is described as a graph of nodes connected through
    named ports, see :mod:`~.graph` and :mod:`~.nodes`. It is supported by
    the following subpackages:

        - :mod:`~.nodes`: the node catalogue (sources, lenses, mirrors,
          splitters, filters, detectors, references and nested groups)
        - :mod:`~.graph`: the directed port graph and port maps of groups
        - :mod:`~.analysis`: energy, ray trace and ghost focus analyzers
        - :mod:`~.elem`: geometric surfaces, apertures, coatings, refractive
          index models, hit maps and fluence estimation
        - :mod:`~.raytr`: rays, ray bundles, light data and refraction

        - :mod:`opticalglass`: this package interfaces with glass manufacturer
          optical data and the RefractiveIndex.Info website

    The :mod:`~.util` subpackage provides poses, spectra, unit helpers and
    miscellaneous math.

    Units: lengths are in mm, wavelengths in nm, energies in J and fluences
    in J/cm². Angles are given in degrees.
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version(__name__)
except PackageNotFoundError:
    __version__ = 'unknown'


def listobj(obj):
    """ Print wrapper function for listobj_str() method of `obj`.

    Classes may implement the `listobj_str` method that returns a string
    containing a formatted description of the object, e.g.
    :meth:`.Circular.listobj_str` or :meth:`.NodeGroup.listobj_str`.
    """
    try:
        print(obj.listobj_str())
    except AttributeError:
        print(repr(obj))

""" Package with utility modules

    The :mod:`~.util` subpackage provides:

        - Rigid body poses, :mod:`~.transform`
        - Sampled spectra, :mod:`~.spectrum`
        - Unit conversion and validation, :mod:`~.quantity`
        - Vector and polygon math, :mod:`~.misc_math`
"""

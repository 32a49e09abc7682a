""" Package for the analysis of optical scenes

    The :mod:`~.analysis` subpackage provides:

        - The configuration records of the analysis modes and the scene
          context, :mod:`~.config`
        - The energy, ray trace and ghost focus analyzers, :mod:`~.analyzer`
"""

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Rigid body poses for placing nodes and surfaces in space

    An :class:`Isometry` is a rotation `r` followed by a translation `t`. A
    point `p` given in the local frame is located at `r.dot(p) + t` in the
    parent frame. Composition follows the usual accumulation of coordinate
    transforms::

        t_new = np.matmul(r_prev, t) + t_prev
        r_new = np.matmul(r_prev, r)

.. Created on Wed Mar 13 14:09:58 2024

.. codeauthor: The optiscene developers
"""

import numpy as np

from optiscene.util.misc_math import (euler2rot3d, rot2euler, rot_from_axis,
                                      normalize)


class Isometry():
    """ Rotation and translation of a local frame wrt its parent frame.

    Attributes:
        rotation: 3x3 rotation matrix
        translation: position of the local origin in the parent frame (mm)
    """

    def __init__(self, rotation=None, translation=None):
        self.rotation = (np.identity(3) if rotation is None
                         else np.array(rotation, dtype=float))
        self.translation = (np.zeros(3) if translation is None
                            else np.array(translation, dtype=float))

    @classmethod
    def identity(cls):
        return cls()

    @classmethod
    def along_z(cls, dist: float):
        """ pure translation along the z axis """
        return cls(translation=[0., 0., dist])

    @classmethod
    def from_euler(cls, translation, euler):
        """ translation (mm) and euler angles alpha, beta, gamma (degrees) """
        return cls(rotation=euler2rot3d(euler), translation=translation)

    @classmethod
    def from_axis(cls, position, direction, up=None):
        """ frame at `position` whose z axis points along `direction` """
        return cls(rotation=rot_from_axis(direction, up),
                   translation=position)

    def __repr__(self):
        return "{!s}(t={!r}, euler={!r})".format(
            type(self).__name__, self.translation.tolist(),
            self.euler_angles().tolist())

    def __eq__(self, other):
        if not isinstance(other, Isometry):
            return NotImplemented
        return (np.allclose(self.rotation, other.rotation, atol=1e-12)
                and np.allclose(self.translation, other.translation,
                                atol=1e-12))

    def listobj_str(self):
        t = self.translation
        e = self.euler_angles()
        return (f"t=[{t[0]:.6g}, {t[1]:.6g}, {t[2]:.6g}]  "
                f"euler=[{e[0]:.6g}, {e[1]:.6g}, {e[2]:.6g}]\n")

    def euler_angles(self):
        return rot2euler(self.rotation)

    def transform_point(self, pt):
        return self.rotation.dot(pt) + self.translation

    def transform_vector(self, v):
        return self.rotation.dot(v)

    def inverse_transform_point(self, pt):
        rt = self.rotation.T
        return rt.dot(pt - self.translation)

    def inverse_transform_vector(self, v):
        rt = self.rotation.T
        return rt.dot(v)

    def append(self, other):
        """ return the composition of self followed by `other`.

        `other` is expressed in the local frame of self; the result maps
        points of `other`'s local frame into self's parent frame.
        """
        t_new = np.matmul(self.rotation, other.translation) + self.translation
        r_new = np.matmul(self.rotation, other.rotation)
        return Isometry(r_new, t_new)

    def inverse(self):
        rt = self.rotation.T
        return Isometry(rt, -rt.dot(self.translation))

    def z_axis(self):
        """ direction of the local z axis in the parent frame """
        return normalize(self.rotation[:, 2])

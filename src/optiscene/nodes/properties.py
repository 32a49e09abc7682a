#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2024 The optiscene developers
""" Typed property store of optical nodes

.. Created on Wed Mar 27 14:10:33 2024

.. codeauthor: The optiscene developers
"""
import numbers

import attr

from optiscene.opmerror import PropertiesError


@attr.s
class Property():
    """ A named value with description, expected type and write protection.

    Attributes:
        description: human readable description
        value: current value
        value_type: type (or tuple of types) the value must be an instance of
        read_only: if True, the value can only be given at creation
        validator: optional callable checking a new value, it raises
            :class:`~.PropertiesError` for an invalid value
    """
    description = attr.ib()
    value = attr.ib()
    value_type = attr.ib(default=object)
    read_only = attr.ib(default=False)
    validator = attr.ib(default=None, repr=False)

    def check(self, value):
        if self.value_type is float and isinstance(value, numbers.Real) \
           and not isinstance(value, bool):
            value = float(value)
        if value is not None and not isinstance(value, self.value_type):
            raise PropertiesError(
                f"wrong data type {type(value).__name__} for property, "
                f"expected {getattr(self.value_type, '__name__', self.value_type)}")
        if self.validator is not None:
            self.validator(value)
        return value


class Properties():
    """ Mapping of property names to :class:`Property` """

    def __init__(self):
        self._props = {}

    def __repr__(self):
        return "{!s}({!r})".format(type(self).__name__, self.as_dict())

    def __contains__(self, name):
        return name in self._props

    def __iter__(self):
        return iter(self._props)

    def __len__(self):
        return len(self._props)

    def create(self, name: str, description: str, value, value_type=None,
               read_only=False, validator=None):
        """ Add a new property.

        If no `value_type` is given, the type of `value` is used.

        Raises:
            PropertiesError: if the property already exists
        """
        if name in self._props:
            raise PropertiesError(f"property {name} already created")
        if value_type is None:
            value_type = type(value) if value is not None else object
        prop = Property(description, None, value_type, read_only, validator)
        prop.value = prop.check(value)
        self._props[name] = prop

    def set(self, name: str, value):
        """ Set the value of an existing, writeable property.

        Raises:
            PropertiesError: unknown name, read-only property or wrong type
        """
        prop = self.get_property(name)
        if prop.read_only:
            raise PropertiesError(f"property {name} is read-only")
        prop.value = prop.check(value)

    def set_internal(self, name: str, value):
        """ set a value bypassing the read-only protection """
        prop = self.get_property(name)
        prop.value = prop.check(value)

    def get_property(self, name: str):
        try:
            return self._props[name]
        except KeyError:
            raise PropertiesError(f"property {name} does not exist") from None

    def get(self, name: str):
        return self.get_property(name).value

    def contains(self, name: str) -> bool:
        return name in self._props

    def names(self):
        return list(self._props)

    def as_dict(self):
        return {name: prop.value for name, prop in self._props.items()}

    def listobj_str(self):
        o_str = ""
        for name, prop in self._props.items():
            o_str += f"{name}: {prop.value}\n"
        return o_str

# -*- coding: utf-8 -*-
"""material optical properties

.. currentmodule:: pymiesphere.materials

Classes
-------

.. autosummary::
   :toctree: generated/
   :recursive:

    MatConstant
    MatDrude
    MatDatabase
    MaterialBase

"""
from .mat import MatDatabase
from .mat import MatConstant
from .mat import MatDrude
from .mat import MaterialBase

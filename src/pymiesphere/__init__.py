# encoding=utf-8
#
# Copyright (C) 2025, the pymiesphere authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.
#
"""
pyMieSphere - Mie theory for homogeneous spheres

Far-field extinction, scattering and absorption spectra of a homogeneous
sphere under plane wave illumination, implemented in pytorch.

API
===

Cross-sections
--------------

.. currentmodule:: pymiesphere

.. autosummary::
   :toctree: generated/

   cross_sections
   Sphere


Special
-------

autodiff compatible Riccati-Bessel functions, built on the cylindrical
Bessel and Hankel functions of scipy.

.. autosummary::
   :toctree: generated/

   special


Coefficients
------------

Mie susceptibilities Gamma, Delta, A, B of a homogeneous sphere.

.. autosummary::
   :toctree: generated/

   coefficients


Farfield
--------

efficiencies, multipole decomposition, backscattering and angular scattering.

.. autosummary::
   :toctree: generated/

   farfield


Materials
---------

constant, Drude and refractiveindex.info permittivities.

.. autosummary::
   :toctree: generated/

   materials


Helper
------

truncation criterion, complex division, interpolation.

.. autosummary::
   :toctree: generated/

   helper

"""

__name__ = "pymiesphere"
__version__ = "0.1"
__date__ = "10/18/2026"  # MM/DD/YYY
__license__ = "GPL3"
__status__ = "alpha"

__copyright__ = "Copyright 2025-2026"
__author__ = "the pymiesphere authors"
__maintainer__ = "the pymiesphere authors"
__email__ = ""
# other contributors:
__credits__ = []


# --- populate namespace
# modules
from . import special
from . import helper
from . import coefficients
from . import farfield
from . import materials

# main API
from pymiesphere.farfield import cross_sections
from pymiesphere.main import Sphere

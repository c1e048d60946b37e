# -*- coding: utf-8 -*-
"""manage installation"""
from setuptools import setup, find_namespace_packages
import os
import re


# =============================================================================
# helper functions to extract meta-info from package
# =============================================================================
def read_version_file(*parts):
    with open(os.path.join(os.path.dirname(__file__), *parts), "r") as f:
        return f.read()


def read(fname):
    with open(os.path.join(os.path.dirname(__file__), fname)) as f:
        return f.read()


def find_meta(key, *file_paths):
    version_file = read_version_file(*file_paths)
    match = re.search(r"^__{}__ = ['\"]([^'\"]*)['\"]".format(key), version_file, re.M)
    if match:
        return match.group(1)
    raise RuntimeError("Unable to find {} string.".format(key))


INIT_FILE = ("src", "pymiesphere", "__init__.py")


# =============================================================================
# package module list
# =============================================================================
package_list = find_namespace_packages(where="src", include=["pymiesphere*"])


# =============================================================================
# main setup
# =============================================================================
setup(
    name=find_meta("name", *INIT_FILE),
    version=find_meta("version", *INIT_FILE),
    author=find_meta("author", *INIT_FILE),
    description=(
        "Far-field Mie cross-sections of homogeneous spheres, auto-diff ready via PyTorch."
    ),
    license="GPLv3+",
    long_description=read("README.md"),
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=package_list,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Topic :: Scientific/Engineering :: Physics",
        "Environment :: Console",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
        "Intended Audience :: Science/Research",
    ],
    keywords=[
        "Mie Theory",
        "optical scattering",
        "nano optics",
        "plasmonics",
    ],
    install_requires=["torch>=2.0.0", "scipy>=1.10.0", "numpy", "pyyaml"],
    extras_require={"test": ["pytest"]},
    python_requires=">=3.9",
)

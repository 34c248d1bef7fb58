"""Packaging for eqscope; ``python setup.py py2app`` builds the macOS bundle."""
from __future__ import annotations

import sys

from setuptools import find_packages, setup

APP = ["eqscope/__main__.py"]
OPTIONS = {
    "argv_emulation": False,
    "iconfile": None,
    "includes": [
        "matplotlib.backends.backend_qtagg",
        "numpy",
        "sounddevice",
    ],
    "packages": ["eqscope", "_sounddevice_data"],
    "compressed": False,
    "plist": {
        "CFBundleName": "eqscope",
        "CFBundleDisplayName": "eqscope",
        "CFBundleIdentifier": "com.eqscope.app",
        "CFBundleVersion": "0.1.0",
        "NSMicrophoneUsageDescription": "eqscope reads an audio input to draw the spectrum analyzer.",
    },
}

bundle_args = {}
if "py2app" in sys.argv:
    bundle_args = {"app": APP, "options": {"py2app": OPTIONS}, "setup_requires": ["py2app"]}

setup(
    name="eqscope",
    version="0.1.0",
    description="Parametric EQ editor: response curves, analyzer trace and gesture editing",
    packages=find_packages(include=["eqscope", "eqscope.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "PyQt6",
        "matplotlib",
        "sounddevice",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"gui_scripts": ["eqscope = eqscope.gui:run"]},
    **bundle_args,
)

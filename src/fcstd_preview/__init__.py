"""Extract embedded preview images from FreeCAD project archives."""

__version__ = "0.1.0"

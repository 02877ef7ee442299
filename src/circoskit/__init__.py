"""
circosKit: circular (Circos-style) layout and track geometry for Python.

This package provides tools for:
- Angular layout of named segments around a circle
- Radius band allocation for concentric tracks
- Geometry builders for highlight, histogram, heatmap, line, scatter,
  stack, chord and text tracks
- Rendering of the resulting primitives to SVG or matplotlib figures
"""

__version__ = "0.3.0"
__author__ = "circosKit Team"

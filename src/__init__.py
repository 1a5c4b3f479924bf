"""
Layout Text Reconstruction Pipeline
===================================

Rebuilds a plain-text approximation of a scanned page's visual layout from
OCR token geometry (Google Document AI JSON).

Main components:
- Token extraction (text anchors, normalized boxes to page pixels)
- Line clustering (vertical overlap or fixed row threshold)
- Slot model (typical word width as one character cell)
- Line rendering (quantized spacing, paragraph gap detection)
- Page assembly (page separators, empty markers)
"""

__version__ = "1.0.0"
__author__ = "Layout Text Team"

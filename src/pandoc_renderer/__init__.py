"""
Pandoc renderer package.

This module provides a FastAPI application that converts Markdown into docx,
pptx or html by delegating to a `pandoc` subprocess. Conversion is exposed at
`POST /`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"

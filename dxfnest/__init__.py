"""dxfnest - first-fit nesting of DXF outlines onto a rectangular sheet."""

__version__ = "0.3.0"

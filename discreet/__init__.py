"""Finite difference schemes for 2D PDEs built from an equation and a stencil."""

__version__ = "0.1.0"
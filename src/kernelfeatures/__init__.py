"""
Kernelfeatures: ML feature extraction for contraction kernel selection.

This package turns a contraction problem and a candidate kernel's tiling
and parallelism configuration into named scalar features consumed by a
learned kernel selector.
"""

from importlib.metadata import version

__version__ = version("kernelfeatures")

__all__ = ["__version__"]

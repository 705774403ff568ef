"""TestGenium: tenant-gated assessment job service"""

__version__ = "1.0.0"

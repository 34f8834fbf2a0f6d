"""runbench — best-of-N benchmark harness for interpreter binaries."""

__version__ = "0.1.0"

"""meshctl: command line client for the Meshery model registry."""

__version__ = "0.1.0"

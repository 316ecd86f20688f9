"""Headless views of container processes, mounts, network, runtime metadata and pods."""

__version__ = "0.1.0"
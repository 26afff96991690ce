"""Sinks receiving the run status and the final product table."""

from .sink import DryRunSink, Sink

__all__ = ["DryRunSink", "Sink"]

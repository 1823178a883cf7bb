"""Ordered start/stop hooks for application lifecycles, with contexts, call-site capture, event spies and test helpers."""

__version__ = "0.1.0"
__all__ = ["clock", "callsite", "spy", "writer", "lifecycle", "harness"]
"""Helpers for proxying Go toolchain compile and link invocations."""

__version__ = "1.1.0"
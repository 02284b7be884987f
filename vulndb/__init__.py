"""Vulnerability report model, advisory version ranges, module paths and proxy helpers."""

__version__ = "0.1.0"
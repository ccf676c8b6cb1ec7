"""Kubernetes VNF lifecycle plugin."""

__version__ = "0.1.0"

"""Prometheus instrumentation for the scheduling backend."""

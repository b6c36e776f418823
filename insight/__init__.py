"""Durable event counter service with a Prometheus metrics mirror."""

__version__ = "0.1.0"

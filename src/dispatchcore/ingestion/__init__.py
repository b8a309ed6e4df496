"""Ingestion layer.

This package contains the defensive parsing used to turn untrusted store
records (reservations, telemetry) into typed domain objects.
"""

__all__: list[str] = []

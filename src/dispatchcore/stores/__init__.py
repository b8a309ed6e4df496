"""Collaborator interfaces and the bundled store adapters."""

from dispatchcore.stores._transport import RestTableClient
from dispatchcore.stores.memory import InMemoryReservationStore, InMemoryTelemetryStore
from dispatchcore.stores.preferences import JsonFilePreferenceStore, MemoryPreferenceStore
from dispatchcore.stores.protocols import PreferenceStore, ReservationStore, TelemetryStore
from dispatchcore.stores.rest import RestReservationStore, RestTelemetryStore

__all__ = [
    "InMemoryReservationStore",
    "InMemoryTelemetryStore",
    "JsonFilePreferenceStore",
    "MemoryPreferenceStore",
    "PreferenceStore",
    "ReservationStore",
    "RestReservationStore",
    "RestTableClient",
    "RestTelemetryStore",
    "TelemetryStore",
]

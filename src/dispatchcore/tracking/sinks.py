"""Marker sinks: the surfaces the tracker draws on."""

from __future__ import annotations

from typing import Protocol

from dispatchcore.models.markers import (
    ClearPlaceholder,
    MarkerCommand,
    RemoveMarker,
    ShowPlaceholder,
    UpsertMarker,
)


class MarkerSink(Protocol):
    """A map surface accepting marker commands."""

    def apply(self, command: MarkerCommand) -> None:
        ...


class RecordingSink:
    """Sink that keeps the resulting marker state and every command received.

    Useful as a headless surface and as a test double.
    """

    def __init__(self) -> None:
        self.commands: list[MarkerCommand] = []
        self.markers: dict[str, UpsertMarker] = {}
        self.placeholder: ShowPlaceholder | None = None
        self.created: int = 0

    def apply(self, command: MarkerCommand) -> None:
        self.commands.append(command)
        if isinstance(command, UpsertMarker):
            if command.marker_id not in self.markers:
                self.created += 1
            self.markers[command.marker_id] = command
        elif isinstance(command, RemoveMarker):
            self.markers.pop(command.marker_id, None)
        elif isinstance(command, ShowPlaceholder):
            self.placeholder = command
        elif isinstance(command, ClearPlaceholder):
            self.placeholder = None

    @property
    def highlighted(self) -> list[str]:
        return [marker_id for marker_id, marker in self.markers.items() if marker.highlighted]

    def clear_log(self) -> None:
        self.commands.clear()

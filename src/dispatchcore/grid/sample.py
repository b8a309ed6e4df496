"""Built-in sample reservations shown while no real data is available."""

from __future__ import annotations

from datetime import date
from typing import Any

from dispatchcore.models.reservation import ReservationRow

_SAMPLE_RECORDS: tuple[dict[str, Any], ...] = (
    {
        "id": "sample-1",
        "confirmation_number": "S-1001",
        "status": "unassigned",
        "passenger_name": "John Smith",
        "pickup_address": "Minneapolis-St Paul Airport, MN",
        "dropoff_address": "Downtown Minneapolis, MN",
        "pickup_time": "14:30",
        "vehicle_type": "Stretch",
        "passenger_count": 4,
    },
    {
        "id": "sample-2",
        "confirmation_number": "S-1002",
        "status": "assigned",
        "passenger_name": "Sarah Johnson",
        "driver_name": "Mike Driver",
        "pickup_address": "Mall of America, Bloomington, MN",
        "dropoff_address": "Target Center, Minneapolis, MN",
        "pickup_time": "09:00",
        "vehicle_type": "SUV",
        "passenger_count": 6,
    },
    {
        "id": "sample-3",
        "confirmation_number": "S-1003",
        "status": "completed",
        "passenger_name": "Robert Williams",
        "driver_name": "Lisa Driver",
        "pickup_address": "St. Paul Hotel, St. Paul, MN",
        "dropoff_address": "Minneapolis Convention Center, MN",
        "pickup_time": "18:00",
        "vehicle_type": "Luxury Sedan",
        "passenger_count": 2,
    },
    {
        "id": "sample-4",
        "confirmation_number": "S-1004",
        "farm_option": "farm-out",
        "farmout_status": "offered_to_affiliate",
        "passenger_name": "Emily Davis",
        "pickup_address": "University of Minnesota, Minneapolis, MN",
        "dropoff_address": "Walker Art Center, Minneapolis, MN",
        "pickup_time": "11:00",
        "vehicle_type": "Sedan",
        "passenger_count": 2,
    },
    {
        "id": "sample-5",
        "confirmation_number": "S-1005",
        "status": "quote",
        "passenger_name": "Michael Brown",
        "pickup_address": "Edina Galleria, Edina, MN",
        "dropoff_address": "US Bank Stadium, Minneapolis, MN",
        "pickup_time": "4:45 PM",
        "vehicle_type": "SUV",
        "passenger_count": 5,
    },
)


def sample_rows(pickup_date: date | None = None) -> list[ReservationRow]:
    """Sample rows dated *pickup_date* (today when omitted)."""
    day = (pickup_date or date.today()).isoformat()
    return [ReservationRow.from_record({**record, "pickup_date": day}) for record in _SAMPLE_RECORDS]

"""Internal constants shared across the library.

The status tables are plain configuration data: editing a spelling or
reordering the queue is a data change, never a code change.
"""

# ------------------------------------------------------------------
# Status aliases  (normalized raw key → canonical key)
# ------------------------------------------------------------------

STATUS_ALIASES: dict[str, str] = {
    "farm_out_unassigned": "unassigned",
    "farmout_unassigned": "unassigned",
    "created_farm_out_unassigned": "unassigned",
    "created_farmout_unassigned": "unassigned",
    "farm_out_assigned": "assigned",
    "farmout_assigned": "assigned",
    "created_farm_out_assigned": "assigned",
    "created_farmout_assigned": "assigned",
    "farm_out_confirmed": "assigned",
    "farmout_confirmed": "assigned",
    "farm_out_offered": "offered",
    "farmout_offered": "offered",
    "offered_efarm_in": "offered",
    "farm_out_declined": "declined",
    "farmout_declined": "declined",
    "farm_out_completed": "completed",
    "farmout_completed": "completed",
    "farm_out_cancelled": "cancelled",
    "farmout_cancelled": "cancelled",
    "done": "completed",
    "canceled": "cancelled",
    "en_route": "enroute",
    "passenger_on_board": "passenger_onboard",
    "passenger_on_boarded": "passenger_onboard",
    "passenger_on_boarding": "passenger_onboard",
    "pob": "passenger_onboard",
    "inhouse": "in_house",
    "in_house_dispatch": "in_house",
    "quoted": "quote",
    "quote_request": "quote",
}

# ------------------------------------------------------------------
# Display metadata  (canonical key → (label, icon))
# ------------------------------------------------------------------

STATUS_METADATA: dict[str, tuple[str, str]] = {
    "unassigned": ("Unassigned", "⚪"),
    "offered": ("Offered", "📨"),
    "offered_to_affiliate": ("Offered to Affiliate", "🌐"),
    "affiliate_assigned": ("Affiliate Assigned", "🤝"),
    "affiliate_driver_assigned": ("Affiliate Driver Assigned", "🚘"),
    "assigned": ("Assigned", "🗂️"),
    "enroute": ("En Route", "🚕"),
    "driver_en_route": ("Driver En Route", "🚗"),
    "on_the_way": ("Driver On The Way", "🚗"),
    "arrived": ("Arrived", "📍"),
    "driver_waiting_at_pickup": ("Waiting at Pickup", "⏱️"),
    "waiting_at_pickup": ("Waiting at Pickup", "⏱️"),
    "passenger_onboard": ("Passenger On Board", "🧑‍🤝‍🧑"),
    "driver_circling": ("Driver Circling", "⭕"),
    "customer_in_car": ("Customer In Car", "🚘"),
    "driving_passenger": ("Driving Passenger", "🛣️"),
    "declined": ("Declined", "⛔"),
    "cancelled": ("Cancelled", "🛑"),
    "cancelled_by_affiliate": ("Cancelled by Affiliate", "🛑"),
    "late_cancel": ("Late Cancel", "⚠️"),
    "late_cancelled": ("Late Cancelled", "⚠️"),
    "no_show": ("No Show", "🚫"),
    "covid19_cancellation": ("COVID-19 Cancellation", "🦠"),
    "completed": ("Completed", "✅"),
    "settled": ("Settled", "💵"),
    "quote": ("Quote", "📝"),
    "in_house": ("In House", "🏢"),
}

PLACEHOLDER_ICON = "❔"

# ------------------------------------------------------------------
# Presentation order  (lower index sorts first)
# ------------------------------------------------------------------

STATUS_RANK_ORDER: tuple[str, ...] = (
    "unassigned",
    "offered",
    "offered_to_affiliate",
    "affiliate_assigned",
    "affiliate_driver_assigned",
    "assigned",
    "enroute",
    "driver_en_route",
    "on_the_way",
    "arrived",
    "driver_waiting_at_pickup",
    "waiting_at_pickup",
    "passenger_onboard",
    "driver_circling",
    "customer_in_car",
    "driving_passenger",
    "declined",
    "cancelled",
    "cancelled_by_affiliate",
    "late_cancel",
    "late_cancelled",
    "no_show",
    "covid19_cancellation",
    "completed",
    "settled",
    "quote",
    "in_house",
)

# ------------------------------------------------------------------
# Grid status buckets
# ------------------------------------------------------------------

SETTLED_STATUSES: frozenset[str] = frozenset(
    {
        "completed",
        "settled",
        "declined",
        "cancelled",
        "cancelled_by_affiliate",
        "late_cancel",
        "late_cancelled",
        "no_show",
        "covid19_cancellation",
    }
)

QUOTE_STATUS = "quote"

# Everything not settled and not a quote is still in play; unknown statuses
# land here too (see ``models.filters.classify_status``).
ACTIVE_STATUSES: frozenset[str] = frozenset(
    key for key in STATUS_RANK_ORDER if key not in SETTLED_STATUSES and key != QUOTE_STATUS
)

# ------------------------------------------------------------------
# Origin buckets  (normalized farm option → bucket value)
# ------------------------------------------------------------------

ORIGIN_ALIASES: dict[str, str] = {
    "in_house": "in_house",
    "inhouse": "in_house",
    "in_house_dispatch": "in_house",
    "farm_out": "farm_out",
    "farmout": "farm_out",
    "farmed_out": "farm_out",
    "farm_in": "farm_in",
    "farmin": "farm_in",
    "farmed_in": "farm_in",
    "efarm_in": "farm_in",
    "e_farm_in": "farm_in",
}

# ------------------------------------------------------------------
# Tracker messages and conversions
# ------------------------------------------------------------------

NO_LIVE_DATA_MESSAGE = "No live driver locations yet. Drivers need to share their location."
TABLE_NOT_PROVISIONED_MESSAGE = (
    "Table not configured. Run driver-locations-setup.sql to provision {table}."
)
STORE_MISSING_MESSAGE = "Live telemetry store not available"
STORE_ERROR_MESSAGE = "Error loading live data"
CONNECTION_ERROR_MESSAGE = "Connection error"

MPS_TO_MPH = 2.237

# Preference keys
PREF_TRACKING_MODE = "dispatch.tracking_mode"
PREF_GRID_FILTERS = "dispatch.grid_filters"

USER_AGENT = "dispatchcore"

"""Internal constants shared across the library."""

UPDATES_ACTION = "getVehicleUpdates"
AUTH_ERROR_CODES: frozenset[str] = frozenset({"401", "403"})

"""Topic constants for the runtime bus."""

# Gestures -> transform controller
VIEW_TRANSFORM_CANDIDATE = "view.transform.candidate"
VIEW_TRANSFORM_CHANGED = "view.transform.changed"

# View state machine
VIEW_STATE_CHANGED = "view.state.changed"
VIEW_POINT_SELECTED = "view.point.selected"
VIEW_TIER_CHANGED = "view.tier.changed"

# Errors
VIEW_ERROR = "view.error"

__all__ = [
    "VIEW_TRANSFORM_CANDIDATE",
    "VIEW_TRANSFORM_CHANGED",
    "VIEW_STATE_CHANGED",
    "VIEW_POINT_SELECTED",
    "VIEW_TIER_CHANGED",
    "VIEW_ERROR",
]

"""Switch decision for free cooling.

Cooling means venting to the ambient air, so it only helps while the inside
is warmer than the outside, and never below the configured floor.
"""

from .models import Decision


def desired_state(indoor: float, outdoor: float, min_indoor: float) -> bool:
    """Return whether cooling should be on."""
    if indoor <= min_indoor:
        return False
    return indoor > outdoor


def decide(
    indoor: float,
    outdoor: float,
    min_indoor: float,
    previous_state: bool | None,  # noqa: FBT001
) -> Decision:
    """Compute the desired switch state and whether it differs from the last one.

    Args:
        indoor: Indoor temperature in Celsius.
        outdoor: Outdoor temperature in Celsius.
        min_indoor: Temperature floor below which cooling stays off.
        previous_state: Last confirmed switch state, None when unknown.

    Returns:
        Decision; an unknown previous state always counts as changed.

    """
    desired = desired_state(indoor, outdoor, min_indoor)
    changed = previous_state is None or desired != previous_state
    return Decision(desired_state=desired, changed=changed)

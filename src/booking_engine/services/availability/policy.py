"""Drive-distance policies used by the feasibility evaluator."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from ...config import settings
from ...errors import InvalidInput


class AnchorRule(str, Enum):
    PRIOR_OR_NEXT = "prior_or_next"
    PRIOR_ONLY = "prior_only"


@dataclass(frozen=True, slots=True)
class DrivePolicy:
    name: str
    radius_miles: float
    anchor_rule: AnchorRule

    def with_radius(self, radius_miles: float) -> "DrivePolicy":
        if not radius_miles > 0:
            raise InvalidInput(f"Drive radius must be positive, got {radius_miles}.")
        return replace(self, radius_miles=float(radius_miles))


STANDARD_POLICY = DrivePolicy(name="standard", radius_miles=60.0, anchor_rule=AnchorRule.PRIOR_OR_NEXT)
# Older, stricter variant: anchors only on earlier appointments.
LEGACY_POLICY = DrivePolicy(name="legacy", radius_miles=45.0, anchor_rule=AnchorRule.PRIOR_ONLY)

POLICIES = {policy.name: policy for policy in (STANDARD_POLICY, LEGACY_POLICY)}


def policy_from_settings() -> DrivePolicy:
    policy = POLICIES[settings.drive_policy]
    if settings.drive_radius_miles is not None:
        policy = policy.with_radius(settings.drive_radius_miles)
    return policy

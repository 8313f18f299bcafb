from enum import Enum


class SubscriptionStatus(str, Enum):
    """Stripe subscription lifecycle states mirrored into user_profiles"""

    INCOMPLETE = "incomplete"
    INCOMPLETE_EXPIRED = "incomplete_expired"
    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    UNPAID = "unpaid"
    PAUSED = "paused"

    @classmethod
    def is_known(cls, value: str | None) -> bool:
        return value in cls._value2member_map_

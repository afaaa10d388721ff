from enum import StrEnum


class SeatCategory(StrEnum):
    """Fixed when the hall layout is created"""

    STANDARD = 'standard'
    PREMIUM = 'premium'
    VIP = 'vip'

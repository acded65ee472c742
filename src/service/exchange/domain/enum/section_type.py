from enum import StrEnum


class SectionType(StrEnum):
    """Seating classification; opaque to scoring beyond equality"""

    SUPPORTERS = 'supporters'
    STANDARD = 'standard'
    DEWEYS = 'deweys'
    HIGHROLLER = 'highroller'
    STANDING_ROOM = 'standing_room'

from enum import StrEnum


class PriceStatus(StrEnum):
    DONATION_MATCH = 'donation_match'
    DONATION_MISMATCH = 'donation_mismatch'
    COMPATIBLE = 'compatible'
    NEGOTIATION_LIKELY = 'negotiation_likely'
    NEGOTIATION_NEEDED = 'negotiation_needed'
    INCOMPLETE = 'incomplete'

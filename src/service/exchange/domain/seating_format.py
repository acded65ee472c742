from typing import Optional

from src.service.exchange.domain.enum.section_type import SectionType


SECTION_LABELS: dict[SectionType, str] = {
    SectionType.SUPPORTERS: 'Supporters Section',
    SectionType.STANDARD: 'Standard Seating',
    SectionType.DEWEYS: '$3 Deweys',
    SectionType.HIGHROLLER: 'Highroller',
    SectionType.STANDING_ROOM: 'Standing Room',
}

ANY_SECTION_LABEL = 'Any Section'


def section_label(section_type: Optional[SectionType]) -> str:
    if section_type is None:
        return ANY_SECTION_LABEL
    return SECTION_LABELS.get(section_type, str(section_type))

"""Rendered captions of the report, per language.

Records and headers keep canonical values; only the writer goes through
these tables.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from teams_attendance.models import (
    CONSULTATION,
    GUEST,
    DurationCategory,
    Lateness,
    Presence,
)

DEFAULT_TITLE = "Default title"


@dataclass(frozen=True)
class Labels:
    title_caption: str
    date_caption: str
    slot_caption: str
    columns: tuple
    period: str
    consultation: str
    guest: str
    default_title: str
    presence: Dict[Presence, str]
    lateness: Dict[Lateness, str]
    duration: Dict[DurationCategory, str]
    report_name: str

    def slot(self, time_slot: str) -> str:
        if time_slot == CONSULTATION:
            return self.consultation
        number = time_slot.rsplit(" ", 1)[-1]
        return self.period.format(number=number)

    def group(self, group: str) -> str:
        return self.guest if group == GUEST else group

    def title(self, title: str) -> str:
        return self.default_title if title == DEFAULT_TITLE else title

    def presence_of(self, value: Presence) -> str:
        return self.presence[value]

    def lateness_of(self, value: Optional[Lateness]) -> str:
        return self.lateness[value] if value is not None else ""

    def duration_of(self, value: Optional[DurationCategory]) -> str:
        return self.duration[value] if value is not None else ""


EN = Labels(
    title_caption="Meeting title",
    date_caption="Meeting date",
    slot_caption="Period",
    columns=("Group", "FullName", "Presence", "Lateness", "Duration"),
    period="Period {number}",
    consultation=CONSULTATION,
    guest=GUEST,
    default_title=DEFAULT_TITLE,
    presence={
        Presence.PRESENT: "Present",
        Presence.PARTIALLY_PRESENT: "Partially present",
        Presence.ABSENT: "Absent",
    },
    lateness={Lateness.ON_TIME: "On time", Lateness.LATE: "Late"},
    duration={
        DurationCategory.MINIMAL: "Minimal presence",
        DurationCategory.PARTIAL: "Partial presence",
        DurationCategory.FULL: "Full presence",
    },
    report_name="Attendance report",
)

RU = Labels(
    title_caption="Название собрания",
    date_caption="Дата проведения собрания",
    slot_caption="Номер пары",
    columns=("Группа", "ФИО", "Присутствие", "Опоздание", "Время нахождения на собрании"),
    period="Пара {number}",
    consultation="Консультация",
    guest="Гость",
    default_title="Название по-умолчанию",
    presence={
        Presence.PRESENT: "Присутствовал",
        Presence.PARTIALLY_PRESENT: "Присутствовал не полностью",
        Presence.ABSENT: "Отсутствовал",
    },
    lateness={Lateness.ON_TIME: "Без опоздания", Lateness.LATE: "Опоздал"},
    duration={
        DurationCategory.MINIMAL: "Малое присутствие на паре",
        DurationCategory.PARTIAL: "Малое нахождение на паре",
        DurationCategory.FULL: "Полное присутствие на паре",
    },
    report_name="Отчёт о проведении собрания",
)

LANGUAGES = {"en": EN, "ru": RU}


def get_labels(language: str) -> Labels:
    try:
        return LANGUAGES[language]
    except KeyError:
        raise ValueError(f"Unsupported report language: {language!r}") from None

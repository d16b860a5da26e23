"""
This module is for the data passed between the booking steps.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Tuple


class SeatPreference(IntEnum):
    NONE = 0
    WINDOW = 1
    AISLE = 2


class ClassType(IntEnum):
    STANDARD = 0
    BUSINESS = 1


class TicketType(IntEnum):
    """Ticket rows of the booking form, valued by the site's letter code"""

    ADULT = ord('F')
    CHILD = ord('H')
    DISABLED = ord('W')
    ELDER = ord('E')
    COLLEGE = ord('P')

    @property
    def code(self) -> str:
        return chr(self.value)

    def amount(self, count: int) -> str:
        """Form value of a ticket row, e.g. 2F for two adults"""
        return f'{count}{self.code}'


@dataclass(frozen=True)
class BookingRequest:
    personal_id: str
    date: str
    time_id: int
    time_code: str
    from_station: int
    to_station: int
    adult_cnt: int = 1
    student_cnt: int = 0
    seat_prefer: SeatPreference = SeatPreference.NONE
    class_type: ClassType = ClassType.STANDARD
    use_membership: bool = False

    @property
    def passenger_count(self) -> int:
        return self.adult_cnt + self.student_cnt

    @property
    def ticket_amounts(self) -> Tuple[str, ...]:
        """Values of ticketPanel rows 0..4"""
        counts = {
            TicketType.ADULT: self.adult_cnt,
            TicketType.COLLEGE: self.student_cnt,
        }
        return tuple(ticket.amount(counts.get(ticket, 0)) for ticket in TicketType)


@dataclass(frozen=True)
class Train:
    code: str
    departure: str
    arrival: str
    travel_time: str
    form_value: str
    discounts: Tuple[str, ...] = ()

    @property
    def minutes(self) -> int:
        hours, _, minutes = self.travel_time.partition(':')
        try:
            return int(hours) * 60 + int(minutes)
        except ValueError:
            return 24 * 60

    def __str__(self):
        discount = f" ({', '.join(self.discounts)})" if self.discounts else ''
        return f'{self.code:>4} {self.departure:>5}~{self.arrival} {self.travel_time:>5}{discount}'


@dataclass
class BookingResult:
    pnr: str
    price: str = ''
    payment_deadline: str = ''
    date: str = ''
    train_no: str = ''
    departure_time: str = ''
    arrival_time: str = ''
    from_station: str = ''
    to_station: str = ''
    car_type: str = ''
    passengers: str = ''
    seats: List[str] = field(default_factory=list)

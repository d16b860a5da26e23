"""
This module is to collect booking parameters from flags, config and prompts.
"""
from __future__ import annotations
import logging
import re
from datetime import date, datetime
from typing import Callable, Optional, Tuple

from thsr_booking.errors import InputError
from thsr_booking.models import BookingRequest, ClassType, SeatPreference
from thsr_booking.schema import StationTable, TimeTable, station_lines, time_table_lines

logger = logging.getLogger(__name__)

DATE_FORMAT = '%Y/%m/%d'

DEFAULTS = {
    'start-station': 2,
    'dest-station': 12,
    'time': 10,
    'adult-cnt': 1,
    'student-cnt': 0,
}


def parse_date(text: str) -> str:
    """Parse YYYY/M/D (month and day optionally zero padded) to YYYY/MM/DD"""

    match = re.fullmatch(r'(\d{4})/(\d{1,2})/(\d{1,2})', str(text).strip())
    if not match:
        raise ValueError(f"Invalid date format, expected YYYY/MM/DD: {text}")

    year, month, day = (int(i) for i in match.groups())
    try:
        return date(year, month, day).strftime(DATE_FORMAT)
    except ValueError as error:
        raise ValueError(f"Invalid date: {text} ({error})") from error


def parse_bool(text) -> bool:
    if isinstance(text, bool):
        return text

    value = str(text).strip().lower()
    if value in ('true', 'yes', 'y', '1'):
        return True
    if value in ('false', 'no', 'n', '0'):
        return False
    raise ValueError(f"Expected true or false: {text}")


def parse_int(text, low: int, high: int, name: str) -> int:
    if isinstance(text, int):
        value = int(text)
    else:
        try:
            value = int(str(text).strip())
        except ValueError as error:
            raise ValueError(f"{name} must be a number: {text}") from error

    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}: {value}")
    return value


class FieldParser:
    """Validate and convert the value of one booking field"""

    def __init__(self, stations: StationTable, time_table: TimeTable, max_per_type: int = 10):
        self.stations = stations
        self.time_table = time_table
        self.max_per_type = max_per_type

    def __call__(self, name: str, value):
        if name == 'personal-id':
            value = str(value).strip().upper()
            if not value:
                raise ValueError("Personal ID should not be empty")
            return value
        if name == 'date':
            return parse_date(value)
        if name == 'time':
            return parse_int(value, 1, len(self.time_table), 'Time id')
        if name in ('from', 'to'):
            return self.stations.get(value).id
        if name in ('adult-cnt', 'student-cnt'):
            return parse_int(value, 0, self.max_per_type, 'Ticket number')
        if name == 'seat-prefer':
            return SeatPreference(parse_int(value, 0, 2, 'Seat preference'))
        if name == 'class-type':
            return ClassType(parse_int(value, 0, 1, 'Class type'))
        if name == 'use-membership':
            return parse_bool(value)
        raise KeyError(name)

    def parse_fields(self, fields: dict) -> dict:
        """Convert the fields given by flags or config, None stays None"""

        parsed = {}
        for name, value in fields.items():
            if value is None:
                parsed[name] = None
                continue
            try:
                parsed[name] = self(name, value)
            except (ValueError, InputError) as error:
                raise InputError(f"Invalid {name}: {error}") from error
        return parsed


def ask(question: str, default=None, convert: Callable = str):
    """Ask until convert accepts the answer, empty answer takes the default"""

    hint = f" (default: {default})" if default is not None else ''
    while True:
        text = input(f"{question}{hint}: ").strip()
        if not text:
            if default is None:
                logger.warning("Input should not be empty!")
                continue
            text = str(default)
        try:
            return convert(text)
        except (ValueError, InputError) as error:
            logger.warning("Invalid input: %s", error)


def check_date_range(value: str, date_range: Optional[Tuple[str, str]]) -> str:
    if date_range and not date_range[0] <= value <= date_range[1]:
        raise InputError(
            f"Date must be between {date_range[0]} and {date_range[1]}: {value}")
    return value


def collect_request(
        fields: dict,
        stations: StationTable,
        time_table: TimeTable,
        date_range: Optional[Tuple[str, str]] = None,
        max_ticket_num: int = 10,
        max_per_type: int = 10,
        defaults: dict = None) -> BookingRequest:
    """Build the booking request, prompting for each missing field"""

    parse = FieldParser(stations, time_table, max_per_type)
    values = parse.parse_fields(fields)
    defaults = {**DEFAULTS, **(defaults or {})}

    if values.get('from') is None:
        def convert_start(text):
            station = parse('from', text)
            if station == values.get('to'):
                raise InputError("Start station must differ from destination")
            return station

        logger.info("\nSelect start station:")
        for line in station_lines(stations):
            logger.info(line)
        values['from'] = ask('start station', defaults['start-station'], convert_start)

    if values.get('to') is None:
        def convert_dest(text):
            station = parse('to', text)
            if station == values['from']:
                raise InputError("Destination must differ from start station")
            return station

        logger.info("\nSelect destination station:")
        for line in station_lines(stations):
            logger.info(line)
        values['to'] = ask('destination station', defaults['dest-station'], convert_dest)

    if values['from'] == values['to']:
        raise InputError("Start and destination station must differ")

    if values.get('date') is None:
        default_date = date_range[1] if date_range else datetime.now().strftime(DATE_FORMAT)
        question = 'outbound date'
        if date_range:
            question = f'outbound date between {date_range[0]} and {date_range[1]}'
        values['date'] = ask(
            question, default_date,
            lambda text: check_date_range(parse('date', text), date_range))
    else:
        check_date_range(values['date'], date_range)

    if values.get('time') is None:
        logger.info("\nSelect outbound time:")
        for line in time_table_lines(time_table):
            logger.info(line)
        values['time'] = ask('outbound time', defaults['time'], lambda text: parse('time', text))

    adult_cnt, student_cnt = values.get('adult-cnt'), values.get('student-cnt')
    if adult_cnt is None and student_cnt is None:
        adult_cnt = ask(
            f'number of adult tickets (0~{parse.max_per_type})', defaults['adult-cnt'],
            lambda text: parse('adult-cnt', text))

        def convert_student(text):
            count = parse('student-cnt', text)
            if not 1 <= adult_cnt + count <= max_ticket_num:
                raise InputError(f"Total tickets must be between 1 and {max_ticket_num}")
            return count

        student_cnt = ask(
            f'number of college student tickets (0~{parse.max_per_type})',
            defaults['student-cnt'], convert_student)
    adult_cnt = adult_cnt or 0
    student_cnt = student_cnt or 0
    if not 1 <= adult_cnt + student_cnt <= max_ticket_num:
        raise InputError(f"Total tickets must be between 1 and {max_ticket_num}")

    if values.get('seat-prefer') is None:
        values['seat-prefer'] = ask(
            'seat preference (0: any, 1: window, 2: aisle)', 0,
            lambda text: parse('seat-prefer', text))

    if values.get('class-type') is None:
        values['class-type'] = ask(
            'class type (0: standard, 1: business)', 0,
            lambda text: parse('class-type', text))

    if values.get('personal-id') is None:
        values['personal-id'] = ask('\nInput personal ID', None, lambda text: parse('personal-id', text))

    if values.get('use-membership') is None:
        values['use-membership'] = ask(
            'use membership (y/n)', 'n', lambda text: parse('use-membership', text))

    return BookingRequest(
        personal_id=values['personal-id'],
        date=values['date'],
        time_id=values['time'],
        time_code=time_table.code(values['time']),
        from_station=values['from'],
        to_station=values['to'],
        adult_cnt=adult_cnt,
        student_cnt=student_cnt,
        seat_prefer=SeatPreference(values['seat-prefer']),
        class_type=ClassType(values['class-type']),
        use_membership=values['use-membership'],
    )

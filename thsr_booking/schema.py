"""
This module is for the station and time table reference data.
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from thsr_booking.errors import InputError


@dataclass(frozen=True)
class Station:
    id: int
    name: str
    name_zh: str

    def __str__(self):
        return f'{self.name} ({self.name_zh})' if self.name_zh else self.name


class StationTable:
    """Stations ordered by their booking site id"""

    def __init__(self, stations: List[Station]):
        self.stations = sorted(stations, key=lambda station: station.id)

    @classmethod
    def from_config(cls, config: dict) -> StationTable:
        translation = {name: zh for zh, name in config.get('station-translation', {}).items()}
        return cls([
            Station(id=int(station_id), name=name, name_zh=translation.get(name, ''))
            for name, station_id in config['station'].items()
        ])

    def __iter__(self) -> Iterator[Station]:
        return iter(self.stations)

    def __len__(self):
        return len(self.stations)

    def get(self, value) -> Station:
        """Get station by id or by English/Chinese name"""

        if isinstance(value, int) or str(value).strip().isdigit():
            station_id = int(value)
            for station in self.stations:
                if station.id == station_id:
                    return station
            raise InputError(
                f"Station id must be between 1 and {len(self.stations)}: {value}")

        station_name = str(value).strip()
        if re.search(r'[a-zA-Z]+', station_name):
            station_name = station_name.lower()
            for station in self.stations:
                if station.name.lower() == station_name:
                    return station
        else:
            station_name = station_name.replace('臺', '台')
            for station in self.stations:
                if station.name_zh == station_name:
                    return station

        raise InputError(f"Station not found: {value}")


def format_time(t_str: str) -> str:
    """Convert a site time code such as 1000A or 130P to HH:MM"""

    t_int = int(t_str[:-1])
    if t_str[-1] == 'A' and (t_int // 100) == 12:
        t_int %= 1200
    elif t_int != 1230 and t_str[-1] == 'P':
        t_int += 1200

    t_str = f'{t_int:04d}'
    return f'{t_str[:-2]}:{t_str[-2:]}'


class TimeTable:
    """Departure time slots, ids start from 1"""

    def __init__(self, codes: List[str]):
        self.codes = list(codes)

    @classmethod
    def from_config(cls, config: dict) -> TimeTable:
        return cls(config['available-timetable'])

    def __iter__(self) -> Iterator[Tuple[int, str, str]]:
        for idx, code in enumerate(self.codes, start=1):
            yield idx, code, format_time(code)

    def __len__(self):
        return len(self.codes)

    def code(self, time_id: int) -> str:
        if not 1 <= time_id <= len(self.codes):
            raise InputError(
                f"Time id must be between 1 and {len(self.codes)}: {time_id}")
        return self.codes[time_id - 1]

    def label(self, time_id: int) -> str:
        return format_time(self.code(time_id))


def station_lines(stations: StationTable) -> List[str]:
    return [f'{station.id}: {station}' for station in stations]


def time_table_lines(time_table: TimeTable) -> List[str]:
    return [f'{idx}. {label}' for idx, _, label in time_table]

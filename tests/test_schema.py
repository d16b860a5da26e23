import pytest

from thsr_booking.errors import InputError
from thsr_booking.schema import format_time, station_lines, time_table_lines


@pytest.mark.parametrize('code, label', [
    ('1201A', '00:01'),
    ('1230A', '00:30'),
    ('600A', '06:00'),
    ('1130A', '11:30'),
    ('1200N', '12:00'),
    ('1230P', '12:30'),
    ('100P', '13:00'),
    ('1130P', '23:30'),
])
def test_format_time(code, label):
    assert format_time(code) == label


def test_time_table(time_table):
    assert len(time_table) == 38
    assert time_table.code(1) == '1201A'
    assert time_table.code(10) == '930A'
    assert time_table.label(38) == '23:30'
    with pytest.raises(InputError):
        time_table.code(0)
    with pytest.raises(InputError):
        time_table.code(39)


def test_time_table_lines(time_table):
    lines = time_table_lines(time_table)

    assert len(lines) == 38
    assert lines[0] == '1. 00:01'
    assert lines[14] == '15. 12:00'
    assert lines[-1] == '38. 23:30'


def test_station_table(stations):
    assert len(stations) == 12
    assert [station.id for station in stations] == list(range(1, 13))
    assert stations.get(1).name == 'Nangang'
    assert stations.get('12').name == 'Zuouing'
    assert stations.get('taichung').id == 7
    assert stations.get('臺北').id == 2
    assert str(stations.get('Tainan')) == 'Tainan (台南)'


@pytest.mark.parametrize('value', [0, 13, 'Kaohsiung', '高雄'])
def test_unknown_station(stations, value):
    with pytest.raises(InputError):
        stations.get(value)


def test_station_lines(stations):
    lines = station_lines(stations)

    assert lines[0] == '1: Nangang (南港)'
    assert lines[1] == '2: Taipei (台北)'
    assert lines[-1] == '12: Zuouing (左營)'

import pytest

from thsr_booking.errors import InputError
from thsr_booking.models import ClassType, SeatPreference
from thsr_booking.prompts import FieldParser, collect_request, parse_bool, parse_date


@pytest.mark.parametrize('text', ['2025/01/01', '2025/1/01', '2025/01/1', '2025/1/1'])
def test_parse_date_accepts_optional_padding(text):
    assert parse_date(text) == '2025/01/01'


@pytest.mark.parametrize('text', [
    '2025-01-01',
    '2025/01',
    '25/1/1',
    '2025/13/01',
    '2025/2/30',
    '2025/0/10',
    '2025/1/1/1',
    'abcd/ef/gh',
    '',
])
def test_parse_date_rejects_malformed(text):
    with pytest.raises(ValueError):
        parse_date(text)


def test_parse_bool():
    assert parse_bool('true') is True
    assert parse_bool('Y') is True
    assert parse_bool('false') is False
    assert parse_bool(False) is False
    with pytest.raises(ValueError):
        parse_bool('maybe')


def test_field_parser(stations, time_table):
    parse = FieldParser(stations, time_table)

    assert parse('from', 'Taipei') == 2
    assert parse('to', '左營') == 12
    assert parse('time', '38') == 38
    assert parse('seat-prefer', 2) is SeatPreference.AISLE
    assert parse('class-type', '1') is ClassType.BUSINESS
    assert parse('personal-id', ' a123456789 ') == 'A123456789'

    with pytest.raises(ValueError):
        parse('time', '39')
    with pytest.raises(ValueError):
        parse('adult-cnt', '11')
    with pytest.raises(ValueError):
        parse('seat-prefer', 3)
    with pytest.raises(InputError):
        parse('from', '13')


def test_all_fields_given_skips_prompts(all_fields, stations, time_table, answers):
    questions = answers()

    request = collect_request(all_fields, stations, time_table, ('2025/06/01', '2025/06/29'))

    assert questions == []
    assert request.personal_id == 'A123456789'
    assert request.date == '2025/06/29'
    assert request.time_code == '930A'
    assert request.from_station == 2
    assert request.to_station == 12
    assert request.seat_prefer is SeatPreference.WINDOW
    assert request.class_type is ClassType.STANDARD
    assert request.use_membership is False


@pytest.mark.parametrize('name, answer, expected', [
    ('time', '12', ('time_id', 12)),
    ('from', '1', ('from_station', 1)),
    ('to', '11', ('to_station', 11)),
    ('date', '2025/6/3', ('date', '2025/06/03')),
    ('seat-prefer', '2', ('seat_prefer', SeatPreference.AISLE)),
    ('class-type', '1', ('class_type', ClassType.BUSINESS)),
    ('personal-id', 'b987654321', ('personal_id', 'B987654321')),
    ('use-membership', 'y', ('use_membership', True)),
])
def test_missing_field_prompts_for_that_field_only(
        name, answer, expected, all_fields, stations, time_table, answers):
    all_fields[name] = None
    questions = answers(answer)

    request = collect_request(all_fields, stations, time_table, ('2025/06/01', '2025/06/29'))

    assert len(questions) == 1
    assert getattr(request, expected[0]) == expected[1]


def test_empty_answer_takes_default(all_fields, stations, time_table, answers):
    all_fields.update({'time': None, 'date': None, 'from': None})
    questions = answers('', '', '')

    request = collect_request(all_fields, stations, time_table, ('2025/06/01', '2025/06/29'))

    assert len(questions) == 3
    assert request.from_station == 2
    assert request.date == '2025/06/29'
    assert request.time_id == 10
    assert request.time_code == '930A'


def test_invalid_answer_reprompts(all_fields, stations, time_table, answers):
    all_fields['date'] = None
    questions = answers('2025-06-03', '2025/07/01', '2025/6/3')

    request = collect_request(all_fields, stations, time_table, ('2025/06/01', '2025/06/29'))

    assert len(questions) == 3
    assert request.date == '2025/06/03'


def test_ticket_counts(all_fields, stations, time_table, answers):
    all_fields.update({'adult-cnt': None, 'student-cnt': None})
    questions = answers('2', '1')

    request = collect_request(all_fields, stations, time_table)

    assert len(questions) == 2
    assert request.passenger_count == 3
    assert request.ticket_amounts == ('2F', '0H', '0W', '0E', '1P')


def test_one_ticket_count_given_other_is_zero(all_fields, stations, time_table, answers):
    all_fields.update({'adult-cnt': None, 'student-cnt': 2})
    questions = answers()

    request = collect_request(all_fields, stations, time_table)

    assert questions == []
    assert request.ticket_amounts == ('0F', '0H', '0W', '0E', '2P')


def test_flag_errors(all_fields, stations, time_table, answers):
    answers()

    with pytest.raises(InputError):
        collect_request({**all_fields, 'to': 2}, stations, time_table)
    with pytest.raises(InputError):
        collect_request({**all_fields, 'adult-cnt': 0, 'student-cnt': 0}, stations, time_table)
    with pytest.raises(InputError):
        collect_request({**all_fields, 'adult-cnt': 6, 'student-cnt': 5}, stations, time_table)
    with pytest.raises(InputError):
        collect_request(all_fields, stations, time_table, ('2025/07/01', '2025/07/29'))


def test_start_station_must_differ_from_given_destination(all_fields, stations, time_table, answers):
    all_fields.update({'from': None, 'to': 2})
    questions = answers('', '1')

    request = collect_request(all_fields, stations, time_table)

    assert len(questions) == 2
    assert request.from_station == 1
    assert request.to_station == 2


def test_ticket_limit_per_type(all_fields, stations, time_table, answers):
    all_fields.update({'adult-cnt': None, 'student-cnt': None})
    questions = answers('3', '2', '0')

    request = collect_request(all_fields, stations, time_table, max_per_type=2)

    assert len(questions) == 3
    assert request.adult_cnt == 2
    with pytest.raises(InputError):
        collect_request({**all_fields, 'adult-cnt': 3}, stations, time_table, max_per_type=2)

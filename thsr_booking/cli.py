"""
This module is to book tickets of Taiwan High Speed Rail from command line.
"""
import os
import sys
import argparse
import logging
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from thsr_booking.configs.config import (
    Config, FIELD_NAMES, app_name, directories, filenames, load_site_config, __version__)
from thsr_booking.errors import THSRBookingError
from thsr_booking.prompts import FieldParser
from thsr_booking.schema import StationTable, TimeTable, station_lines, time_table_lines
from thsr_booking.services import THSRC


def field_type(parse: FieldParser, name: str):
    """argparse type of a booking field"""

    def convert(value):
        try:
            return parse(name, value)
        except (ValueError, THSRBookingError) as error:
            raise argparse.ArgumentTypeError(str(error)) from error

    convert.__name__ = name
    return convert


def build_parser(parse: FieldParser) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=app_name,
        description="Book Taiwan High Speed Rail tickets. "
                    "Run without flags to be guided through the booking process.",
        add_help=False)
    parser.add_argument('-i',
                        '--personal-id',
                        dest='personal_id',
                        metavar='ID',
                        type=field_type(parse, 'personal-id'),
                        help="personal ID")
    parser.add_argument('-d',
                        '--date',
                        dest='date',
                        metavar='DATE',
                        type=field_type(parse, 'date'),
                        help="departure date (YYYY/MM/DD)")
    parser.add_argument('-T',
                        '--time',
                        dest='time',
                        metavar='TIME_ID',
                        type=field_type(parse, 'time'),
                        help="time ID of the departure time, see --list-time-table")
    parser.add_argument('-f',
                        '--from',
                        dest='from_station',
                        metavar='STATION_ID',
                        type=field_type(parse, 'from'),
                        help="departure station ID or name, see --list-station")
    parser.add_argument('-t',
                        '--to',
                        dest='to_station',
                        metavar='STATION_ID',
                        type=field_type(parse, 'to'),
                        help="arrival station ID or name, see --list-station")
    parser.add_argument('-a',
                        '--adult-cnt',
                        dest='adult_cnt',
                        metavar='NUMBER',
                        type=field_type(parse, 'adult-cnt'),
                        help="number of adults")
    parser.add_argument('-s',
                        '--student-cnt',
                        dest='student_cnt',
                        metavar='NUMBER',
                        type=field_type(parse, 'student-cnt'),
                        help="number of college students")
    parser.add_argument('-p',
                        '--seat-prefer',
                        dest='seat_prefer',
                        type=int,
                        choices=[0, 1, 2],
                        help="seat preference. 0: None, 1: Window, 2: Aisle")
    parser.add_argument('-c',
                        '--class-type',
                        dest='class_type',
                        type=int,
                        choices=[0, 1],
                        help="class type. 0: Standard, 1: Business")
    parser.add_argument('-m',
                        '--use-membership',
                        dest='use_membership',
                        metavar='{true,false}',
                        type=field_type(parse, 'use-membership'),
                        help="whether to use personal ID as membership")
    parser.add_argument('--list-station',
                        dest='list_station',
                        action='store_true',
                        help="list available stations")
    parser.add_argument('--list-time-table',
                        dest='list_time_table',
                        action='store_true',
                        help="list available times")
    parser.add_argument('-o',
                        '--ocr',
                        dest='ocr',
                        action='store_true',
                        help="recognize the security code automatically")
    parser.add_argument('-A',
                        '--auto',
                        dest='auto',
                        action='store_true',
                        help="auto pick the train")
    parser.add_argument('--proxy',
                        dest='proxy',
                        help="proxy")
    parser.add_argument('--config',
                        dest='config_file',
                        help="custom config file path (default: user_config.toml)")
    parser.add_argument('--debug',
                        action='store_true',
                        help="enable debug logging")
    parser.add_argument('-h',
                        '--help',
                        action='help',
                        default=argparse.SUPPRESS,
                        help="show this help message and exit")
    parser.add_argument('-v',
                        '--version',
                        action='version',
                        version=f'{app_name} {__version__}',
                        help="app's version")
    return parser


def setup_logging(debug: bool) -> None:
    if debug:
        os.makedirs(directories.logs, exist_ok=True)
        log_time = datetime.now().strftime('%Y-%m-%d_%H-%M-%S')
        log_file_path = str(filenames.log).format(
            app_name=app_name, log_time=log_time)
        logging.basicConfig(
            format='%(asctime)s - %(name)s - %(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
            level=logging.DEBUG,
            handlers=[
                logging.FileHandler(log_file_path, encoding='utf-8'),
                logging.StreamHandler()
            ]
        )
    else:
        logging.basicConfig(
            format='%(message)s',
            level=logging.INFO,
        )


def merge_fields(args: argparse.Namespace, config: Config, parse: FieldParser) -> dict:
    """Flags first, then [fields] of the user config"""

    flags = {
        'personal-id': args.personal_id,
        'date': args.date,
        'time': args.time,
        'from': args.from_station,
        'to': args.to_station,
        'adult-cnt': args.adult_cnt,
        'student-cnt': args.student_cnt,
        'seat-prefer': args.seat_prefer,
        'class-type': args.class_type,
        'use-membership': args.use_membership,
    }
    from_config = parse.parse_fields(
        {name: value for name, value in config.fields.items() if flags[name] is None})
    return {name: flags[name] if flags[name] is not None else from_config.get(name)
            for name in FIELD_NAMES}


def main(argv=None) -> None:
    """args command"""

    load_dotenv(dotenv_path=Path.cwd() / '.env', override=True)

    site_config = load_site_config()
    stations = StationTable.from_config(site_config)
    time_table = TimeTable.from_config(site_config)
    parse = FieldParser(stations, time_table, site_config.get('max-ticket-per-type', 10))

    args = build_parser(parse).parse_args(argv)

    if args.list_time_table or args.list_station:
        if args.list_time_table:
            print('\n'.join(time_table_lines(time_table)))
        if args.list_station:
            print('\n'.join(station_lines(stations)))
        return

    setup_logging(args.debug)
    log = logging.getLogger(THSRC.__module__)
    log.setLevel(logging.DEBUG if args.debug else logging.INFO)

    start = datetime.now()
    try:
        if args.config_file:
            config_path = Path(args.config_file)
            log.info("Using config file: %s", config_path)
        else:
            config_path = filenames.user_config
        config = Config.from_toml(config_path)
        if args.ocr:
            config.captcha['mode'] = 'ocr'

        args.log = log
        args.config = site_config
        args.user_config = config
        args.fields = merge_fields(args, config, parse)

        with THSRC(args) as service:
            service.main()
    except THSRBookingError as error:
        log.error("\nError: %s", error)
        sys.exit(1)
    except KeyboardInterrupt:
        log.info("\nAborted.")
        sys.exit(130)
    except EOFError:
        # stdin closed while a question was pending
        log.error("\nAborted: no more input.")
        sys.exit(1)

    log.debug("\n%s took %.3f seconds", app_name, float(
        (datetime.now() - start).total_seconds()))


if __name__ == "__main__":
    main()

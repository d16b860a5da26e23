"""
This module is to buy tickets form THSRC
"""

from __future__ import annotations
import html
import random
import re
from typing import List, Optional, Tuple
from bs4 import BeautifulSoup
import pyperclip
from thsr_booking.errors import BookingError, SiteError
from thsr_booking.models import BookingRequest, BookingResult, Train
from thsr_booking.prompts import FieldParser, ask, collect_request, parse_date, parse_int
from thsr_booking.schema import StationTable, TimeTable
from thsr_booking.services.base_service import BaseService
from thsr_booking.services.captcha import CaptchaSolver
from thsr_booking.utils.validate import check_roc_id

MEMBER_RADIO = 'TicketMemberSystemInputPanel:TakerMemberSystemDataView:memberSystemRadioGroup'


class THSRC(BaseService):
    """
    Service code for THSRC (https://irs.thsrc.com.tw/IMINT/).
    """

    def __init__(self, args):
        super().__init__(args)
        self.fields = args.fields
        self.stations = StationTable.from_config(self.config)
        self.time_table = TimeTable.from_config(self.config)
        self.max_per_type = self.config.get('max-ticket-per-type', 10)
        self.captcha = CaptchaSolver(
            self.session,
            self.config,
            mode=self.user_config.captcha['mode'],
            gemini_model=self.user_config.captcha['gemini-model'],
            logger=self.logger,
        )
        self.booking: Optional[BookingRequest] = None

    def get_error_messages(self, html_page: str) -> List[str]:
        """Get error messages of a submitted form"""
        page = BeautifulSoup(html_page, 'html.parser')
        error_messages = []
        for error_text in page.select('span.feedbackPanelERROR'):
            error_message = error_text.get_text(strip=True)
            if error_message:
                self.logger.debug('Error: %s', error_message)
                error_messages.append(error_message)
        return error_messages

    def get_jsessionid(self) -> Tuple[str, BeautifulSoup]:
        """Open booking page and get jsessionid"""
        self.logger.info("\nRequesting booking page...")

        # Start from a new session
        self.session.cookies.delete('JSESSIONID')
        self.session.cookies.set('cookieAccepted', 'true', domain='irs.thsrc.com.tw')
        self.session.cookies.set('isShowCookiePolicy', 'N', domain='irs.thsrc.com.tw')

        res = self.request('GET', self.config['page']['reservation'], max_retries=3)
        jsessionid = res.cookies.get('JSESSIONID') or self.session.cookies.get('JSESSIONID')
        if not jsessionid:
            raise SiteError("Booking site did not return a session id")
        self.logger.debug('Session ID: %s', jsessionid)

        return jsessionid, BeautifulSoup(res.text, 'html.parser')

    def get_captcha_url(self, page: BeautifulSoup) -> str:
        captcha_img = page.find('img', id='BookingS1Form_homeCaptcha_passCode') or \
            page.find('img', class_='captcha-img')
        if not captcha_img or not captcha_img.get('src'):
            raise SiteError("Captcha image not found on booking page")
        return self.config['page']['base'] + captcha_img['src']

    def get_date_range(self, page: BeautifulSoup) -> Optional[Tuple[str, str]]:
        """Bookable dates of the booking page, e.g. ('2025/06/01', '2025/06/29')"""
        date_input = page.find('input', id='toTimeInputField')
        if not date_input or not date_input.get('date') or not date_input.get('limit'):
            self.logger.debug("Bookable date range not found")
            return None
        try:
            return parse_date(date_input['date']), parse_date(date_input['limit'])
        except ValueError as error:
            raise SiteError(f"Unexpected bookable date range: {error}") from error

    def get_security_code(self, captcha_url: str) -> str:
        res = self.request('GET', captcha_url)
        return self.captcha.solve(res.content)

    def update_captcha(self, jsessionid: str) -> str:
        """Get a new captcha url"""
        self.logger.info("Update captcha")

        res = self.request('GET', self.config['api']['update_captcha'].format(
            jsessionid=jsessionid, random_value=random.random()))

        match = re.search('src="(.+?)"', res.text)
        if not match:
            raise SiteError("Captcha image not found in captcha update")
        return self.config['page']['base'] + html.unescape(match.group(1))

    def booking_form(self, jsessionid: str, page: BeautifulSoup) -> BeautifulSoup:
        """1. Fill booking form"""

        booking_method = page.find('input', attrs={'name': 'bookingMethod', 'checked': True})
        trip_type = page.select_one('#BookingS1Form_tripCon_typesoftrip option[selected]')

        booking = self.booking
        data = {
            'BookingS1Form:hf:0': '',
            'tripCon:typesoftrip': trip_type['value'] if trip_type else '0',
            'trainCon:trainRadioGroup': str(int(booking.class_type)),
            'seatCon:seatRadioGroup': str(int(booking.seat_prefer)),
            'bookingMethod': booking_method['value'] if booking_method else 'radio31',
            'selectStartStation': str(booking.from_station),
            'selectDestinationStation': str(booking.to_station),
            'toTimeInputField': booking.date,
            'backTimeInputField': booking.date,
            'toTimeTable': booking.time_code,
            'toTrainIDInputField': '',
            'backTimeTable': '',
            'backTrainIDInputField': '',
            'trainTypeContainer:typesoftrain': '0',
            'SubmitButton': '開始查詢',
            'portalTag': 'false',
        }
        for row, amount in enumerate(booking.ticket_amounts):
            data[f'ticketPanel:rows:{row}:ticketAmount'] = amount

        headers = {'Referer': self.config['page']['referer']}
        form_url = self.config['api']['search'].format(jsessionid=jsessionid)
        captcha_url = self.get_captcha_url(page)
        max_retries = self.user_config.captcha['retries']

        for attempt in range(1, max_retries + 1):
            data['homeCaptcha:securityCode'] = self.get_security_code(captcha_url)

            self.logger.info("Searching trains...")
            res = self.request('POST', form_url, headers=headers, data=data)
            error_messages = self.get_error_messages(res.text)
            if not error_messages:
                return BeautifulSoup(res.text, 'html.parser')

            # 檢測碼 = security code
            if any('檢測碼' in message for message in error_messages) and attempt < max_retries:
                self.logger.info("Wrong security code, retry (%s/%s)", attempt, max_retries)
                captcha_url = self.update_captcha(jsessionid)
                continue

            raise BookingError(error_messages)

    def get_trains(self, page: BeautifulSoup) -> List[Train]:
        trains = []
        for train in page.find_all('input', {'name': 'TrainQueryDataViewPanel:TrainGroup'}):
            try:
                code = train['querycode']
                departure = train['querydeparture']
                arrival = train['queryarrival']
                travel_time = train['queryestimatedtime']
                form_value = train['value']
            except KeyError as error:
                raise SiteError(f"Unexpected train list, missing {error}") from error

            discounts = []
            item = train.find_parent('label')
            if item:
                for selector in ('p.early-bird span', 'p.student span'):
                    tag = item.select_one(selector)
                    if tag and tag.get_text(strip=True):
                        discounts.append(tag.get_text(strip=True))

            trains.append(Train(
                code=code,
                departure=departure,
                arrival=arrival,
                travel_time=travel_time,
                form_value=form_value,
                discounts=tuple(discounts),
            ))
        return trains

    def select_train(self, trains: List[Train], default_value: int = 1) -> Train:
        self.logger.info('\nSelect train:')
        for idx, train in enumerate(trains, start=1):
            self.logger.info('%2d. %s', idx, train)

        if self.auto:
            candidates = [train for train in trains if train.discounts] or trains
            train = min(candidates, key=lambda train: train.minutes)
            self.logger.info("\nAuto pick train: %s", train)
            return train

        index = ask('train', default_value, lambda text: parse_int(text, 1, len(trains), 'Train'))
        return trains[index - 1]

    def confirm_train(self, page: BeautifulSoup) -> BeautifulSoup:
        """2. Confirm train"""

        for alert in page.select('ul.alert-body > li'):
            self.logger.info(alert.get_text(strip=True))

        trains = self.get_trains(page)
        if not trains:
            raise BookingError(
                f"No train available on {self.booking.date} after "
                f"{self.time_table.label(self.booking.time_id)}")

        train = self.select_train(trains, default_value=self.config.get('defaults', {}).get('train', 1))

        data = {
            'BookingS2Form:hf:0': '',
            'TrainQueryDataViewPanel:TrainGroup': train.form_value,
            'SubmitButton': 'Confirm',
        }

        res = self.request('POST', self.config['api']['confirm_train'],
                           headers={'Referer': self.config['page']['referer']}, data=data)
        error_messages = self.get_error_messages(res.text)
        if error_messages:
            raise BookingError(error_messages)
        return BeautifulSoup(res.text, 'html.parser')

    def get_passenger_data(self, page: BeautifulSoup) -> dict:
        """ID numbers of each passenger, asked by the site for discounted tickets"""

        id_inputs = page.find_all('input', attrs={'name': re.compile(r'passengerDataIdNumber$')})
        if not id_inputs:
            return {}

        self.logger.info("\nPassenger ID numbers are required for discounted tickets")
        parse = FieldParser(self.stations, self.time_table, self.max_per_type)
        data = {}
        for idx, id_input in enumerate(id_inputs):
            prefix = id_input['name'].rsplit(':', 1)[0]
            if idx == 0:
                passenger_id = self.booking.personal_id
            else:
                passenger_id = ask(
                    f"Input ID number of passenger {idx + 1} (ID change is not allowed after input!)",
                    None, lambda text: parse('personal-id', text))

            type_input = page.find('input', attrs={'name': f'{prefix}:passengerDataTypeName'})
            data.update({
                f'{prefix}:passengerDataLastName': '',
                f'{prefix}:passengerDataFirstName': '',
                f'{prefix}:passengerDataTypeName': type_input.get('value', '') if type_input else '',
                f'{prefix}:passengerDataIdNumber': passenger_id,
                f'{prefix}:passengerDataInputChoice': '0' if check_roc_id(passenger_id) else '1',
            })
        return data

    def confirm_ticket(self, page: BeautifulSoup) -> BeautifulSoup:
        """3. Confirm ticket"""

        booking = self.booking
        member_radio = page.select_one(
            '#memberSystemRadio1' if booking.use_membership else '#memberSystemRadio3')
        if not member_radio or not member_radio.get('value'):
            raise SiteError("Membership option not found on ticket page")

        data = {
            'BookingS3FormSP:hf:0': '',
            'diffOver': '1',
            'isSPromotion': '1',
            'passengerCount': str(booking.passenger_count),
            'isGoBackM': '',
            'backHome': '',
            'TgoError': '1',
            'idInputRadio': '0' if check_roc_id(booking.personal_id) else '1',
            'dummyId': booking.personal_id,
            'dummyPhone': '',
            'email': '',
            MEMBER_RADIO: member_radio['value'],
            'agree': 'on',
        }
        if booking.use_membership:
            data[f'{MEMBER_RADIO}:memberShipNumber'] = booking.personal_id
            data[f'{MEMBER_RADIO}:memberSystemShipCheckBox'] = 'on'
        data.update(self.get_passenger_data(page))

        self.logger.info("Booking...")
        res = self.request('POST', self.config['api']['confirm_ticket'],
                           headers={'Referer': self.config['page']['referer']}, data=data)
        error_messages = self.get_error_messages(res.text)
        if error_messages:
            raise BookingError(error_messages)
        return BeautifulSoup(res.text, 'html.parser')

    def get_result(self, page: BeautifulSoup) -> BookingResult:
        """4. Get result"""

        def text(selector: str) -> str:
            tag = page.select_one(selector)
            return tag.get_text(strip=True) if tag else ''

        pnr = text('p.pnr-code span') or text('p.pnr-code')
        if not pnr:
            raise SiteError("Reservation number not found on result page")

        return BookingResult(
            pnr=pnr,
            price=text('#setTrainTotalPriceValue'),
            payment_deadline=text('span.status-unpaid span:nth-child(3)'),
            date=text('span.date span') or text('span.date'),
            train_no=text('#setTrainCode0'),
            departure_time=text('#setTrainDeparture0'),
            arrival_time=text('#setTrainArrival0'),
            from_station=text('p.departure-stn span') or text('p.departure-stn'),
            to_station=text('p.arrival-stn span') or text('p.arrival-stn'),
            car_type=text('p.info-data span'),
            passengers=text('div.uk-accordion-content span'),
            seats=[seat.get_text(strip=True) for seat in page.select('div.seat-label span')],
        )

    def print_result(self, result: BookingResult):
        self.logger.info("\nBooking success!")
        self.logger.info(
            "\nPlease use the following PNR code for payment and picking up the ticket:")
        self.logger.info("PNR Code: %s", result.pnr)
        self.logger.info("Price: %s. Please pay before %s", result.price, result.payment_deadline)
        self.logger.info("-------(Ticket Information)-------")
        self.logger.info("%7s%s", "Date: ", result.date)
        if result.train_no:
            self.logger.info("%7s%s", "Train: ", result.train_no)
        self.logger.info("%7s%s~%s", "Time: ", result.departure_time, result.arrival_time)
        self.logger.info("%7s%s", "From: ", result.from_station)
        self.logger.info("%7s%s", "To: ", result.to_station)
        self.logger.info("Class: %s%s", result.car_type, result.passengers)
        self.logger.info("Seats: %s", ', '.join(result.seats))
        self.logger.info(
            "\nGo to the reservation record to confirm the ticket and pay!\n (%s) ",
            self.config['page']['history'])

        if self.user_config.output['copy-to-clipboard']:
            try:
                pyperclip.copy(result.pnr)
                self.logger.info("\nPNR Code has been copied to clipboard!")
            except pyperclip.PyperclipException as error:
                self.logger.warning("Could not copy PNR Code to clipboard: %s", error)

    def main(self) -> BookingResult:
        """Buy ticket process"""

        jsessionid, booking_page = self.get_jsessionid()
        self.booking = collect_request(
            self.fields,
            self.stations,
            self.time_table,
            date_range=self.get_date_range(booking_page),
            max_ticket_num=self.config.get('max-ticket-num', 10),
            max_per_type=self.max_per_type,
            defaults=self.config.get('defaults'),
        )
        self.logger.debug('Booking request: %s', self.booking)

        train_page = self.booking_form(jsessionid, booking_page)
        ticket_page = self.confirm_train(train_page)
        result_page = self.confirm_ticket(ticket_page)

        result = self.get_result(result_page)
        self.print_result(result)
        return result

import argparse
import logging
from pathlib import Path
from urllib.parse import parse_qs

import httpx
import pytest

from thsr_booking.configs.config import Config, FIELD_NAMES, load_site_config
from thsr_booking.schema import StationTable, TimeTable

PAGES = Path(__file__).parent / 'pages'


def read_page(name: str) -> str:
    return (PAGES / name).read_text(encoding='utf-8')


def form_data(request: httpx.Request) -> dict:
    """Decode an urlencoded form body to a flat dict"""
    return {key: values[0] for key, values in
            parse_qs(request.content.decode('utf-8'), keep_blank_values=True).items()}


class FakeSite:
    """Replays the booking site pages, keeps every request it receives"""

    def __init__(self):
        self.requests = []
        self.search_pages = ['trains.html']
        self.ticket_page = 'ticket.html'
        self.result_page = 'result.html'
        self.confirm_train_page = None
        self.ocr_codes = ['ABCD']

    def posted(self, keyword: str) -> list:
        return [form_data(request) for request in self.requests
                if request.method == 'POST' and keyword in str(request.url)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if request.url.host == 'ocr.holey.cc':
            code = self.ocr_codes.pop(0) if len(self.ocr_codes) > 1 else self.ocr_codes[0]
            return httpx.Response(200, json={'data': code})
        if request.method == 'GET' and 'passCode' in url:
            return httpx.Response(200, content=b'\xff\xd8\xff\xe0captcha', headers={'Content-Type': 'image/jpeg'})
        if request.method == 'GET' and 'reCodeLink' in url:
            return httpx.Response(200, text=(
                '<ajax-response><component id="BookingS1Form_homeCaptcha_passCode">'
                '<img src="/IMINT/?wicket:interface=:0:BookingS1Form:homeCaptcha:passCode::IResourceListener&amp;random=2"/>'
                '</component></ajax-response>'))
        if request.method == 'POST' and 'BookingS1Form' in url:
            page = self.search_pages.pop(0) if len(self.search_pages) > 1 else self.search_pages[0]
            return httpx.Response(200, text=read_page(page))
        if request.method == 'POST' and 'BookingS2Form' in url:
            return httpx.Response(200, text=read_page(self.confirm_train_page or self.ticket_page))
        if request.method == 'POST' and 'BookingS3Form' in url:
            return httpx.Response(200, text=read_page(self.result_page))
        if request.method == 'GET' and request.url.path.startswith('/IMINT'):
            return httpx.Response(
                200, text=read_page('booking.html'),
                headers={'Set-Cookie': 'JSESSIONID=ABC123; Path=/IMINT; HttpOnly'})
        return httpx.Response(404)


@pytest.fixture
def site_config():
    return load_site_config()


@pytest.fixture
def stations(site_config):
    return StationTable.from_config(site_config)


@pytest.fixture
def time_table(site_config):
    return TimeTable.from_config(site_config)


@pytest.fixture
def all_fields():
    return {
        'personal-id': 'A123456789',
        'date': '2025/06/29',
        'time': 10,
        'from': 2,
        'to': 12,
        'adult-cnt': 1,
        'student-cnt': 0,
        'seat-prefer': 1,
        'class-type': 0,
        'use-membership': False,
    }


@pytest.fixture
def fake_site():
    return FakeSite()


@pytest.fixture
def make_args(site_config, fake_site, monkeypatch):
    monkeypatch.delenv('GEMINI_API_KEY', raising=False)

    def make(fields=None, auto=False, mode='ocr', retries=3, clipboard=False):
        user_config = Config(captcha={'mode': mode, 'retries': retries},
                             output={'copy-to-clipboard': clipboard})
        return argparse.Namespace(
            log=logging.getLogger('thsr_booking.test'),
            config=site_config,
            user_config=user_config,
            auto=auto,
            proxy=None,
            fields={name: (fields or {}).get(name) for name in FIELD_NAMES},
            transport=httpx.MockTransport(fake_site.handler),
        )

    return make


@pytest.fixture
def answers(monkeypatch):
    """Feed input() from a list and record the questions"""

    questions = []

    def feed(*values):
        queue = list(values)

        def fake_input(question=''):
            questions.append(question)
            if not queue:
                raise AssertionError(f'Unexpected prompt: {question}')
            return queue.pop(0)

        monkeypatch.setattr('builtins.input', fake_input)
        return questions

    return feed



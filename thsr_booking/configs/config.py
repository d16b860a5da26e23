"""
This module is for default config.
"""
from __future__ import annotations
from pathlib import Path
from thsr_booking.errors import InputError
from thsr_booking.utils.io import load_toml

__version__ = '1.0.0'

app_name = 'thsr_booking'

user_agent = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:137.0) Gecko/20100101 Firefox/137.0'


class directories:
    package_root = Path(__file__).resolve().parent.parent
    configs = package_root / 'configs'
    logs = Path.cwd() / 'logs'


class filenames:
    site_config = directories.configs / 'THSRC.toml'
    user_config = directories.configs / 'user_config.toml'
    log = directories.logs / '{app_name}_{log_time}.log'
    captcha = Path.cwd() / 'tmp_code.jpg'


# Booking parameters that can be given on the command line or in [fields]
FIELD_NAMES = (
    'personal-id',
    'date',
    'time',
    'from',
    'to',
    'adult-cnt',
    'student-cnt',
    'seat-prefer',
    'class-type',
    'use-membership',
)


class Config:
    """User config"""

    def __init__(self, fields: dict = None, captcha: dict = None, output: dict = None):
        self.fields = {name: None for name in FIELD_NAMES}
        for name, value in (fields or {}).items():
            if name not in self.fields:
                raise InputError(f"Unknown field in [fields]: {name}")
            # Empty strings in the toml mean "ask me"
            self.fields[name] = None if value == '' else value

        self.captcha = {
            'mode': 'manual',
            'retries': 3,
            'gemini-model': 'gemini-2.0-flash',
        }
        self.captcha.update(captcha or {})
        if self.captcha['mode'] not in ('manual', 'ocr'):
            raise InputError(f"Unknown captcha mode: {self.captcha['mode']}")
        retries = self.captcha['retries']
        if isinstance(retries, bool) or not isinstance(retries, int) or retries < 1:
            raise InputError(f"Captcha retries must be a positive integer: {retries}")

        self.output = {'copy-to-clipboard': True}
        self.output.update(output or {})
        if not isinstance(self.output['copy-to-clipboard'], bool):
            raise InputError(
                f"copy-to-clipboard must be true or false: {self.output['copy-to-clipboard']}")

    @classmethod
    def from_toml(cls, path) -> Config:
        data = load_toml(path)
        return cls(
            fields=data.get('fields'),
            captcha=data.get('captcha'),
            output=data.get('output'),
        )


def load_site_config() -> dict:
    """Load reference data and urls of the booking site"""
    return load_toml(filenames.site_config)

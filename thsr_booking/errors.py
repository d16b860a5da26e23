"""
This module is for the errors of a booking run.
"""


class THSRBookingError(Exception):
    """Base error, terminal to the current booking run"""


class InputError(THSRBookingError):
    """Invalid booking parameter"""


class SiteError(THSRBookingError):
    """Booking site is unreachable or returned an unexpected page"""


class CaptchaError(THSRBookingError):
    """No security code could be obtained"""


class BookingError(THSRBookingError):
    """Booking site rejected the submission"""

    def __init__(self, messages):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        super().__init__('\n'.join(self.messages))

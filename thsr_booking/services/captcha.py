"""
This module is to resolve the security code of the booking form
"""
from __future__ import annotations
import base64
import logging
import os
import subprocess
import sys
from typing import Optional
import httpx
from thsr_booking.configs.config import filenames
from thsr_booking.errors import CaptchaError
from thsr_booking.prompts import ask

GEMINI_PROMPT = ("Read the 4 characters in this CAPTCHA image. "
                 "Output EXACTLY 4 characters (A-Z, 0-9) ONLY. No spaces, no explanation.")


def clean_code(raw_text: str) -> Optional[str]:
    """Keep the first 4 ascii letters/digits of an OCR answer"""
    code = ''.join(c for c in (raw_text or '') if c.isascii() and c.isalnum()).upper()
    return code[:4] if len(code) >= 4 else None


class CaptchaSolver(object):
    """
    Manual input, or OCR by holey.cc (trained on THSR captcha) and Gemini
    """

    def __init__(self, client: httpx.Client, config: dict, mode: str = 'manual',
                 gemini_model: str = 'gemini-2.0-flash', logger=None):
        self.client = client
        self.config = config
        self.mode = mode
        self.gemini_model = gemini_model
        self.logger = logger or logging.getLogger(__name__)

    def solve(self, image: bytes) -> str:
        if self.mode == 'ocr':
            code = self.recognize(image)
            if code:
                return code
            self.logger.warning("OCR failed, please input the security code manually")
        return self.ask_user(image)

    def recognize(self, image: bytes) -> Optional[str]:
        base64_str = base64.b64encode(image).decode('utf-8')

        holey_result = self._ocr_with_holey(base64_str)
        if holey_result:
            self.logger.info("+ holey.cc: %s", holey_result)

        gemini_result = None
        gemini_api_key = os.getenv('GEMINI_API_KEY')
        if gemini_api_key:
            gemini_result = self._ocr_with_gemini(base64_str, gemini_api_key)
            if gemini_result:
                self.logger.info("+ Gemini: %s", gemini_result)

        if holey_result and gemini_result and holey_result.upper() != gemini_result.upper():
            self.logger.warning(
                "OCR results differ (holey.cc: %s, Gemini: %s)", holey_result, gemini_result)

        final_code = gemini_result or holey_result
        if final_code:
            self.logger.info("+ Security code: %s", final_code)
        return final_code

    def _ocr_with_holey(self, base64_str: str) -> Optional[str]:
        base64_url_safe = base64_str.replace('+', '-').replace('/', '_').replace('=', '')
        try:
            res = self.client.post(
                self.config['api']['captcha_ocr'], json={'base64_str': base64_url_safe}, timeout=30)
            res.raise_for_status()
            return clean_code(res.json().get('data'))
        except (httpx.HTTPError, ValueError) as error:
            self.logger.warning("holey.cc OCR failed: %s", error)
            return None

    def _ocr_with_gemini(self, base64_image: str, api_key: str) -> Optional[str]:
        api_url = self.config['api']['gemini'].format(model=self.gemini_model, api_key=api_key)
        payload = {
            "contents": [{
                "parts": [
                    {"text": GEMINI_PROMPT},
                    {"inline_data": {"mime_type": "image/png", "data": base64_image}},
                ]
            }],
            "generationConfig": {
                "maxOutputTokens": 256,
                "temperature": 0.1,
                "topP": 0.1,
            },
        }

        try:
            res = self.client.post(api_url, json=payload, timeout=30)
            res.raise_for_status()
            result = res.json()
        except (httpx.HTTPError, ValueError) as error:
            self.logger.warning("Gemini OCR failed: %s", error)
            return None

        self.logger.debug("Gemini response: %s", result)
        candidates = result.get('candidates') or []
        if not candidates:
            return None
        parts = candidates[0].get('content', {}).get('parts', [])
        if not parts:
            return None
        return clean_code(parts[0].get('text', ''))

    def ask_user(self, image: bytes) -> str:
        show_image(image, self.logger)
        code = ask("Input security code", None, str.strip)
        if not code:
            raise CaptchaError("No security code given")
        return code


def show_image(image: bytes, logger) -> None:
    """Save the captcha and open it with the default image viewer"""

    file_name = filenames.captcha
    with open(file_name, 'wb') as file:
        file.write(image)

    if sys.platform.startswith('win'):
        command = ['cmd', '/C', 'start', '', str(file_name)]
    elif sys.platform == 'darwin':
        command = ['open', str(file_name)]
    else:
        command = ['xdg-open', str(file_name)]

    try:
        subprocess.Popen(command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL,
                         start_new_session=True)
    except OSError:
        logger.info("Please open the image manually: %s", file_name)

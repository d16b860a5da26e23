"""
This module is base service
"""
from __future__ import annotations
import time
import httpx
from thsr_booking.configs.config import user_agent
from thsr_booking.errors import SiteError


class BaseService(object):
    """
    BaseService
    """

    def __init__(self, args):
        self.logger = args.log
        self.config = args.config
        self.user_config = args.user_config
        self.auto = args.auto

        proxy_url = None
        proxy = args.proxy
        if proxy:
            if "://" not in proxy:
                proxy = f"https://{proxy}"
            proxy_url = proxy
            self.logger.info(" + Set Proxy")
            self.logger.debug('proxy: %s', proxy)

        self.session = httpx.Client(
            headers={
                'User-Agent': user_agent,
                "Accept": 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
                "Accept-Language": 'zh-TW,zh;q=0.8,en-US;q=0.5,en;q=0.3',
                "Upgrade-Insecure-Requests": '1',
            },
            follow_redirects=True,
            timeout=httpx.Timeout(60.0),
            proxy=proxy_url,
            transport=getattr(args, 'transport', None),
        )

    def request(self, method: str, url: str, max_retries: int = 1, **kwargs) -> httpx.Response:
        """Send request, transport errors are retried and then raised as SiteError"""

        for attempt in range(1, max_retries + 1):
            try:
                self.logger.debug('%s %s', method, url)
                res = self.session.request(method, url, **kwargs)
                self.logger.debug('status: %s', res.status_code)
                res.raise_for_status()
                return res
            except httpx.HTTPStatusError as error:
                raise SiteError(
                    f"HTTP {error.response.status_code} from {error.request.url}") from error
            except httpx.HTTPError as error:
                self.logger.warning("Connection failed: %s", error)
                if attempt >= max_retries:
                    raise SiteError(
                        f"Booking site is unreachable, please try again later ({error})") from error
                wait_time = attempt * 3
                self.logger.info("Retry in %s seconds...", wait_time)
                time.sleep(wait_time)

    def close(self):
        if self.session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

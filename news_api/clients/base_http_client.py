import requests
import time
import re

from typing import Dict, Optional
from urllib.parse import urljoin
from abc import ABC
from validators import url as validate_url
from validators.utils import ValidationError

from news_api.config.settings import settings
from news_api.core.exceptions.exceptions import ExternalAPIError, InvalidParameterError
from news_api.utils.log import app_logger


class BaseHTTPClient(ABC):
    """Base HTTP client: session with default headers, timeout, bounded retries and error mapping"""

    def __init__(self,
                 base_url: str,
                 service: str,
                 timeout: float = 1.0,
                 max_retries: int = 0,
                 retry_delay: float = 0.5,
                 accept: Optional[str] = 'application/rss+xml, application/xml;q=0.9, text/xml;q=0.8'
                 ):
        if not self._is_valid_url(base_url):
            raise InvalidParameterError("url")

        self.base_url = base_url.rstrip('/')
        self.service = service
        self.timeout = timeout
        self.accept = accept
        self.max_retries = max(max_retries, 0)
        self.retry_delay = retry_delay
        self.session = requests.Session()

        # setup default headers
        self._setup_default_headers()

    @staticmethod
    def _is_valid_url(value: Optional[str]) -> bool:
        if not value or not isinstance(value, str):
            return False
        try:
            return validate_url(value.strip()) is True
        except (ValidationError, UnicodeError):
            return False

    def _setup_default_headers(self):
        """setup default headers for the client"""
        self.session.headers.update({
            'User-Agent': f"{settings.SERVICE_NAME}/{settings.VERSION}",
            'Accept': self.accept,
        })

    def _build_url(self, endpoint: str) -> str:
        """build full URL"""
        return urljoin(f"{self.base_url}/", endpoint.lstrip('/'))

    def _make_request(self, method: str, endpoint: str,
                      params: Optional[Dict] = None,
                      headers: Optional[Dict] = None) -> requests.Response:
        """do HTTP request; transport failures and 5xx are retried up to max_retries"""
        url = self._build_url(endpoint)
        request_headers = headers or {}

        for attempt in range(self.max_retries + 1):
            last_attempt = attempt == self.max_retries
            try:
                response = self.session.request(
                    method=method,
                    url=url,
                    params=params,
                    headers=request_headers,
                    timeout=self.timeout
                )
            except requests.exceptions.RequestException as e:
                # sanitize message to remove memory addresses like <HTTPSConnection(...) at 0x...>
                sanitized = re.sub(r'0x[0-9a-fA-F]+', '<ptr>', str(e))
                exc_type = type(e).__name__
                app_logger.error("request.failed", method=method, url=url, attempt=attempt + 1, exc_type=exc_type, error=sanitized)

                if last_attempt:
                    raise ExternalAPIError(self.service, f"failed to do request: {sanitized}") from e
                self._backoff(attempt)
                continue

            if response.status_code != 200:
                app_logger.debug("request.status", method=method, url=url, status_code=response.status_code)
                if response.status_code >= 500 and not last_attempt:
                    self._backoff(attempt)
                    continue
                raise ExternalAPIError(self.service, f"unexpected status code: {response.status_code}")

            return response

        raise ExternalAPIError(self.service, f"failed to make request after {self.max_retries + 1} attempts")

    def _backoff(self, attempt: int) -> None:
        # exponential backoff
        time.sleep(self.retry_delay * (2 ** attempt))

    def get(self, endpoint: str, params: Optional[Dict] = None,
            headers: Optional[Dict] = None) -> requests.Response:
        """do GET request"""
        return self._make_request('GET', endpoint, params=params, headers=headers)

    def close(self):
        """close HTTP session"""
        self.session.close()

"""Module containing the HTTP dispatcher for SNS requests."""
import logging
from typing import Dict, Optional, Tuple

import requests

from .exceptions import TransportError

logger = logging.getLogger(__name__)


class HttpDispatcher:
    """Sends signed requests with a ``requests`` session.

    Connection pooling, TLS and timeouts belong to the session; the
    dispatcher performs exactly one attempt per call.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        scheme: str = 'https'
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout
        self.scheme = scheme

    def send(
        self,
        host: str,
        headers: Dict[str, str],
        body: bytes,
        path: str = '/'
    ) -> Tuple[int, bytes]:
        """POST ``body`` to ``host``.

        :param host: str, target host name.
        :param headers: Dict[str, str], signed request headers.
        :param body: bytes, the exact body that was signed.
        :param path: str, request path.
        :raise TransportError: if the request could not be delivered.
        :return: Tuple[int, bytes], status code and raw response body.
        """
        url = f'{self.scheme}://{host}{path}'
        try:
            response = self.session.post(
                url,
                data=body,
                headers=headers,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise TransportError(f"Failed to reach {url}: {str(e)}")

        logger.debug("POST %s returned %s", url, response.status_code)
        return response.status_code, response.content

"""Module containing the RequestSigner for SNS."""
import datetime
import hashlib
import hmac
import logging
from typing import Dict, Optional, Tuple

from .exceptions import SigningError
from .models import Credentials

logger = logging.getLogger(__name__)

ALGORITHM = 'AWS4-HMAC-SHA256'
CONTENT_TYPE = 'application/x-www-form-urlencoded'
SERVICE_NAME = 'sns'
AMZ_DATE_FORMAT = '%Y%m%dT%H%M%SZ'
DATE_STAMP_FORMAT = '%Y%m%d'


def _hmac(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode('utf-8'), hashlib.sha256).digest()


def derive_signing_key(secret_key: str, date_stamp: str, region: str, service: str) -> bytes:
    """Derive the request-scoped SigV4 signing key.

    DateKey              = HMAC-SHA256("AWS4"+"<SecretAccessKey>", "<YYYYMMDD>")
    DateRegionKey        = HMAC-SHA256(<DateKey>, "<aws-region>")
    DateRegionServiceKey = HMAC-SHA256(<DateRegionKey>, "<aws-service>")
    SigningKey           = HMAC-SHA256(<DateRegionServiceKey>, "aws4_request")
    """
    k_date = _hmac(f"AWS4{secret_key}".encode('utf-8'), date_stamp)
    k_region = _hmac(k_date, region)
    k_service = _hmac(k_region, service)
    return _hmac(k_service, 'aws4_request')


class RequestSigner:
    """Handles SNS request signing using Signature Version 4.

    The signer only holds immutable configuration; every key and canonical
    string is built per call, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        credentials: Credentials,
        region: str,
        host: str,
        service: str = SERVICE_NAME
    ) -> None:
        """Initialize the request signer.

        :param credentials: Credentials, AWS credentials.
        :param region: str, AWS region.
        :param host: str, host the request is sent to.
        :param service: str, service name used in the credential scope.
        return: None, initialize the request signer.
        """
        self.credentials = credentials
        self.region = region
        self.host = host
        self.service = service

    def _header_pairs(self, amzdate: str) -> Tuple[Tuple[str, str], ...]:
        # Fixed order, shared by canonical headers and signed headers.
        pairs = (
            ('content-type', CONTENT_TYPE),
            ('host', self.host),
            ('x-amz-date', amzdate),
        )
        if self.credentials.session_token:
            pairs += (('x-amz-security-token', self.credentials.session_token),)
        return pairs

    def canonical_headers(self, amzdate: str) -> str:
        return ''.join(f"{name}:{value}\n" for name, value in self._header_pairs(amzdate))

    def signed_headers(self) -> str:
        return ';'.join(name for name, _ in self._header_pairs(''))

    def credential_scope(self, datestamp: str) -> str:
        return f"{datestamp}/{self.region}/{self.service}/aws4_request"

    def canonical_request(self, payload: str, amzdate: str) -> str:
        """Build the canonical request for a form-encoded POST to ``/``.

        The query string is always empty; every parameter travels in the body.
        """
        payload_hash = hashlib.sha256(payload.encode('utf-8')).hexdigest()
        return (
            f"POST\n/\n\n"
            f"{self.canonical_headers(amzdate)}\n"
            f"{self.signed_headers()}\n{payload_hash}"
        )

    def string_to_sign(self, canonical_request: str, amzdate: str, datestamp: str) -> str:
        return (
            f"{ALGORITHM}\n{amzdate}\n{self.credential_scope(datestamp)}\n"
            f"{hashlib.sha256(canonical_request.encode('utf-8')).hexdigest()}"
        )

    def sign(self, payload: str, now: Optional[datetime.datetime] = None) -> Tuple[str, str]:
        """Create the AWS Signature Version 4 for a request body.

        :param payload: str, the exact form body that will be sent.
        :param now: datetime, signing instant, defaults to the current UTC time.
        :raise SigningError: if request signing fails.
        :return: Tuple[str, str], the X-Amz-Date value and Authorization header.
        """
        try:
            t = now or datetime.datetime.now(datetime.timezone.utc)
            if t.tzinfo is not None:
                t = t.astimezone(datetime.timezone.utc)
            amzdate = t.strftime(AMZ_DATE_FORMAT)
            datestamp = t.strftime(DATE_STAMP_FORMAT)

            canonical_request = self.canonical_request(payload, amzdate)
            string_to_sign = self.string_to_sign(canonical_request, amzdate, datestamp)

            signing_key = derive_signing_key(
                self.credentials.secret_access_key,
                datestamp,
                self.region,
                self.service
            )
            signature = hmac.new(
                signing_key,
                string_to_sign.encode('utf-8'),
                hashlib.sha256
            ).hexdigest()

            authorization_header = (
                f"{ALGORITHM} "
                f"Credential={self.credentials.access_key_id}/{self.credential_scope(datestamp)}, "
                f"SignedHeaders={self.signed_headers()}, "
                f"Signature={signature}"
            )
        except Exception as e:
            raise SigningError(f"Failed to sign request: {str(e)}")

        return amzdate, authorization_header

    def sign_request(self, payload: str, now: Optional[datetime.datetime] = None) -> Dict[str, str]:
        """Return the full header set for sending ``payload``.

        :param payload: str, the exact form body that will be sent.
        :param now: datetime, signing instant, defaults to the current UTC time.
        :raise SigningError: if request signing fails.
        :return: Dict[str, str], signed headers.
        """
        amzdate, authorization_header = self.sign(payload, now)
        headers = {
            'Content-Type': CONTENT_TYPE,
            'Host': self.host,
            'X-Amz-Date': amzdate,
            'Authorization': authorization_header
        }
        if self.credentials.session_token:
            headers['X-Amz-Security-Token'] = self.credentials.session_token
        logger.debug("Signed request for %s at %s", self.host, amzdate)
        return headers

"""Client for the Amazon SNS query API signed with Signature Version 4."""
from .exceptions import (
    CredentialError,
    DecodeError,
    HttpError,
    SigningError,
    SnsClientError,
    TransportError,
    ValidationError
)
from .models import (
    Credentials,
    MessageAttributeValue,
    SMSAttributes,
    SubscriptionAttributes,
    TopicAttributes
)
from .request_signer import RequestSigner
from .sns_client import SnsClient
from .transport import HttpDispatcher

__all__ = [
    'CredentialError',
    'Credentials',
    'DecodeError',
    'HttpDispatcher',
    'HttpError',
    'MessageAttributeValue',
    'RequestSigner',
    'SMSAttributes',
    'SigningError',
    'SnsClient',
    'SnsClientError',
    'SubscriptionAttributes',
    'TopicAttributes',
    'TransportError',
    'ValidationError',
]

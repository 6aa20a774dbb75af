"""Module containing the value types exchanged with SNS."""
import os
from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional, Tuple, Type, TypeVar

from .exceptions import CredentialError, ValidationError

R = TypeVar('R', bound='AttributeRecord')

AttributePairs = List[Tuple[str, str]]


@dataclass(frozen=True)
class Credentials:
    """AWS credentials owned by a single client.

    A session token marks short-term credentials and adds the
    ``x-amz-security-token`` header to every signed request.
    """

    access_key_id: str
    secret_access_key: str
    session_token: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.access_key_id or not self.secret_access_key:
            raise CredentialError("Access key id and secret access key are required")

    def __repr__(self) -> str:
        return (
            f"Credentials(access_key_id={self.access_key_id!r}, "
            f"session_token={'set' if self.session_token else None})"
        )

    @classmethod
    def from_env(cls) -> 'Credentials':
        """Load credentials from the standard AWS environment variables.

        :raise CredentialError: if the key id or secret is not set.
        :return: Credentials, long-term or session credentials.
        """
        access_key = os.environ.get('AWS_ACCESS_KEY_ID')
        secret_key = os.environ.get('AWS_SECRET_ACCESS_KEY')

        if not access_key or not secret_key:
            raise CredentialError("AWS credentials not found in environment")

        return cls(access_key, secret_key, os.environ.get('AWS_SESSION_TOKEN') or None)


def wire(name: str):
    """Declare a record field that maps to the SNS attribute ``name``."""
    return field(default=None, metadata={'wire': name})


@dataclass
class AttributeRecord:
    """Base for attribute records with a field to wire-key table."""

    extra: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def wire_keys(cls) -> Dict[str, str]:
        return {f.name: f.metadata['wire'] for f in fields(cls) if 'wire' in f.metadata}

    def to_wire(self) -> Dict[str, str]:
        """Return the set fields keyed by their SNS attribute names."""
        result = {}
        for name, key in self.wire_keys().items():
            value = getattr(self, name)
            if value is not None:
                result[key] = value
        result.update(self.extra)
        return result

    @classmethod
    def from_wire(cls: Type[R], attributes: Dict[str, str]) -> R:
        """Build a record from SNS attribute names, keeping unknown keys in ``extra``."""
        by_key = {key: name for name, key in cls.wire_keys().items()}
        known = {}
        extra = {}
        for key, value in attributes.items():
            if key in by_key:
                known[by_key[key]] = value
            else:
                extra[key] = value
        return cls(extra=extra, **known)


@dataclass
class TopicAttributes(AttributeRecord):
    """Topic attributes. The last group is read-only and only filled by SNS."""

    display_name: Optional[str] = wire('DisplayName')
    policy: Optional[str] = wire('Policy')
    delivery_policy: Optional[str] = wire('DeliveryPolicy')
    kms_master_key_id: Optional[str] = wire('KmsMasterKeyId')
    signature_version: Optional[str] = wire('SignatureVersion')
    tracing_config: Optional[str] = wire('TracingConfig')
    fifo_topic: Optional[str] = wire('FifoTopic')
    content_based_deduplication: Optional[str] = wire('ContentBasedDeduplication')
    topic_arn: Optional[str] = wire('TopicArn')
    owner: Optional[str] = wire('Owner')
    subscriptions_pending: Optional[str] = wire('SubscriptionsPending')
    subscriptions_confirmed: Optional[str] = wire('SubscriptionsConfirmed')
    subscriptions_deleted: Optional[str] = wire('SubscriptionsDeleted')
    effective_delivery_policy: Optional[str] = wire('EffectiveDeliveryPolicy')


@dataclass
class SubscriptionAttributes(AttributeRecord):
    delivery_policy: Optional[str] = wire('DeliveryPolicy')
    filter_policy: Optional[str] = wire('FilterPolicy')
    filter_policy_scope: Optional[str] = wire('FilterPolicyScope')
    raw_message_delivery: Optional[str] = wire('RawMessageDelivery')
    redrive_policy: Optional[str] = wire('RedrivePolicy')
    subscription_role_arn: Optional[str] = wire('SubscriptionRoleArn')
    subscription_arn: Optional[str] = wire('SubscriptionArn')
    topic_arn: Optional[str] = wire('TopicArn')
    owner: Optional[str] = wire('Owner')
    protocol: Optional[str] = wire('Protocol')
    endpoint: Optional[str] = wire('Endpoint')
    confirmation_was_authenticated: Optional[str] = wire('ConfirmationWasAuthenticated')
    pending_confirmation: Optional[str] = wire('PendingConfirmation')
    effective_delivery_policy: Optional[str] = wire('EffectiveDeliveryPolicy')


@dataclass
class SMSAttributes(AttributeRecord):
    monthly_spend_limit: Optional[str] = wire('MonthlySpendLimit')
    delivery_status_iam_role: Optional[str] = wire('DeliveryStatusIAMRole')
    delivery_status_success_sampling_rate: Optional[str] = wire('DeliveryStatusSuccessSamplingRate')
    default_sender_id: Optional[str] = wire('DefaultSenderID')
    default_sms_type: Optional[str] = wire('DefaultSMSType')
    usage_report_s3_bucket: Optional[str] = wire('UsageReportS3Bucket')


@dataclass(frozen=True)
class MessageAttributeValue:
    """A typed Publish message attribute.

    ``data_type`` is ``String``, ``Number``, ``Binary`` or one of their
    custom sub-types such as ``String.Array``.
    """

    data_type: str
    string_value: Optional[str] = None
    binary_value: Optional[bytes] = None

    def __post_init__(self) -> None:
        if not self.data_type:
            raise ValidationError("Message attribute data type is required")
        if (self.string_value is None) == (self.binary_value is None):
            raise ValidationError(
                "Message attribute needs exactly one of string_value or binary_value"
            )


@dataclass(frozen=True)
class CreateTopicResponse:
    topic_arn: str
    request_id: Optional[str] = None


@dataclass(frozen=True)
class SubscribeResponse:
    subscription_arn: str
    request_id: Optional[str] = None


@dataclass(frozen=True)
class PublishResponse:
    message_id: str
    sequence_number: Optional[str] = None
    request_id: Optional[str] = None


@dataclass(frozen=True)
class ConfirmSubscriptionResponse:
    subscription_arn: str
    request_id: Optional[str] = None


@dataclass(frozen=True)
class EmptyResponse:
    """Success marker for actions that return no result fields."""

    action: str
    request_id: Optional[str] = None


@dataclass(frozen=True)
class AttributesResponse:
    """Attribute name/value pairs in the order SNS returned them."""

    attributes: AttributePairs
    request_id: Optional[str] = None

    def as_dict(self) -> Dict[str, str]:
        return dict(self.attributes)


class GetTopicAttributesResponse(AttributesResponse):
    def record(self) -> TopicAttributes:
        return TopicAttributes.from_wire(self.as_dict())


class GetSubscriptionAttributesResponse(AttributesResponse):
    def record(self) -> SubscriptionAttributes:
        return SubscriptionAttributes.from_wire(self.as_dict())


class GetSMSAttributesResponse(AttributesResponse):
    def record(self) -> SMSAttributes:
        return SMSAttributes.from_wire(self.as_dict())

"""Module for building SNS query parameters and the form body."""
import base64
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from .exceptions import ValidationError
from .models import AttributeRecord, MessageAttributeValue

API_VERSION = '2010-03-31'

Params = Dict[str, str]
Attributes = Union[Mapping[str, str], AttributeRecord]
MessageAttributes = Mapping[str, Union[MessageAttributeValue, str]]


def build_params(
    action: str,
    required: Sequence[Tuple[str, Optional[str]]] = (),
    optional: Sequence[Tuple[str, Optional[str]]] = ()
) -> Params:
    """Start an ordered parameter set for ``action``.

    :param action: str, SNS action name.
    :param required: pairs of wire key and value, in wire order.
    :param optional: pairs of wire key and value, skipped when the value is None.
    :raise ValidationError: if a required value is empty or missing.
    :return: Params, Action and Version followed by the given parameters.
    """
    params = {'Action': action, 'Version': API_VERSION}
    for key, value in required:
        if not value:
            raise ValidationError(f"{key} is required for {action}")
        params[key] = value
    for key, value in optional:
        if value is not None:
            params[key] = value
    return params


def _as_mapping(attributes: Attributes) -> Mapping[str, str]:
    if isinstance(attributes, AttributeRecord):
        return attributes.to_wire()
    return attributes


def add_entries(
    params: Params,
    prefix: str,
    attributes: Optional[Attributes],
    key_name: str = 'key',
    value_name: str = 'value'
) -> Params:
    """Flatten a map into ``<prefix>.N.<key_name>`` / ``<prefix>.N.<value_name>``.

    Indices start at 1 and follow the insertion order of ``attributes``.
    """
    if attributes is None:
        return params
    for index, (key, value) in enumerate(_as_mapping(attributes).items(), start=1):
        params[f"{prefix}.{index}.{key_name}"] = key
        params[f"{prefix}.{index}.{value_name}"] = value
    return params


def add_members(params: Params, prefix: str, values: Optional[Iterable[str]]) -> Params:
    """Flatten a list into ``<prefix>.N``."""
    if values is None:
        return params
    for index, value in enumerate(values, start=1):
        params[f"{prefix}.{index}"] = value
    return params


def add_message_attributes(params: Params, attributes: Optional[MessageAttributes]) -> Params:
    if attributes is None:
        return params
    for index, (name, value) in enumerate(attributes.items(), start=1):
        if isinstance(value, str):
            value = MessageAttributeValue('String', string_value=value)
        entry = f"MessageAttributes.entry.{index}"
        params[f"{entry}.Name"] = name
        params[f"{entry}.Value.DataType"] = value.data_type
        if value.string_value is not None:
            params[f"{entry}.Value.StringValue"] = value.string_value
        else:
            params[f"{entry}.Value.BinaryValue"] = base64.b64encode(value.binary_value).decode('ascii')
    return params


def _bool(value: Optional[bool]) -> Optional[str]:
    if value is None:
        return None
    return 'true' if value else 'false'


def encode_payload(params: Mapping[str, str]) -> str:
    """Serialize parameters as ``k1=v1&k2=v2`` in insertion order.

    Values are written as given, without percent-encoding.
    """
    return '&'.join(f"{key}={value}" for key, value in params.items())


def create_topic_params(
    name: str,
    attributes: Optional[Attributes] = None,
    tags: Optional[Mapping[str, str]] = None
) -> Params:
    params = build_params('CreateTopic', [('Name', name)])
    add_entries(params, 'Attributes.entry', attributes)
    add_entries(params, 'Tags.member', tags, key_name='Key', value_name='Value')
    return params


def subscribe_params(
    topic_arn: str,
    protocol: str,
    endpoint: Optional[str] = None,
    attributes: Optional[Attributes] = None,
    return_subscription_arn: Optional[bool] = None
) -> Params:
    params = build_params(
        'Subscribe',
        [('TopicArn', topic_arn), ('Protocol', protocol)],
        [('Endpoint', endpoint), ('ReturnSubscriptionArn', _bool(return_subscription_arn))]
    )
    return add_entries(params, 'Attributes.entry', attributes)


def publish_params(
    message: str,
    topic_arn: Optional[str] = None,
    target_arn: Optional[str] = None,
    phone_number: Optional[str] = None,
    subject: Optional[str] = None,
    message_structure: Optional[str] = None,
    message_group_id: Optional[str] = None,
    message_deduplication_id: Optional[str] = None,
    message_attributes: Optional[MessageAttributes] = None
) -> Params:
    destinations = [d for d in (topic_arn, target_arn, phone_number) if d]
    if len(destinations) != 1:
        raise ValidationError(
            "Publish needs exactly one of TopicArn, TargetArn or PhoneNumber"
        )
    params = build_params(
        'Publish',
        [('Message', message)],
        [
            ('TopicArn', topic_arn or None),
            ('TargetArn', target_arn or None),
            ('PhoneNumber', phone_number or None),
            ('Subject', subject),
            ('MessageStructure', message_structure),
            ('MessageGroupId', message_group_id),
            ('MessageDeduplicationId', message_deduplication_id),
        ]
    )
    return add_message_attributes(params, message_attributes)


def unsubscribe_params(subscription_arn: str) -> Params:
    return build_params('Unsubscribe', [('SubscriptionArn', subscription_arn)])


def delete_topic_params(topic_arn: str) -> Params:
    return build_params('DeleteTopic', [('TopicArn', topic_arn)])


def confirm_subscription_params(
    token: str,
    topic_arn: str,
    authenticate_on_unsubscribe: Optional[bool] = None
) -> Params:
    return build_params(
        'ConfirmSubscription',
        [('Token', token), ('TopicArn', topic_arn)],
        [('AuthenticateOnUnsubscribe', _bool(authenticate_on_unsubscribe))]
    )


def set_topic_attributes_params(
    topic_arn: str,
    attribute_name: str,
    attribute_value: Optional[str] = None
) -> Params:
    return build_params(
        'SetTopicAttributes',
        [('TopicArn', topic_arn), ('AttributeName', attribute_name)],
        [('AttributeValue', attribute_value)]
    )


def get_topic_attributes_params(topic_arn: str) -> Params:
    return build_params('GetTopicAttributes', [('TopicArn', topic_arn)])


def set_subscription_attributes_params(
    subscription_arn: str,
    attribute_name: str,
    attribute_value: Optional[str] = None
) -> Params:
    return build_params(
        'SetSubscriptionAttributes',
        [('SubscriptionArn', subscription_arn), ('AttributeName', attribute_name)],
        [('AttributeValue', attribute_value)]
    )


def get_subscription_attributes_params(subscription_arn: str) -> Params:
    return build_params('GetSubscriptionAttributes', [('SubscriptionArn', subscription_arn)])


def set_sms_attributes_params(attributes: Attributes) -> Params:
    if not attributes or not _as_mapping(attributes):
        raise ValidationError("attributes is required for SetSMSAttributes")
    return add_entries(build_params('SetSMSAttributes'), 'attributes.entry', attributes)


def get_sms_attributes_params(attribute_names: Optional[Iterable[str]] = None) -> Params:
    return add_members(build_params('GetSMSAttributes'), 'attributes.member', attribute_names)


def create_sms_sandbox_phone_number_params(
    phone_number: str,
    language_code: Optional[str] = None
) -> Params:
    return build_params(
        'CreateSMSSandboxPhoneNumber',
        [('PhoneNumber', phone_number)],
        [('LanguageCode', language_code)]
    )

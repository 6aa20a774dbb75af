"""Module containing the SnsClient for aws."""
import logging
import os
from typing import Iterable, Mapping, Optional

from . import params as p
from . import response_parser
from .exceptions import HttpError
from .models import (
    ConfirmSubscriptionResponse,
    CreateTopicResponse,
    Credentials,
    EmptyResponse,
    GetSMSAttributesResponse,
    GetSubscriptionAttributesResponse,
    GetTopicAttributesResponse,
    PublishResponse,
    SubscribeResponse,
)
from .request_signer import RequestSigner
from .transport import HttpDispatcher

logger = logging.getLogger(__name__)

DEFAULT_REGION = 'us-east-1'


class SnsClient:
    """Calls SNS query actions over signed form-encoded POST requests.

    Credentials, region and host are fixed at construction; each call builds
    its own parameters, body and signature, so a client can be shared
    between threads.
    """

    def __init__(
        self,
        credentials: Optional[Credentials] = None,
        region: Optional[str] = None,
        dispatcher: Optional[HttpDispatcher] = None
    ):
        self.credentials = credentials or Credentials.from_env()
        self.region = (
            region
            or os.environ.get('AWS_REGION')
            or os.environ.get('AWS_DEFAULT_REGION')
            or DEFAULT_REGION
        )
        self.host = f'sns.{self.region}.amazonaws.com'
        self.signer = RequestSigner(self.credentials, self.region, self.host)
        self.dispatcher = dispatcher or HttpDispatcher()

    def _call(self, params: p.Params) -> bytes:
        """Sign and send one parameter set.

        :raises SigningError: if request signing fails.
        :raises TransportError: if the request could not be delivered.
        :raises HttpError: if SNS answers with a non-2xx status.
        :return: bytes, the raw response body.
        """
        action = params['Action']
        payload = p.encode_payload(params)
        headers = self.signer.sign_request(payload)

        logger.debug("Calling %s on %s", action, self.host)
        status_code, body = self.dispatcher.send(
            self.host,
            headers,
            payload.encode('utf-8')
        )

        if not 200 <= status_code < 300:
            code, message = response_parser.extract_fault(body)
            logger.warning("%s failed with HTTP %s: %s", action, status_code, code)
            raise HttpError(status_code, body, code=code, message=message)

        return body

    def create_topic(
        self,
        name: str,
        attributes: Optional[p.Attributes] = None,
        tags: Optional[Mapping[str, str]] = None
    ) -> CreateTopicResponse:
        body = self._call(p.create_topic_params(name, attributes, tags))
        values, request_id = response_parser.parse_result(body, 'CreateTopic', ['TopicArn'])
        return CreateTopicResponse(values['TopicArn'], request_id)

    def subscribe(
        self,
        topic_arn: str,
        protocol: str,
        endpoint: Optional[str] = None,
        attributes: Optional[p.Attributes] = None,
        return_subscription_arn: Optional[bool] = None
    ) -> SubscribeResponse:
        body = self._call(p.subscribe_params(
            topic_arn, protocol, endpoint, attributes, return_subscription_arn
        ))
        values, request_id = response_parser.parse_result(body, 'Subscribe', ['SubscriptionArn'])
        return SubscribeResponse(values['SubscriptionArn'], request_id)

    def publish(
        self,
        message: str,
        topic_arn: Optional[str] = None,
        target_arn: Optional[str] = None,
        phone_number: Optional[str] = None,
        subject: Optional[str] = None,
        message_structure: Optional[str] = None,
        message_group_id: Optional[str] = None,
        message_deduplication_id: Optional[str] = None,
        message_attributes: Optional[p.MessageAttributes] = None
    ) -> PublishResponse:
        """Publish ``message`` to a topic, a target endpoint or a phone number.

        Exactly one of ``topic_arn``, ``target_arn`` and ``phone_number``
        must be given.
        """
        body = self._call(p.publish_params(
            message,
            topic_arn=topic_arn,
            target_arn=target_arn,
            phone_number=phone_number,
            subject=subject,
            message_structure=message_structure,
            message_group_id=message_group_id,
            message_deduplication_id=message_deduplication_id,
            message_attributes=message_attributes
        ))
        values, request_id = response_parser.parse_result(
            body, 'Publish', ['MessageId'], ['SequenceNumber']
        )
        return PublishResponse(values['MessageId'], values['SequenceNumber'], request_id)

    def unsubscribe(self, subscription_arn: str) -> EmptyResponse:
        return self._empty(p.unsubscribe_params(subscription_arn))

    def delete_topic(self, topic_arn: str) -> EmptyResponse:
        return self._empty(p.delete_topic_params(topic_arn))

    def confirm_subscription(
        self,
        token: str,
        topic_arn: str,
        authenticate_on_unsubscribe: Optional[bool] = None
    ) -> ConfirmSubscriptionResponse:
        body = self._call(p.confirm_subscription_params(
            token, topic_arn, authenticate_on_unsubscribe
        ))
        values, request_id = response_parser.parse_result(
            body, 'ConfirmSubscription', ['SubscriptionArn']
        )
        return ConfirmSubscriptionResponse(values['SubscriptionArn'], request_id)

    def set_topic_attributes(
        self,
        topic_arn: str,
        attribute_name: str,
        attribute_value: Optional[str] = None
    ) -> EmptyResponse:
        return self._empty(p.set_topic_attributes_params(topic_arn, attribute_name, attribute_value))

    def get_topic_attributes(self, topic_arn: str) -> GetTopicAttributesResponse:
        body = self._call(p.get_topic_attributes_params(topic_arn))
        pairs, request_id = response_parser.parse_attributes(body, 'GetTopicAttributes')
        return GetTopicAttributesResponse(pairs, request_id)

    def set_subscription_attributes(
        self,
        subscription_arn: str,
        attribute_name: str,
        attribute_value: Optional[str] = None
    ) -> EmptyResponse:
        return self._empty(p.set_subscription_attributes_params(
            subscription_arn, attribute_name, attribute_value
        ))

    def get_subscription_attributes(self, subscription_arn: str) -> GetSubscriptionAttributesResponse:
        body = self._call(p.get_subscription_attributes_params(subscription_arn))
        pairs, request_id = response_parser.parse_attributes(body, 'GetSubscriptionAttributes')
        return GetSubscriptionAttributesResponse(pairs, request_id)

    def set_sms_attributes(self, attributes: p.Attributes) -> EmptyResponse:
        return self._empty(p.set_sms_attributes_params(attributes))

    def get_sms_attributes(self, attribute_names: Optional[Iterable[str]] = None) -> GetSMSAttributesResponse:
        body = self._call(p.get_sms_attributes_params(attribute_names))
        pairs, request_id = response_parser.parse_attributes(
            body, 'GetSMSAttributes', container='attributes'
        )
        return GetSMSAttributesResponse(pairs, request_id)

    def create_sms_sandbox_phone_number(
        self,
        phone_number: str,
        language_code: Optional[str] = None
    ) -> EmptyResponse:
        return self._empty(p.create_sms_sandbox_phone_number_params(phone_number, language_code))

    def _empty(self, params: p.Params) -> EmptyResponse:
        action = params['Action']
        body = self._call(params)
        return EmptyResponse(action, response_parser.parse_empty(body, action))

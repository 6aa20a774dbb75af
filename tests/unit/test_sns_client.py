import datetime
from unittest import mock

import pytest

from aws_sns import (
    CredentialError,
    Credentials,
    DecodeError,
    HttpDispatcher,
    HttpError,
    SnsClient,
    TopicAttributes,
    TransportError,
    ValidationError,
)
from aws_sns.request_signer import AMZ_DATE_FORMAT

NS = 'xmlns="http://sns.amazonaws.com/doc/2010-03-31/"'


def response(action: str, result: str = '') -> bytes:
    result_xml = f'<{action}Result>{result}</{action}Result>' if result else ''
    return (
        f'<{action}Response {NS}>{result_xml}'
        f'<ResponseMetadata><RequestId>req-1</RequestId></ResponseMetadata>'
        f'</{action}Response>'
    ).encode()


@pytest.fixture
def dispatcher() -> mock.Mock:
    return mock.Mock(spec=HttpDispatcher)


@pytest.fixture
def client(dispatcher: mock.Mock) -> SnsClient:
    return SnsClient(Credentials('AKIDEXAMPLE', 'secret'), region='us-east-1', dispatcher=dispatcher)


def sent(dispatcher: mock.Mock):
    host, headers, body = dispatcher.send.call_args[0]
    return host, headers, body.decode('utf-8')


class TestConstruction:
    def test_region_defaults_to_us_east_1(self, monkeypatch, dispatcher):
        monkeypatch.delenv('AWS_REGION', raising=False)
        monkeypatch.delenv('AWS_DEFAULT_REGION', raising=False)
        client = SnsClient(Credentials('AKID', 'secret'), dispatcher=dispatcher)
        assert client.region == 'us-east-1'
        assert client.host == 'sns.us-east-1.amazonaws.com'

    def test_region_from_environment(self, monkeypatch, dispatcher):
        monkeypatch.delenv('AWS_REGION', raising=False)
        monkeypatch.setenv('AWS_DEFAULT_REGION', 'eu-west-1')
        client = SnsClient(Credentials('AKID', 'secret'), dispatcher=dispatcher)
        assert client.host == 'sns.eu-west-1.amazonaws.com'

    def test_credentials_from_environment(self, monkeypatch, dispatcher):
        monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'AKIDENV')
        monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'secret')
        monkeypatch.setenv('AWS_SESSION_TOKEN', 'tok')
        client = SnsClient(region='us-west-2', dispatcher=dispatcher)
        assert client.credentials == Credentials('AKIDENV', 'secret', 'tok')

    def test_missing_credentials(self, monkeypatch, dispatcher):
        monkeypatch.delenv('AWS_ACCESS_KEY_ID', raising=False)
        monkeypatch.delenv('AWS_SECRET_ACCESS_KEY', raising=False)
        with pytest.raises(CredentialError):
            SnsClient(dispatcher=dispatcher)


class TestCreateTopic:
    def test_end_to_end(self, client: SnsClient, dispatcher: mock.Mock):
        dispatcher.send.return_value = (
            200, response('CreateTopic', '<TopicArn>arn:aws:sns:us-east-1:1:test-topic</TopicArn>')
        )

        result = client.create_topic('test-topic', attributes={'DisplayName': 'Test'})

        assert result.topic_arn == 'arn:aws:sns:us-east-1:1:test-topic'
        assert result.request_id == 'req-1'
        host, headers, body = sent(dispatcher)
        assert host == 'sns.us-east-1.amazonaws.com'
        assert body == (
            'Action=CreateTopic&Version=2010-03-31&Name=test-topic'
            '&Attributes.entry.1.key=DisplayName&Attributes.entry.1.value=Test'
        )
        assert 'SignedHeaders=content-type;host;x-amz-date,' in headers['Authorization']
        assert headers['Content-Type'] == 'application/x-www-form-urlencoded'

    def test_signature_covers_sent_body(self, client: SnsClient, dispatcher: mock.Mock):
        dispatcher.send.return_value = (200, response('CreateTopic', '<TopicArn>arn:t</TopicArn>'))

        client.create_topic('test-topic', attributes=TopicAttributes(display_name='Test'))

        _, headers, body = sent(dispatcher)
        now = datetime.datetime.strptime(headers['X-Amz-Date'], AMZ_DATE_FORMAT)
        assert client.signer.sign(body, now) == (headers['X-Amz-Date'], headers['Authorization'])

    def test_validation_before_network(self, client: SnsClient, dispatcher: mock.Mock):
        with pytest.raises(ValidationError):
            client.create_topic('')
        dispatcher.send.assert_not_called()


class TestOperations:
    def test_subscribe(self, client: SnsClient, dispatcher: mock.Mock):
        dispatcher.send.return_value = (200, response('Subscribe', '<SubscriptionArn>pending confirmation</SubscriptionArn>'))
        result = client.subscribe('arn:t', 'email', endpoint='a@example.com')
        assert result.subscription_arn == 'pending confirmation'
        assert sent(dispatcher)[2].startswith('Action=Subscribe&Version=2010-03-31&TopicArn=arn:t&Protocol=email')

    def test_publish(self, client: SnsClient, dispatcher: mock.Mock):
        dispatcher.send.return_value = (200, response('Publish', '<MessageId>m-1</MessageId>'))
        result = client.publish('hello', topic_arn='arn:x')
        assert result.message_id == 'm-1'
        assert result.sequence_number is None
        assert sent(dispatcher)[2] == 'Action=Publish&Version=2010-03-31&Message=hello&TopicArn=arn:x'

    def test_publish_fifo_sequence_number(self, client: SnsClient, dispatcher: mock.Mock):
        dispatcher.send.return_value = (
            200, response('Publish', '<MessageId>m-1</MessageId><SequenceNumber>1000</SequenceNumber>')
        )
        result = client.publish('hello', topic_arn='arn:x.fifo', message_group_id='g')
        assert result.sequence_number == '1000'

    def test_confirm_subscription(self, client: SnsClient, dispatcher: mock.Mock):
        dispatcher.send.return_value = (
            200, response('ConfirmSubscription', '<SubscriptionArn>arn:s</SubscriptionArn>')
        )
        assert client.confirm_subscription('tok', 'arn:t').subscription_arn == 'arn:s'

    @pytest.mark.parametrize('method, args, action', [
        ('unsubscribe', ('arn:s',), 'Unsubscribe'),
        ('delete_topic', ('arn:t',), 'DeleteTopic'),
        ('set_topic_attributes', ('arn:t', 'DisplayName', 'x'), 'SetTopicAttributes'),
        ('set_subscription_attributes', ('arn:s', 'RawMessageDelivery', 'true'), 'SetSubscriptionAttributes'),
        ('set_sms_attributes', ({'DefaultSMSType': 'Promotional'},), 'SetSMSAttributes'),
        ('create_sms_sandbox_phone_number', ('+15555550100',), 'CreateSMSSandboxPhoneNumber'),
    ])
    def test_empty_results(self, client: SnsClient, dispatcher: mock.Mock, method, args, action):
        dispatcher.send.return_value = (200, response(action))
        result = getattr(client, method)(*args)
        assert result.action == action
        assert result.request_id == 'req-1'
        assert sent(dispatcher)[2].startswith(f'Action={action}&Version=2010-03-31')

    def test_get_topic_attributes(self, client: SnsClient, dispatcher: mock.Mock):
        dispatcher.send.return_value = (200, response(
            'GetTopicAttributes',
            '<Attributes>'
            '<entry><key>DisplayName</key><value>Test</value></entry>'
            '<entry><key>Owner</key><value>123</value></entry>'
            '</Attributes>'
        ))
        result = client.get_topic_attributes('arn:t')
        assert result.attributes == [('DisplayName', 'Test'), ('Owner', '123')]
        record = result.record()
        assert record.display_name == 'Test'
        assert record.owner == '123'

    def test_get_subscription_attributes(self, client: SnsClient, dispatcher: mock.Mock):
        dispatcher.send.return_value = (200, response(
            'GetSubscriptionAttributes',
            '<Attributes><entry><key>RawMessageDelivery</key><value>true</value></entry></Attributes>'
        ))
        result = client.get_subscription_attributes('arn:s')
        assert result.record().raw_message_delivery == 'true'

    def test_get_sms_attributes(self, client: SnsClient, dispatcher: mock.Mock):
        dispatcher.send.return_value = (200, response(
            'GetSMSAttributes',
            '<attributes><entry><key>DefaultSMSType</key><value>Transactional</value></entry></attributes>'
        ))
        result = client.get_sms_attributes(['DefaultSMSType'])
        assert result.as_dict() == {'DefaultSMSType': 'Transactional'}
        assert sent(dispatcher)[2].endswith('&attributes.member.1=DefaultSMSType')


class TestErrors:
    def test_http_error_carries_fault(self, client: SnsClient, dispatcher: mock.Mock):
        body = (
            f'<ErrorResponse {NS}><Error><Type>Sender</Type><Code>NotFound</Code>'
            '<Message>Topic does not exist</Message></Error></ErrorResponse>'
        ).encode()
        dispatcher.send.return_value = (404, body)
        with pytest.raises(HttpError) as exc_info:
            client.delete_topic('arn:t')
        assert exc_info.value.status_code == 404
        assert exc_info.value.code == 'NotFound'
        assert exc_info.value.message == 'Topic does not exist'
        assert exc_info.value.body == body

    def test_http_error_without_xml(self, client: SnsClient, dispatcher: mock.Mock):
        dispatcher.send.return_value = (503, b'Service Unavailable')
        with pytest.raises(HttpError) as exc_info:
            client.delete_topic('arn:t')
        assert exc_info.value.code is None

    def test_fault_in_success_status(self, client: SnsClient, dispatcher: mock.Mock):
        dispatcher.send.return_value = (
            200, b'<ErrorResponse><Error><Code>Throttling</Code><Message>Rate exceeded</Message></Error></ErrorResponse>'
        )
        with pytest.raises(DecodeError, match='Rate exceeded'):
            client.publish('hello', topic_arn='arn:x')

    def test_transport_error_propagates(self, client: SnsClient, dispatcher: mock.Mock):
        dispatcher.send.side_effect = TransportError('connection refused')
        with pytest.raises(TransportError):
            client.delete_topic('arn:t')
        assert dispatcher.send.call_count == 1

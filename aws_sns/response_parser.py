"""Module for decoding SNS XML responses."""
import logging
from typing import Dict, Optional, Sequence, Tuple
from xml.etree import ElementTree as ET

from .exceptions import DecodeError
from .models import AttributePairs

logger = logging.getLogger(__name__)


def _local_name(tag: str) -> str:
    return tag.rsplit('}', 1)[-1]


def _find(element: ET.Element, name: str) -> Optional[ET.Element]:
    """Find the first descendant named ``name``, ignoring namespaces."""
    for child in element.iter():
        if child is not element and _local_name(child.tag) == name:
            return child
    return None


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def _text(element: Optional[ET.Element]) -> Optional[str]:
    if element is None:
        return None
    return element.text or ''


def parse_xml(body: bytes) -> ET.Element:
    """Parse ``body``, turning an AWS error envelope into a DecodeError.

    :param body: bytes, raw response body.
    :raise DecodeError: if the body is not XML or holds an AWS fault.
    :return: ET.Element, the document root.
    """
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise DecodeError(f"Failed to parse XML response: {str(e)}", body=body)

    fault = parse_fault(root)
    if fault is not None:
        code, message = fault
        logger.warning("SNS returned fault %s: %s", code, message)
        raise DecodeError(message, body=body, code=code)
    return root


def parse_fault(root: ET.Element) -> Optional[Tuple[Optional[str], str]]:
    """Return ``(code, message)`` when ``root`` is an error envelope."""
    name = _local_name(root.tag)
    if name == 'Error':
        error = root
    elif name == 'ErrorResponse':
        error = _find(root, 'Error')
    else:
        error = _child(root, 'Error')
    if error is None:
        return None
    code = _text(_child(error, 'Code'))
    message = _text(_child(error, 'Message')) or code or 'Unknown SNS error'
    return code, message


def extract_fault(body: bytes) -> Tuple[Optional[str], Optional[str]]:
    """Best-effort fault extraction for error statuses."""
    try:
        root = ET.fromstring(body)
    except ET.ParseError:
        return None, None
    fault = parse_fault(root)
    if fault is None:
        return None, None
    return fault


def request_id(root: ET.Element) -> Optional[str]:
    return _text(_find(root, 'RequestId'))


def _expect_response(root: ET.Element, action: str, body: bytes) -> None:
    expected = f'{action}Response'
    if _local_name(root.tag) != expected:
        raise DecodeError(
            f"Expected {expected} but got {_local_name(root.tag)}", body=body
        )


def _result(root: ET.Element, action: str, body: bytes) -> ET.Element:
    _expect_response(root, action, body)
    result = _child(root, f'{action}Result')
    if result is None:
        raise DecodeError(f"No {action}Result found in response", body=body)
    return result


def parse_result(
    body: bytes,
    action: str,
    required: Sequence[str] = (),
    optional: Sequence[str] = ()
) -> Tuple[Dict[str, Optional[str]], Optional[str]]:
    """Extract named children of the ``<action>Result`` element.

    :param body: bytes, raw response body.
    :param action: str, SNS action name.
    :param required: child names that must be present.
    :param optional: child names that may be absent.
    :raise DecodeError: if the result element or a required child is missing.
    :return: the field values and the request id.
    """
    root = parse_xml(body)
    result = _result(root, action, body)
    values = {}
    for name in required:
        element = _child(result, name)
        if element is None:
            raise DecodeError(f"Missing {name} in {action}Result", body=body)
        values[name] = _text(element)
    for name in optional:
        values[name] = _text(_child(result, name))
    return values, request_id(root)


def parse_empty(body: bytes, action: str) -> Optional[str]:
    """Check an ``<action>Response`` without result fields; return the request id."""
    root = parse_xml(body)
    _expect_response(root, action, body)
    return request_id(root)


def parse_attributes(body: bytes, action: str, container: str = 'Attributes') -> Tuple[AttributePairs, Optional[str]]:
    """Extract ``<entry><key/><value/></entry>`` pairs from the result element.

    A missing container means no attributes were returned.
    """
    root = parse_xml(body)
    result = _result(root, action, body)
    pairs = []
    entries = _child(result, container)
    if entries is not None:
        for entry in entries:
            key = _text(_child(entry, 'key'))
            if key is None:
                raise DecodeError(f"Attribute entry without key in {action}Result", body=body)
            pairs.append((key, _text(_child(entry, 'value')) or ''))
    return pairs, request_id(root)

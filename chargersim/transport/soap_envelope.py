"""
Minimal OCPP 1.6 SOAP (OCPP-S) envelope codec.

Converts between camelCase payload dicts and SOAP 1.2 envelopes carrying the
WS-Addressing and ``chargeBoxIdentity`` headers OCPP-S relies on. Values are
sent as text; parsed values come back as strings.
"""

import uuid
import xml.etree.ElementTree as ET

SOAP_NS = "http://www.w3.org/2003/05/soap-envelope"
WSA_NS = "http://www.w3.org/2005/08/addressing"
CENTRAL_SYSTEM_NS = "urn://Ocpp/Cs/2015/10/"
CHARGE_POINT_NS = "urn://Ocpp/Cp/2015/10/"
ANONYMOUS = "http://www.w3.org/2005/08/addressing/anonymous"

CONTENT_TYPE = "application/soap+xml; charset=utf-8"

# Fields that are arrays in the OCPP schemas, so a single child still parses as a list
LIST_FIELDS = {
    "configurationKey",
    "unknownKey",
    "meterValue",
    "sampledValue",
    "transactionData",
    "localAuthorizationList",
    "chargingSchedulePeriod",
}

# Arrays only under a specific parent, (parent, child) by local name.
# ``key`` is scalar in ChangeConfiguration.req and in configurationKey entries.
NESTED_LIST_FIELDS = {
    ("getConfigurationRequest", "key"),
}

ET.register_namespace("s", SOAP_NS)
ET.register_namespace("wsa", WSA_NS)
ET.register_namespace("cs", CENTRAL_SYSTEM_NS)
ET.register_namespace("cp", CHARGE_POINT_NS)


class SoapFault(Exception):
    """Raised for envelopes that cannot be decoded or that carry a Fault."""


def element_name(action: str, response: bool = False) -> str:
    suffix = "Response" if response else "Request"
    return action[0].lower() + action[1:] + suffix


def action_name(tag: str) -> str:
    local = tag.split("}")[-1]
    for suffix in ("Request", "Response"):
        if local.endswith(suffix):
            local = local[: -len(suffix)]
            break
    return local[0].upper() + local[1:]


def build_request(action, payload, namespace, charge_box_identity, to, reply_to=None):
    """Build a request envelope for ``action`` addressed to ``to``."""
    message_id = f"urn:uuid:{uuid.uuid4()}"
    headers = [
        (f"{{{namespace}}}chargeBoxIdentity", charge_box_identity),
        (f"{{{WSA_NS}}}Action", f"/{action}"),
        (f"{{{WSA_NS}}}MessageID", message_id),
        (f"{{{WSA_NS}}}To", to),
    ]
    if reply_to:
        headers.append((f"{{{WSA_NS}}}From", {f"{{{WSA_NS}}}Address": reply_to}))
        headers.append((f"{{{WSA_NS}}}ReplyTo", {f"{{{WSA_NS}}}Address": reply_to}))
    else:
        headers.append((f"{{{WSA_NS}}}ReplyTo", {f"{{{WSA_NS}}}Address": ANONYMOUS}))
    return _envelope(headers, namespace, element_name(action), payload)


def build_response(action, payload, namespace, relates_to=None):
    headers = [(f"{{{WSA_NS}}}Action", f"/{action}Response")]
    if relates_to:
        headers.append((f"{{{WSA_NS}}}RelatesTo", relates_to))
    return _envelope(headers, namespace, element_name(action, response=True), payload)


def build_fault(reason: str, code: str = "Receiver"):
    envelope = ET.Element(f"{{{SOAP_NS}}}Envelope")
    body = ET.SubElement(envelope, f"{{{SOAP_NS}}}Body")
    fault = ET.SubElement(body, f"{{{SOAP_NS}}}Fault")
    code_el = ET.SubElement(ET.SubElement(fault, f"{{{SOAP_NS}}}Code"), f"{{{SOAP_NS}}}Value")
    code_el.text = f"s:{code}"
    text = ET.SubElement(ET.SubElement(fault, f"{{{SOAP_NS}}}Reason"), f"{{{SOAP_NS}}}Text")
    text.text = reason
    return ET.tostring(envelope, encoding="utf-8", xml_declaration=True)


def parse_envelope(data):
    """
    Decode a SOAP envelope.

    Returns:
        tuple: (action, payload, headers) where ``payload`` is a camelCase
        dict and ``headers`` maps header local names to their text.
    """
    try:
        envelope = ET.fromstring(data)
    except ET.ParseError as e:
        raise SoapFault(f"Malformed envelope: {e}") from e

    body = envelope.find(f"{{{SOAP_NS}}}Body")
    if body is None or len(body) == 0:
        raise SoapFault("Envelope has no body")

    content = body[0]
    if content.tag == f"{{{SOAP_NS}}}Fault":
        reason = content.findtext(f".//{{{SOAP_NS}}}Text") or "SOAP Fault"
        raise SoapFault(reason)

    headers = {}
    header = envelope.find(f"{{{SOAP_NS}}}Header")
    if header is not None:
        for child in header:
            local = child.tag.split("}")[-1]
            address = child.find(f"{{{WSA_NS}}}Address")
            headers[local] = address.text if address is not None else (child.text or "")

    payload = _decode(content)
    return action_name(content.tag), payload if isinstance(payload, dict) else {}, headers


def _envelope(headers, namespace, body_name, payload):
    envelope = ET.Element(f"{{{SOAP_NS}}}Envelope")
    header = ET.SubElement(envelope, f"{{{SOAP_NS}}}Header")
    for tag, value in headers:
        _encode(header, tag, value, namespace)
    body = ET.SubElement(envelope, f"{{{SOAP_NS}}}Body")
    content = ET.SubElement(body, f"{{{namespace}}}{body_name}")
    for key, value in payload.items():
        _encode(content, f"{{{namespace}}}{key}", value, namespace)
    return ET.tostring(envelope, encoding="utf-8", xml_declaration=True)


def _encode(parent, tag, value, namespace):
    if value is None:
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            _encode(parent, tag, item, namespace)
        return

    element = ET.SubElement(parent, tag)
    if isinstance(value, dict):
        for key, child in value.items():
            child_tag = key if key.startswith("{") else f"{{{namespace}}}{key}"
            _encode(element, child_tag, child, namespace)
    elif isinstance(value, bool):
        element.text = "true" if value else "false"
    else:
        element.text = str(value)


def _decode(element):
    if len(element) == 0:
        return element.text or ""

    parent = element.tag.split("}")[-1]
    result = {}
    for child in element:
        key = child.tag.split("}")[-1]
        value = _decode(child)
        if key in result:
            if not isinstance(result[key], list):
                result[key] = [result[key]]
            result[key].append(value)
        elif key in LIST_FIELDS or (parent, key) in NESTED_LIST_FIELDS:
            result[key] = [value]
        else:
            result[key] = value
    return result

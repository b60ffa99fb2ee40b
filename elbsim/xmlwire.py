"""XML rendering for the Elastic Load Balancing query API.

Success bodies look like::

    <CreateLoadBalancerResponse xmlns="...">
      <CreateLoadBalancerResult><DNSName>...</DNSName></CreateLoadBalancerResult>
      <ResponseMetadata><RequestId>req00000000</RequestId></ResponseMetadata>
    </CreateLoadBalancerResponse>

Lists become repeated ``<member>`` children of the list element.
"""
from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import Any

from .api_models import ErrorDetail, ErrorResponse, WireModel
from .errors import ELBError

NAMESPACE = "http://elasticloadbalancing.amazonaws.com/doc/2012-06-01/"
CONTENT_TYPE = "text/xml; charset=utf-8"

# Characters XML 1.0 cannot carry; written as U+FFFD.
INVALID_XML_CHARS_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def _append(parent: ET.Element, name: str, value: Any) -> None:
    el = ET.SubElement(parent, name)
    if isinstance(value, dict):
        for key, item in value.items():
            _append(el, key, item)
    elif isinstance(value, list):
        for item in value:
            _append(el, "member", item)
    elif isinstance(value, bool):
        el.text = "true" if value else "false"
    else:
        el.text = INVALID_XML_CHARS_RE.sub("\ufffd", str(value))


def _dump(model: WireModel) -> dict[str, Any]:
    return model.model_dump(by_alias=True, exclude_none=True)


def _serialize(root: ET.Element) -> bytes:
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def render_response(action: str, request_id: str, result: WireModel | None) -> bytes:
    root = ET.Element(f"{action}Response", {"xmlns": NAMESPACE})
    if result is not None:
        _append(root, f"{action}Result", _dump(result))
    _append(root, "ResponseMetadata", {"RequestId": request_id})
    return _serialize(root)


def render_error(error: ELBError, request_id: str) -> bytes:
    envelope = ErrorResponse(error=ErrorDetail(code=error.code, message=error.message), request_id=request_id)
    root = ET.Element("ErrorResponse", {"xmlns": NAMESPACE})
    for key, value in _dump(envelope).items():
        _append(root, key, value)
    return _serialize(root)

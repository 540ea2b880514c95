"""Content negotiation — JSON and XML encode/decode helpers.

``send`` picks a serialization from the request's ``Accept`` header and
writes the body with matching ``Content-Type`` and ``Content-Length``.
JSON is the default; ``application/xml`` and ``text/xml`` select XML.
Serialization failures become a 500 with the error text as the body.
"""

import dataclasses
import json as json_module
import logging
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from typing import Any

from switchyard.http.request import Request
from switchyard.http.writer import ResponseWriter, http_error

logger = logging.getLogger("switchyard.server")

JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "text/xml; charset=utf-8"
XML_MEDIA_TYPES = frozenset({"application/xml", "text/xml"})


async def _send_body(w: ResponseWriter, content: bytes, content_type: str) -> None:
    w.headers.set("content-length", str(len(content)))
    w.headers.set("content-type", content_type)
    await w.write(content)


# -- JSON --


async def send_json(w: ResponseWriter, value: Any) -> None:
    """Write *value* as indented JSON."""
    try:
        content = json_module.dumps(value, indent=2).encode("utf-8")
    except (TypeError, ValueError) as exc:
        logger.exception("JSON serialization failed")
        await http_error(w, str(exc), 500)
        return
    await _send_body(w, content, JSON_CONTENT_TYPE)


async def read_json(request: Request) -> Any:
    """Parse the request body as JSON.

    Raises ``json.JSONDecodeError`` on a malformed body.
    """
    return json_module.loads(await request.body())


# -- XML --


def _to_element(tag: str, value: Any) -> ET.Element:
    """Build an element tree from plain data.

    Mappings become child elements per key, sequences repeat an
    ``<item>`` child, dataclasses are treated as mappings, and scalars
    become text.
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)

    element = ET.Element(tag)
    match value:
        case None:
            pass
        case Mapping():
            for key, child in value.items():
                if not isinstance(key, str) or not key:
                    msg = f"xml: unsupported element name {key!r}"
                    raise TypeError(msg)
                element.append(_to_element(key, child))
        case list() | tuple():
            for child in value:
                element.append(_to_element("item", child))
        case bool():
            element.text = "true" if value else "false"
        case str() | int() | float():
            element.text = str(value)
        case _:
            msg = f"xml: unsupported type {type(value).__name__}"
            raise TypeError(msg)
    return element


def _from_element(element: ET.Element) -> Any:
    """Inverse of ``_to_element``: repeated child tags collect into lists."""
    children = list(element)
    if not children:
        return element.text or ""
    if all(child.tag == "item" for child in children):
        return [_from_element(child) for child in children]
    result: dict[str, Any] = {}
    for child in children:
        value = _from_element(child)
        if child.tag in result:
            existing = result[child.tag]
            if not isinstance(existing, list):
                result[child.tag] = [existing]
            result[child.tag].append(value)
        else:
            result[child.tag] = value
    return result


async def send_xml(w: ResponseWriter, value: Any, *, root: str = "response") -> None:
    """Write *value* as an XML document rooted at *root*."""
    try:
        content = ET.tostring(_to_element(root, value), encoding="utf-8", xml_declaration=False)
    except (TypeError, ValueError) as exc:
        logger.exception("XML serialization failed")
        await http_error(w, str(exc), 500)
        return
    await _send_body(w, content, XML_CONTENT_TYPE)


async def read_xml(request: Request) -> Any:
    """Parse the request body as XML into dicts, lists and strings.

    The mapping is lossy, so it does not invert ``send_xml``: every
    scalar comes back as ``str`` (``3`` as ``"3"``, ``True`` as
    ``"true"``, ``None`` as ``""``), and an element whose children are
    all ``<item>`` becomes a list, even when it was written from a
    mapping whose only key is ``item``.

    Raises ``xml.etree.ElementTree.ParseError`` on a malformed body.
    """
    return _from_element(ET.fromstring(await request.body()))


# -- Negotiation --


def preferred_format(accept: str | None) -> str:
    """Return ``"xml"`` or ``"json"`` for an ``Accept`` header value.

    Media types are considered in the order listed; the first one this
    module can produce wins. Anything else falls back to JSON.
    """
    for item in (accept or "").split(","):
        media_type = item.split(";", 1)[0].strip().lower()
        if media_type == JSON_CONTENT_TYPE:
            return "json"
        if media_type in XML_MEDIA_TYPES:
            return "xml"
    return "json"


async def send(w: ResponseWriter, request: Request, value: Any) -> None:
    """Write *value* in the format the client asked for."""
    if preferred_format(request.headers.get("accept")) == "xml":
        await send_xml(w, value)
    else:
        await send_json(w, value)

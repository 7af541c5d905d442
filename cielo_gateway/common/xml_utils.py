from __future__ import annotations

from xml.etree import ElementTree as ET

from .encoding import resolve_charset

_DECLARED_NAMES = {"cp1252": "windows-1252", "ascii": "US-ASCII"}


class XMLParseError(Exception):
    """Raised when inbound XML payloads cannot be parsed."""


def parse_xml_document(xml_text: str) -> ET.Element:
    text = (xml_text or "").lstrip("\ufeff")
    if not text.strip():
        raise XMLParseError("empty document")
    try:
        return ET.fromstring(text)
    except ET.ParseError as exc:
        raise XMLParseError(str(exc)) from exc


def serialize_xml_document(document: ET.Element | ET.ElementTree, charset: str = "utf-8") -> str:
    """Render a document as text with an XML declaration naming `charset`."""
    root = document.getroot() if isinstance(document, ET.ElementTree) else document
    body = ET.tostring(root, encoding="unicode")
    codec = resolve_charset(charset)
    declared = _DECLARED_NAMES.get(codec, codec.upper().replace("ISO8859", "ISO-8859"))
    return f'<?xml version="1.0" encoding="{declared}"?>\n{body}'


def local_name(tag: object) -> str:
    """Strip the `{namespace}` prefix ElementTree puts on qualified tags."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def find_child_text(element: ET.Element, name: str) -> str | None:
    """Return the stripped text of the first direct child called `name`, in any namespace."""
    for child in element:
        if local_name(child.tag) == name:
            text = "".join(child.itertext()).strip()
            return text or None
    return None


def flatten_xml(element: ET.Element, prefix: str | None = None) -> dict[str, str]:
    """Convert an XML tree into a flat dict preserving dotted paths."""

    tag = local_name(element.tag)
    path = tag if prefix is None else f"{prefix}.{tag}"
    data: dict[str, str] = {}

    # include attributes for traceability
    for attr_key, attr_value in element.attrib.items():
        data[f"{path}@{attr_key}"] = attr_value

    children = list(element)
    if not children:
        text = (element.text or "").strip()
        if text:
            data[path] = text
        return data

    for child in children:
        data.update(flatten_xml(child, path))

    return data


__all__ = [
    "XMLParseError",
    "parse_xml_document",
    "serialize_xml_document",
    "local_name",
    "find_child_text",
    "flatten_xml",
]

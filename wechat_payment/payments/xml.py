"""Flat XML envelopes used by the gateway."""

from collections.abc import Mapping
from typing import Any

from lxml import etree

from wechat_payment.core.exceptions import XmlBuildError, XmlParseError

ROOT_TAG = "xml"

# Whitespace and C0 control characters; block-cipher padding ends up here.
_TRAILING_JUNK = "".join(chr(c) for c in range(0x21))

_parser = etree.XMLParser(
    resolve_entities=False,
    no_network=True,
    remove_blank_text=True,
)


def build_xml(params: Mapping[str, Any], root: str = ROOT_TAG) -> str:
    """Serialize a flat parameter set under a single root element.

    ``None`` values are skipped, everything else is stringified.

    Raises:
        XmlBuildError: If a key is not a valid tag name or a value holds
            characters XML cannot represent
    """
    element = etree.Element(root)
    for key, value in params.items():
        if value is None:
            continue
        try:
            child = etree.SubElement(element, key)
            child.text = str(value)
        except ValueError as e:
            raise XmlBuildError(message=f"Cannot encode {key!r}: {e}", details={"field": key}) from e
    return etree.tostring(element, encoding="unicode")


def parse_xml(raw: str | bytes) -> dict[str, str]:
    """Parse a flat XML document into a string map.

    The root tag is not checked (``xml`` for envelopes, ``root`` for decrypted
    refund payloads). Text is stripped, repeated tags keep the last value.

    Raises:
        XmlParseError: If the document is empty or malformed
    """
    data = raw.encode("utf-8") if isinstance(raw, str) else raw
    data = data.strip(_TRAILING_JUNK.encode("ascii"))
    if not data:
        raise XmlParseError(raw, message="Empty XML document")

    try:
        root = etree.fromstring(data, parser=_parser)
    except (etree.XMLSyntaxError, ValueError) as e:
        raise XmlParseError(raw, message=f"Invalid XML: {e}") from e

    record: dict[str, str] = {}
    for child in root:
        if not isinstance(child.tag, str):
            # comments and processing instructions
            continue
        record[child.tag] = (child.text or "").strip()
    return record

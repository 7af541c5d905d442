from __future__ import annotations

import codecs
import re
import unicodedata

from unidecode import unidecode

REPLACEMENT_CHAR = "?"

_UTF8_BOM = codecs.BOM_UTF8
# A UTF-8 lead byte read as latin-1/cp1252 followed by a continuation byte read the same way
_MOJIBAKE_PATTERN = re.compile("[\u00c2-\u00f4][\u0080-\u00bf\u0152-\u0192\u02c6-\u02dc\u2013-\u2122]")
_MAX_REPAIR_PASSES = 3


def resolve_charset(name: str) -> str:
    """Return the canonical codec name, raising LookupError for unknown charsets."""
    return codecs.lookup(name).name


def _is_representable(text: str, codec: str) -> bool:
    try:
        text.encode(codec)
    except UnicodeEncodeError:
        return False
    return True


def _replace_char(char: str, codec: str) -> str:
    if _is_representable(char, codec):
        return char
    transliterated = unidecode(char)
    if transliterated and _is_representable(transliterated, codec):
        return transliterated
    return REPLACEMENT_CHAR


def normalize_outbound(text: str, charset: str) -> str:
    """
    Restrict text to the characters `charset` can represent.

    Text the charset can already encode is returned untouched. Otherwise the
    text is NFC-composed and every unrepresentable character is transliterated
    with unidecode, or replaced with "?" when no representable transliteration
    exists.
    """
    codec = resolve_charset(charset)
    if _is_representable(text, codec):
        return text
    composed = unicodedata.normalize("NFC", text)
    return "".join(_replace_char(char, codec) for char in composed)


def encode_outbound(text: str, charset: str) -> bytes:
    codec = resolve_charset(charset)
    return normalize_outbound(text, codec).encode(codec)


def decode_inbound(payload: bytes | str | None, charset: str = "utf-8") -> str:
    """Decode a response body, trying UTF-8, then `charset`, then cp1252 and latin-1."""
    if payload is None:
        return ""
    if isinstance(payload, str):
        return payload.lstrip("\ufeff")
    if payload.startswith(_UTF8_BOM):
        payload = payload[len(_UTF8_BOM):]

    candidates = ["utf-8", resolve_charset(charset), "cp1252"]
    for codec in dict.fromkeys(candidates):
        try:
            return payload.decode(codec)
        except UnicodeDecodeError:
            continue
    # latin-1 maps every byte
    return payload.decode("latin-1")


def repair_mojibake(text: str) -> str:
    """Undo UTF-8 text that was mis-decoded as latin-1 or cp1252."""
    for _ in range(_MAX_REPAIR_PASSES):
        if not _MOJIBAKE_PATTERN.search(text):
            break
        for codec in ("cp1252", "latin-1"):
            try:
                repaired = text.encode(codec).decode("utf-8")
            except UnicodeError:
                continue
            break
        else:
            break
        if repaired == text:
            break
        text = repaired
    return text


def normalize_inbound(payload: bytes | str | None, charset: str = "utf-8") -> str:
    return repair_mojibake(decode_inbound(payload, charset))


__all__ = [
    "REPLACEMENT_CHAR",
    "resolve_charset",
    "normalize_outbound",
    "encode_outbound",
    "decode_inbound",
    "repair_mojibake",
    "normalize_inbound",
]

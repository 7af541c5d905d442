import pytest

from cielo_gateway.common import encoding
from cielo_gateway.common.encoding import (
    decode_inbound,
    encode_outbound,
    normalize_inbound,
    normalize_outbound,
    repair_mojibake,
    resolve_charset,
)

LATIN1_PRINTABLE = "".join(chr(code) for code in [*range(0x20, 0x7F), *range(0xA0, 0x100)])


def test_resolve_charset_canonicalises_names():
    assert resolve_charset("UTF8") == "utf-8"
    assert resolve_charset("latin1") == "iso8859-1"
    with pytest.raises(LookupError):
        resolve_charset("klingon")


@pytest.mark.parametrize("charset", ["iso-8859-1", "utf-8"])
def test_printable_charset_characters_survive(charset):
    assert normalize_outbound(LATIN1_PRINTABLE, charset) == LATIN1_PRINTABLE


def test_unmappable_characters_are_transliterated():
    assert normalize_outbound("Total €", "iso-8859-1") == "Total EUR"
    assert normalize_outbound("Cartão “Visa”", "ascii") == 'Cartao "Visa"'


def test_decomposed_accents_are_composed_first():
    assert normalize_outbound("Sa\u0303o", "iso-8859-1") == "S\u00e3o"


def test_untransliterable_characters_become_question_marks(monkeypatch):
    monkeypatch.setattr(encoding, "unidecode", lambda text: "")

    first = normalize_outbound("valor €", "iso-8859-1")
    second = normalize_outbound("valor €", "iso-8859-1")

    assert first == second == "valor ?"


def test_encode_outbound_never_raises():
    assert encode_outbound("Ação €", "iso-8859-1") == "Ação EUR".encode("latin-1")


def test_decode_inbound_prefers_utf8():
    assert decode_inbound("Autorização".encode("utf-8")) == "Autorização"


def test_decode_inbound_falls_back_to_legacy_charsets():
    assert decode_inbound("Autorização".encode("latin-1")) == "Autorização"
    assert decode_inbound(b"\x81ok") == "\x81ok"


def test_decode_inbound_strips_bom_and_handles_none():
    assert decode_inbound(b"\xef\xbb\xbf<a/>") == "<a/>"
    assert decode_inbound("\ufeff<a/>") == "<a/>"
    assert decode_inbound(None) == ""


def test_repair_mojibake():
    assert repair_mojibake("TransaÃ§Ã£o") == "Transação"
    assert repair_mojibake("Transação") == "Transação"
    assert repair_mojibake("plain ascii") == "plain ascii"


def test_normalize_inbound_repairs_double_encoded_bytes():
    garbled = "Não autorizada".encode("utf-8").decode("latin-1").encode("utf-8")

    assert normalize_inbound(garbled) == "Não autorizada"

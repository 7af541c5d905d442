from xml.etree import ElementTree as ET

import pytest

from cielo_gateway.common.xml_utils import (
    XMLParseError,
    find_child_text,
    flatten_xml,
    local_name,
    parse_xml_document,
    serialize_xml_document,
)


def test_parse_xml_document():
    root = parse_xml_document('\ufeff<transacao id="1"><tid>42</tid></transacao>')

    assert root.tag == "transacao"
    assert root.find("tid").text == "42"


@pytest.mark.parametrize("payload", ["", "   ", "<unclosed>", "plain text"])
def test_parse_xml_document_rejects_invalid_input(payload):
    with pytest.raises(XMLParseError):
        parse_xml_document(payload)


def test_serialize_xml_document_declares_charset():
    root = ET.fromstring("<requisicao><valor>100</valor></requisicao>")

    assert serialize_xml_document(root) == (
        '<?xml version="1.0" encoding="UTF-8"?>\n<requisicao><valor>100</valor></requisicao>'
    )
    assert serialize_xml_document(ET.ElementTree(root), "latin1").startswith(
        '<?xml version="1.0" encoding="ISO-8859-1"?>'
    )
    assert 'encoding="windows-1252"' in serialize_xml_document(root, "cp1252")


def test_find_child_text_ignores_namespace():
    root = ET.fromstring(
        '<erro xmlns="http://ecommerce.cbmp.com.br"><codigo>001</codigo>'
        "<mensagem> Falha </mensagem><vazio/></erro>"
    )

    assert local_name(root.tag) == "erro"
    assert find_child_text(root, "codigo") == "001"
    assert find_child_text(root, "mensagem") == "Falha"
    assert find_child_text(root, "vazio") is None
    assert find_child_text(root, "ausente") is None


def test_flatten_xml_preserves_paths_and_attributes():
    root = ET.fromstring(
        '<transacao xmlns="http://ecommerce.cbmp.com.br" id="9">'
        "<autorizacao><codigo>4</codigo><lr>00</lr></autorizacao></transacao>"
    )

    assert flatten_xml(root) == {
        "transacao@id": "9",
        "transacao.autorizacao.codigo": "4",
        "transacao.autorizacao.lr": "00",
    }

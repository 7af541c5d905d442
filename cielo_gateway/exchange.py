from __future__ import annotations

import logging
import re
import time
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode
from xml.etree import ElementTree as ET

import httpx
from pydantic import AnyUrl, TypeAdapter, ValidationError

from cielo_gateway.common import GatewaySettings, append_exchange_log, get_settings
from cielo_gateway.common.encoding import (
    encode_outbound,
    normalize_inbound,
    normalize_outbound,
    resolve_charset,
)
from cielo_gateway.common.xml_utils import (
    XMLParseError,
    find_child_text,
    flatten_xml,
    local_name,
    parse_xml_document,
    serialize_xml_document,
)
from cielo_gateway.exceptions import InvalidArgumentError, ResourceNotFoundError
from cielo_gateway.tls import TlsMode, TlsVersion, build_ssl_context

logger = logging.getLogger(__name__)

CIELO_NAMESPACE = "http://ecommerce.cbmp.com.br"
MESSAGE_FIELD = "mensagem"
FALLBACK_ERROR_CODE = "001"
FALLBACK_ERROR_MESSAGE = "O XML informado não é válido"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
# Status recorded when the transport produced no HTTP status at all
TRANSPORT_FAILURE_STATUS = 400

_URL_ADAPTER = TypeAdapter(AnyUrl)
_WHITESPACE = re.compile(r"\s")

_OPTION_ALIASES = {
    "tls_version": "tls_version",
    "tlsVersion": "tls_version",
    "sslVersion": "tls_version",
    "target_charset": "target_charset",
    "targetCharset": "target_charset",
}


def validate_endpoint(url: object) -> str:
    """Return `url` if it is an absolute URL with a scheme and a host."""
    if not isinstance(url, str) or not url or not url.isascii() or _WHITESPACE.search(url):
        raise InvalidArgumentError("Invalid endpoint URL.", url)
    try:
        parsed = _URL_ADAPTER.validate_python(url)
    except ValidationError as exc:
        raise InvalidArgumentError("Invalid endpoint URL.", url) from exc
    if not parsed.host:
        raise InvalidArgumentError("Invalid endpoint URL.", url)
    return url


def build_fallback_document(charset: str = "utf-8") -> ET.Element:
    """Error document substituted when the gateway response is not valid XML."""
    root = ET.Element(f"{{{CIELO_NAMESPACE}}}erro", {"id": ""})
    ET.SubElement(root, f"{{{CIELO_NAMESPACE}}}codigo").text = FALLBACK_ERROR_CODE
    ET.SubElement(root, f"{{{CIELO_NAMESPACE}}}{MESSAGE_FIELD}").text = normalize_outbound(
        FALLBACK_ERROR_MESSAGE, charset
    )
    return root


class GatewayExchange:
    """
    A single request/response round trip with the Cielo XML webservice.

    Precondition failures (bad endpoint, missing request document) raise.
    Everything that goes wrong once the request is on its way (transport
    failure, unparsable body, an error reported by the gateway) is recorded
    in `errors` and `send` still returns normally, so callers must check
    `contains_error()` after every exchange.
    """

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        *,
        settings: GatewaySettings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.tls_version = TlsVersion(self.settings.tls_version)
        self.target_charset = resolve_charset(self.settings.target_charset)
        self._transport = transport

        self._endpoint: str | None = None
        self._outbound: ET.Element | None = None
        self._inbound: ET.Element | None = None
        self._raw_response: str | None = None
        self._status = 200
        self._info: dict[str, Any] = {}
        self._errors: list[str] = []

        self._apply_options(options)

    def _apply_options(self, options: Any) -> None:
        if options is None:
            return
        if not isinstance(options, Mapping):
            logger.warning("Ignoring exchange options of type %s", type(options).__name__)
            return

        for key, value in options.items():
            name = _OPTION_ALIASES.get(key)
            if name == "tls_version":
                if isinstance(value, bool) or not isinstance(value, int):
                    logger.warning("Ignoring non-integer TLS version option: %r", value)
                    continue
                try:
                    self.tls_version = TlsVersion(value)
                except ValueError:
                    logger.warning("Ignoring unsupported TLS version selector: %s", value)
            elif name == "target_charset":
                try:
                    self.target_charset = resolve_charset(value)
                except (LookupError, TypeError):
                    logger.warning("Ignoring unknown target charset: %r", value)
            else:
                logger.warning("Ignoring unknown exchange option: %r", key)

    @property
    def endpoint(self) -> str | None:
        return self._endpoint

    def set_endpoint(self, url: str) -> None:
        self._endpoint = validate_endpoint(url)

    @property
    def outbound_document(self) -> ET.Element | None:
        return self._outbound

    @outbound_document.setter
    def outbound_document(self, document: ET.Element | ET.ElementTree) -> None:
        if isinstance(document, ET.ElementTree):
            document = document.getroot()
        if not isinstance(document, ET.Element):
            raise TypeError(
                f"Outbound document must be an XML element, got {type(document).__name__}"
            )
        self._outbound = document

    @property
    def inbound_document(self) -> ET.Element | None:
        return self._inbound

    @inbound_document.setter
    def inbound_document(self, document: ET.Element | None) -> None:
        self._inbound = document

    @property
    def raw_response(self) -> str | None:
        return self._raw_response

    @property
    def status(self) -> int:
        return self._status

    @property
    def transport_info(self) -> dict[str, Any]:
        return dict(self._info)

    @property
    def errors(self) -> list[str]:
        return list(self._errors)

    def contains_error(self) -> bool:
        return len(self._errors) > 0

    @property
    def error_code(self) -> str | None:
        """`codigo` of an `<erro>` response document, if that is what came back."""
        if self._inbound is None or local_name(self._inbound.tag) != "erro":
            return None
        return find_child_text(self._inbound, "codigo")

    @property
    def response_data(self) -> dict[str, str]:
        if self._inbound is None:
            return {}
        return flatten_xml(self._inbound)

    def send(self, tls: TlsMode | str | bool | None = None) -> "GatewayExchange":
        """
        Post the outbound document and record the outcome.

        `tls` accepts a TlsMode or the legacy flag: an empty string or "off"
        leaves TLS options alone, any other string enables certificate and
        hostname verification pinned to `tls_version`.
        """
        if self._outbound is None:
            raise ResourceNotFoundError("outbound document is empty")
        if self._endpoint is None:
            raise ResourceNotFoundError("endpoint is not set")
        mode = TlsMode.coerce(tls)

        payload = normalize_outbound(
            serialize_xml_document(self._outbound, self.target_charset), self.target_charset
        )
        log_path = self.settings.exchange_log_path
        append_exchange_log(log_path, payload)

        response, info = self._post(payload, mode)
        raw_text = response.text if response is not None else str(info.get("error", ""))
        append_exchange_log(log_path, raw_text)

        self._info = info
        self._status = int(info.get("http_code") or TRANSPORT_FAILURE_STATUS)

        if self._status != TRANSPORT_FAILURE_STATUS and response is not None:
            self._read_response(response)
        else:
            self._raw_response = raw_text
            self._errors.append(raw_text)
        return self

    def _post(self, payload: str, mode: TlsMode) -> tuple[httpx.Response | None, dict[str, Any]]:
        content = urlencode({MESSAGE_FIELD: encode_outbound(payload, self.target_charset)}).encode("ascii")
        client_kwargs: dict[str, Any] = {
            "timeout": httpx.Timeout(self.settings.timeout, connect=self.settings.connect_timeout),
            "follow_redirects": False,
        }
        if self._transport is not None:
            client_kwargs["transport"] = self._transport

        logger.info("Sending exchange to %s (tls=%s)", self._endpoint, mode.enabled)
        started = time.perf_counter()
        try:
            if mode.enabled:
                client_kwargs["verify"] = build_ssl_context(
                    mode.version or self.tls_version, mode.ca_file or self.settings.ca_file
                )
            # A new client per exchange so no connection is reused
            with httpx.Client(**client_kwargs) as client:
                response = client.post(
                    self._endpoint,
                    content=content,
                    headers={"Content-Type": FORM_CONTENT_TYPE},
                )
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            logger.warning("Transport failure talking to %s: %s", self._endpoint, exc)
            return None, {
                "url": self._endpoint,
                "total_time": round(time.perf_counter() - started, 6),
                "size_upload": len(content),
                "error": str(exc) or type(exc).__name__,
            }

        logger.info("Gateway responded with HTTP %s", response.status_code)
        return response, {
            "url": str(response.url),
            "http_code": response.status_code,
            "content_type": response.headers.get("content-type"),
            "total_time": round(time.perf_counter() - started, 6),
            "size_upload": len(content),
            "size_download": len(response.content),
            "http_version": response.http_version,
        }

    def _read_response(self, response: httpx.Response) -> None:
        self._raw_response = normalize_inbound(response.content, self.target_charset)

        document: ET.Element | None = None
        try:
            document = parse_xml_document(self._raw_response)
        except XMLParseError as exc:
            logger.warning("Gateway response is not valid XML: %s", exc)
            self._errors.append(f"XMLParseError: {exc}")

        if document is None:
            document = build_fallback_document(self.target_charset)
        self._inbound = document

        message = find_child_text(document, MESSAGE_FIELD)
        if message:
            self._errors.append(message)


__all__ = [
    "GatewayExchange",
    "build_fallback_document",
    "validate_endpoint",
    "CIELO_NAMESPACE",
    "FALLBACK_ERROR_CODE",
    "FALLBACK_ERROR_MESSAGE",
]

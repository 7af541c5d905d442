#!/usr/bin/env python3
"""
Sends an XML request file to the Cielo webservice and prints the exchange.

Usage:
    python scripts/send_cielo_request.py request.xml https://qasecommerce.cielo.com.br/servicos/ecommwsec.do [--tls]

Environment variables:
    - CIELO_LOG_DIR - directory for cielo.log (optional)
    - CIELO_TARGET_CHARSET - request charset (default: utf-8)
    - CIELO_TLS_VERSION - TLS selector used with --tls (default: 6, TLS 1.2)
    - CIELO_CA_FILE - CA bundle used with --tls (optional)
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from xml.etree import ElementTree as ET

import httpx

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cielo_gateway import GatewayExchange, GatewayError, TlsMode  # noqa: E402
from cielo_gateway.common import GatewaySettings, configure_logging, get_settings  # noqa: E402


def run(
    xml_path: Path,
    endpoint: str,
    tls: bool = False,
    settings: GatewaySettings | None = None,
    transport: httpx.BaseTransport | None = None,
) -> int:
    """Send one exchange and print it; returns the process exit code."""
    settings = settings or get_settings()
    try:
        document = ET.parse(xml_path).getroot()
    except (OSError, ET.ParseError) as exc:
        print(f"Cannot read request document {xml_path}: {exc}")
        return 2

    exchange = GatewayExchange(settings=settings, transport=transport)
    try:
        exchange.set_endpoint(endpoint)
        exchange.outbound_document = document
        exchange.send(TlsMode.verified() if tls else TlsMode.disabled())
    except GatewayError as exc:
        print(f"Request not sent: {exc}")
        return 2

    print("=" * 60)
    print(f"Endpoint: {exchange.endpoint}")
    print(f"HTTP status: {exchange.status}")
    print(f"Total time: {exchange.transport_info.get('total_time')}")
    print("=" * 60)
    print(exchange.raw_response or "")
    print("=" * 60)

    if exchange.contains_error():
        print("Errors:")
        for error in exchange.errors:
            print(f"  - {error}")
        return 1

    for key, value in exchange.response_data.items():
        print(f"  {key}: {value}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Send an XML request to the Cielo webservice")
    parser.add_argument("xml_path", type=Path, help="Path to the request XML document")
    parser.add_argument("endpoint", help="Absolute URL of the webservice")
    parser.add_argument("--tls", action="store_true", help="Verify the server certificate and hostname")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)
    return run(args.xml_path, args.endpoint, tls=args.tls, settings=settings)


if __name__ == "__main__":
    sys.exit(main())

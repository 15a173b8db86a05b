#!/usr/bin/env python3
"""
AEDAT4 Inspector
================

Command-line inspection of an AEDAT4 file or live stream.

This script:
    1. Opens a file, Unix socket or TCP source
    2. Prints the stream table from the header
    3. Decodes packets (optionally up to --limit)
    4. Reports per-stream packet counts and decoder metrics

Usage:
    python -m aedat recording.aedat4
    python -m aedat --unix /tmp/dv-runtime.sock --limit 100
    python -m aedat --tcp 127.0.0.1:7777
"""

import argparse
import logging
import sys
from typing import List, Optional

from aedat import config
from aedat.decoder.packets import Decoder
from aedat.errors import ParseError


logger = logging.getLogger(__name__)


def _parse_address(value: str) -> tuple:
    host, separator, port = value.rpartition(":")
    if not separator or not host:
        raise argparse.ArgumentTypeError(f"expected HOST:PORT, got {value!r}")
    try:
        return host, int(port)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port in {value!r}") from None


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _open(args: argparse.Namespace, settings: config.Settings) -> Decoder:
    transport = settings.transport
    timeouts = {
        "connect_timeout": transport.connect_timeout_seconds,
        "read_timeout": transport.read_timeout_seconds,
    }
    if args.unix:
        return Decoder.from_unix_socket(args.unix, **timeouts)
    if args.tcp:
        host, port = args.tcp
        return Decoder.from_tcp(host, port, **timeouts)
    return Decoder.from_file(args.path)


def inspect(decoder: Decoder, limit: Optional[int] = None) -> dict:
    """
    Print the stream table and decode packets.

    Args:
        decoder: Open decoder
        limit: Stop after this many packets (None = until end of data)

    Returns:
        Final decoder metrics dict
    """
    print(f"{'id':>6}  {'type':<6}{'width':>7}{'height':>8}")
    for stream_id, stream in sorted(decoder.id_to_stream.items()):
        print(f"{stream_id:>6}  {str(stream.content):<6}{stream.width:>7}{stream.height:>8}")

    while limit is None or decoder.metrics.packets_decoded < limit:
        if decoder.read_packet() is None:
            break

    metrics = decoder.metrics.to_dict()
    print(f"packets: {metrics['packets_decoded']}  bytes: {metrics['bytes_read']}")
    for stream_id, packets in sorted(metrics["packets_per_stream"].items()):
        print(f"  stream {stream_id}: {packets} packets")
    return metrics


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="aedat-inspect",
        description="Inspect the streams and packets of an AEDAT4 source",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("path", nargs="?", help="AEDAT4 file")
    source.add_argument("--unix", metavar="PATH", help="Unix socket to connect to")
    source.add_argument(
        "--tcp", metavar="HOST:PORT", type=_parse_address, help="TCP server to connect to"
    )
    parser.add_argument("--config", help="Path to aedat.yaml")
    parser.add_argument(
        "--limit",
        type=_positive_int,
        default=None,
        help="Stop after this many packets, at least 1 (default: all)",
    )

    args = parser.parse_args(argv)

    try:
        if args.config:
            config.set_settings(config.load_config(args.config))
        settings = config.get_settings()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2
    config.setup_logging(settings)

    try:
        with _open(args, settings) as decoder:
            inspect(decoder, limit=args.limit)
    except ParseError as e:
        logger.error(f"Decoding failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

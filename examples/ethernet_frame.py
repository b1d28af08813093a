#!/usr/bin/env python3
"""Ethernet II frame example for pdukit.

This example demonstrates:
1. A payload sized from the frame's byte budget
2. A CRC-32 computed by a pre-encode hook and checked after decoding
3. Detecting a corrupted frame
"""

from __future__ import annotations

import logging

from pdukit import ChecksumMixin, NTuple, UInt8, UInt16, UInt32, ValidationError, decode, encode
from pdukit.logging_config import configure_logging


class EthernetFrame(ChecksumMixin):
    """Ethernet II frame.

    The payload has no length marker: when decoding, it is whatever the frame
    holds beyond the 14-byte header and the 4-byte CRC.
    """

    dstaddr: NTuple(UInt8, 6)
    srcaddr: NTuple(UInt8, 6)
    ethtype: UInt16 = 0x0800
    payload: bytes = b""
    crc: UInt32 = 0

    pdu_lengths = {"payload": lambda ctx: ctx.length - 18}


def format_mac(address: tuple[int, ...]) -> str:
    return ":".join(f"{octet:02x}" for octet in address)


def main() -> None:
    """Run the Ethernet frame example."""
    configure_logging(level=logging.DEBUG)

    print("=" * 60)
    print("pdukit Ethernet Frame Example")
    print("=" * 60)
    print()

    frame = EthernetFrame(
        dstaddr=(0xFF, 0xFF, 0xFF, 0xFF, 0xFF, 0xFF),
        srcaddr=(0x02, 0x00, 0x5E, 0x10, 0x00, 0x01),
        payload=b"Hello, Ethernet!",
    )

    print("1. Encoding frame...")
    data = encode(frame)
    print(f"   {format_mac(frame.srcaddr)} -> {format_mac(frame.dstaddr)}")
    print(f"   Frame size: {len(data)} bytes")
    print(f"   CRC-32: 0x{int.from_bytes(data[-4:], 'big'):08x}")
    print()

    print("2. Decoding frame...")
    decoded = decode(EthernetFrame, data)
    print(f"   Payload: {decoded.payload!r}")
    print()

    print("3. Corrupting one payload byte...")
    corrupted = bytearray(data)
    corrupted[20] ^= 0x01
    try:
        decode(EthernetFrame, bytes(corrupted))
    except ValidationError as e:
        print(f"   Rejected: {e}")
    print()

    print("=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""Basic usage example for pdukit.

This example demonstrates:
1. Defining a record with Pydantic and wire types
2. Encoding to exact wire bytes
3. Decoding back to a Pydantic model
4. Calculating record sizes
"""

from __future__ import annotations

from pdukit import BasePDU, Float32, Length, UInt8, UInt16, decode, encode, encoded_size, field_sizes


# Define a record class
class SensorReading(BasePDU):
    """Sensor telemetry packet.

    The sample list carries its own varint count; the label is padded to a
    fixed width.
    """

    sensor_id: UInt8
    sequence: UInt16
    temperature: Float32
    label: str
    samples: list[UInt16]

    pdu_lengths = {
        "label": Length.padded(8),
        "samples": Length.varint(),
    }


def main() -> None:
    """Run the basic usage example."""
    print("=" * 60)
    print("pdukit Basic Usage Example")
    print("=" * 60)
    print()

    # Create a record instance
    print("1. Creating a sensor reading...")
    msg = SensorReading(
        sensor_id=7,
        sequence=1024,
        temperature=21.5,
        label="probe-a",
        samples=[512, 513, 515],
    )

    print(f"   Sensor ID: {msg.sensor_id}")
    print(f"   Sequence: {msg.sequence}")
    print(f"   Temperature: {msg.temperature} C")
    print(f"   Label: {msg.label}")
    print(f"   Samples: {msg.samples}")
    print()

    # Analyze field sizes
    print("2. Analyzing field sizes...")
    sizes = field_sizes(msg)
    for field_name, size in sizes.items():
        print(f"   {field_name}: {size} bytes")
    print(f"   Total: {encoded_size(msg)} bytes")
    print()

    # Encode the record
    print("3. Encoding to wire bytes...")
    encoded_data = encode(msg)

    print(f"   Encoded size: {len(encoded_data)} bytes")
    print(f"   Hex: {encoded_data.hex(' ')}")
    print()

    # Decode the record
    print("4. Decoding from bytes...")
    decoded_msg = decode(SensorReading, encoded_data)

    print(f"   Sensor ID: {decoded_msg.sensor_id}")
    print(f"   Label: {decoded_msg.label}")
    print(f"   Samples: {decoded_msg.samples}")
    print()

    # Verify round-trip
    print("5. Verifying round-trip...")
    if decoded_msg == msg:
        print("   Round-trip successful! Records match.")
    else:
        print("   Round-trip failed! Records don't match.")
    print()

    print("=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()

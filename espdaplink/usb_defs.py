"""USB chapter 9 definitions: request codes, descriptor types and setup packets."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

USB_CLASS_MISCELLANEOUS_DEVICE = 0xEF
USB_MISC_SUBCLASS_COMMON = 0x02
USB_MISC_PROTOCOL_INTERFACE_ASSOCIATION_DESCRIPTOR = 0x01
USB_CLASS_VENDOR = 0xFF

LANGID_ENGLISH_US = 0x409

# Sizes of the fixed-layout descriptors.
DEVICE_DESCRIPTOR_SIZE = 18
DEVICE_QUALIFIER_DESCRIPTOR_SIZE = 10
CONFIGURATION_DESCRIPTOR_SIZE = 9
INTERFACE_DESCRIPTOR_SIZE = 9
ENDPOINT_DESCRIPTOR_SIZE = 7
INTERFACE_ASSOCIATION_DESCRIPTOR_SIZE = 8
STRING_DESCRIPTOR_HEADER_SIZE = 2

# Configuration descriptor bmAttributes bits.
CONFIG_ATTR_DEFAULT = 0x80
CONFIG_ATTR_SELF_POWERED = 0x40
CONFIG_ATTR_REMOTE_WAKEUP = 0x20

# GetStatus() bits for a device.
DEV_STATUS_SELF_POWERED = 0x01
DEV_STATUS_REMOTE_WAKEUP = 0x02

# Endpoint descriptor bmAttributes.
ENDPOINT_ATTR_CONTROL = 0x00
ENDPOINT_ATTR_ISOCHRONOUS = 0x01
ENDPOINT_ATTR_BULK = 0x02
ENDPOINT_ATTR_INTERRUPT = 0x03
ENDPOINT_ATTR_TYPE = 0x03
ENDPOINT_ATTR_NOSYNC = 0x00
ENDPOINT_ATTR_ASYNC = 0x04
ENDPOINT_ATTR_ADAPTIVE = 0x08
ENDPOINT_ATTR_SYNC = 0x0C
ENDPOINT_ATTR_SYNCTYPE = 0x0C
ENDPOINT_ATTR_DATA = 0x00
ENDPOINT_ATTR_FEEDBACK = 0x10
ENDPOINT_ATTR_IMPLICIT_FEEDBACK_DATA = 0x20
ENDPOINT_ATTR_USAGETYPE = 0x30


def endpoint_address_out(number: int) -> int:
    """Return the bEndpointAddress of an OUT endpoint."""
    return number


def endpoint_address_in(number: int) -> int:
    """Return the bEndpointAddress of an IN endpoint."""
    return 0x80 | number


class RequestDirection(IntEnum):
    """Bit 7 of bmRequestType."""

    OUT = 0x00
    IN = 0x80


class RequestKind(IntEnum):
    """Bits 6..5 of bmRequestType."""

    STANDARD = 0x00
    CLASS = 0x20
    VENDOR = 0x40


class Recipient(IntEnum):
    """Bits 4..0 of bmRequestType."""

    DEVICE = 0x00
    INTERFACE = 0x01
    ENDPOINT = 0x02
    OTHER = 0x03


class StandardRequest(IntEnum):
    """Standard request codes (bRequest)."""

    GET_STATUS = 0
    CLEAR_FEATURE = 1
    SET_FEATURE = 3
    SET_ADDRESS = 5
    GET_DESCRIPTOR = 6
    SET_DESCRIPTOR = 7
    GET_CONFIGURATION = 8
    SET_CONFIGURATION = 9
    GET_INTERFACE = 10
    SET_INTERFACE = 11
    SET_SYNCH_FRAME = 12


class HidRequest(IntEnum):
    """HID class request codes."""

    GET_REPORT = 0x01
    GET_IDLE = 0x02
    GET_PROTOCOL = 0x03
    SET_REPORT = 0x09
    SET_IDLE = 0x0A
    SET_PROTOCOL = 0x0B


class DescriptorType(IntEnum):
    """Descriptor type codes."""

    DEVICE = 1
    CONFIGURATION = 2
    STRING = 3
    INTERFACE = 4
    ENDPOINT = 5
    DEVICE_QUALIFIER = 6
    OTHER_SPEED_CONFIGURATION = 7
    INTERFACE_POWER = 8
    OTG = 9
    DEBUG = 10
    INTERFACE_ASSOCIATION = 11
    BOS = 15
    SUPERSPEED_USB_ENDPOINT_COMPANION = 48
    HID = 0x21
    HID_REPORT = 0x22


class FeatureSelector(IntEnum):
    """Standard feature selectors."""

    ENDPOINT_HALT = 0
    DEVICE_REMOTE_WAKEUP = 1
    TEST_MODE = 2


_SETUP = struct.Struct("<BBHHH")


@dataclass(frozen=True)
class SetupPacket:
    """The eight-byte setup stage of a control transfer."""

    request_type: int
    request: int
    value: int = 0
    index: int = 0
    length: int = 0

    SIZE = _SETUP.size

    @classmethod
    def from_bytes(cls, data: bytes) -> SetupPacket:
        """Parse a little-endian setup packet of exactly eight bytes."""
        if len(data) != _SETUP.size:
            raise ValueError(f"setup packet must be {_SETUP.size} bytes, got {len(data)}")
        return cls(*_SETUP.unpack(bytes(data)))

    def to_bytes(self) -> bytes:
        """Serialise to the eight-byte wire form."""
        return _SETUP.pack(self.request_type, self.request, self.value, self.index, self.length)

    @property
    def value_low(self) -> int:
        return self.value & 0xFF

    @property
    def value_high(self) -> int:
        return (self.value >> 8) & 0xFF

    @property
    def direction(self) -> RequestDirection:
        return RequestDirection(self.request_type & 0x80)

    @property
    def kind(self) -> int:
        return self.request_type & 0x60

    @property
    def recipient(self) -> int:
        return self.request_type & 0x1F
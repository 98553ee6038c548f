"""Standard USB descriptors of the CMSIS-DAP device: device, configuration, HID and strings."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from espdaplink.usb_defs import (
    CONFIGURATION_DESCRIPTOR_SIZE,
    DEVICE_DESCRIPTOR_SIZE,
    ENDPOINT_ATTR_BULK,
    ENDPOINT_ATTR_INTERRUPT,
    ENDPOINT_DESCRIPTOR_SIZE,
    INTERFACE_DESCRIPTOR_SIZE,
    LANGID_ENGLISH_US,
    STRING_DESCRIPTOR_HEADER_SIZE,
    DescriptorType,
    endpoint_address_in,
    endpoint_address_out,
)

VENDOR_ID = 0xC251
PRODUCT_ID = 0xF00A
DEVICE_RELEASE = 0x0100
MAX_PACKET0 = 64
MAX_PACKET0_USB3 = 0x09
SERIAL_STRING_ENABLED = 1

CONFIG_ATTRIBUTES = 0x80
CONFIG_MAX_POWER = 250

INTERFACE_NUMBER = 0
ALTERNATE_SETTING = 0
INTERFACE_CLASS_VENDOR = 0xFF
INTERFACE_CLASS_HID = 0x03
INTERFACE_SUBCLASS = 0x00
INTERFACE_PROTOCOL = 0x00

HID_ENDPOINT_SIZE = 64
HID_BCD = 0x0111
SUPERSPEED_COMPANION_SIZE = 6

MANUFACTURER_STRING = "KEIL - Tools By ARM"
PRODUCT_STRING = "LPC-Link-II"
SERIAL_NUMBER_STRING = "0001A0000000"
INTERFACE_STRING = "LPC-Link-II CMSIS-DAP"

_HID_REPORT = bytes(
    [
        0x06, 0x00, 0xFF,  # Usage Page (Vendor Defined 0xFF00)
        0x09, 0x01,        # Usage (0x01)
        0xA1, 0x01,        # Collection (Application)
        0x15, 0x00,        #   Logical Minimum (0)
        0x26, 0xFF, 0x00,  #   Logical Maximum (255)
        0x75, 0x08,        #   Report Size (8)
        0x95, 0xFF,        #   Report Count
        0x09, 0x01,        #   Usage (0x01)
        0x81, 0x02,        #   Input (Data,Var,Abs)
        0x95, 0xFF,        #   Report Count
        0x09, 0x01,        #   Usage (0x01)
        0x91, 0x02,        #   Output (Data,Var,Abs)
        0x95, 0x01,        #   Report Count (1)
        0x09, 0x01,        #   Usage (0x01)
        0xB1, 0x02,        #   Feature (Data,Var,Abs)
        0xC0,              # End Collection
    ]
)


@dataclass(frozen=True)
class DescriptorConfig:
    """Build-time choices that shape the descriptors.

    ``use_winusb`` selects the vendor-class bulk interface (CMSIS-DAP v2)
    instead of the HID interface; ``usb3`` advertises USB 3.0 and adds
    SuperSpeed endpoint companions; ``endpoint_size`` is the bulk
    wMaxPacketSize.
    """

    use_winusb: bool = True
    usb3: bool = False
    endpoint_size: int = 512

    @property
    def interface_class(self) -> int:
        return INTERFACE_CLASS_VENDOR if self.use_winusb else INTERFACE_CLASS_HID

    @property
    def bcd_usb(self) -> int:
        if not self.use_winusb:
            return 0x0200
        return 0x0300 if self.usb3 else 0x0210


def device_descriptor(config: DescriptorConfig) -> bytes:
    """Return the 18-byte standard device descriptor."""
    max_packet0 = MAX_PACKET0_USB3 if config.usb3 else MAX_PACKET0
    return struct.pack(
        "<BBHBBBBHHHBBBB",
        DEVICE_DESCRIPTOR_SIZE,
        DescriptorType.DEVICE,
        config.bcd_usb,
        0x00,
        0x00,
        0x00,
        max_packet0,
        VENDOR_ID,
        PRODUCT_ID,
        DEVICE_RELEASE,
        0x01,
        0x02,
        0x03 * SERIAL_STRING_ENABLED,
        0x01,
    )


def _endpoint(address: int, attributes: int, max_packet: int, interval: int) -> bytes:
    return struct.pack(
        "<BBBBHB",
        ENDPOINT_DESCRIPTOR_SIZE,
        DescriptorType.ENDPOINT,
        address,
        attributes,
        max_packet,
        interval,
    )


def _superspeed_companion() -> bytes:
    return struct.pack(
        "<BBBBH",
        SUPERSPEED_COMPANION_SIZE,
        DescriptorType.SUPERSPEED_USB_ENDPOINT_COMPANION,
        0x00,
        0x00,
        0x0000,
    )


def _interface_header(config: DescriptorConfig, endpoints: int, string_index: int) -> bytes:
    return bytes(
        [
            INTERFACE_DESCRIPTOR_SIZE,
            DescriptorType.INTERFACE,
            INTERFACE_NUMBER,
            ALTERNATE_SETTING,
            endpoints,
            config.interface_class,
            INTERFACE_SUBCLASS,
            INTERFACE_PROTOCOL,
            string_index,
        ]
    )


def interface_descriptor(config: DescriptorConfig) -> bytes:
    """Return the interface descriptor together with its class and endpoint descriptors."""
    if config.use_winusb:
        # Command OUT, response IN and SWO trace IN, all bulk.
        addresses = (endpoint_address_out(1), endpoint_address_in(1), endpoint_address_in(2))
        parts = [_interface_header(config, len(addresses), 0x02)]
        for address in addresses:
            parts.append(_endpoint(address, ENDPOINT_ATTR_BULK, config.endpoint_size, 0x00))
            if config.usb3:
                parts.append(_superspeed_companion())
        return b"".join(parts)

    hid = struct.pack(
        "<BBHBBBH",
        9,
        DescriptorType.HID,
        HID_BCD,
        0x00,
        0x01,
        DescriptorType.HID_REPORT,
        len(_HID_REPORT),
    )
    return b"".join(
        [
            _interface_header(config, 2, 0x00),
            hid,
            _endpoint(endpoint_address_in(1), ENDPOINT_ATTR_INTERRUPT, HID_ENDPOINT_SIZE, 0x01),
            _endpoint(endpoint_address_out(1), ENDPOINT_ATTR_INTERRUPT, HID_ENDPOINT_SIZE, 0x01),
        ]
    )


def config_descriptor(config: DescriptorConfig) -> bytes:
    """Return the 9-byte configuration descriptor header."""
    total = CONFIGURATION_DESCRIPTOR_SIZE + len(interface_descriptor(config))
    return struct.pack(
        "<BBHBBBBB",
        CONFIGURATION_DESCRIPTOR_SIZE,
        DescriptorType.CONFIGURATION,
        total,
        0x01,
        0x01,
        0x00,
        CONFIG_ATTRIBUTES,
        CONFIG_MAX_POWER,
    )


def hid_report_descriptor() -> bytes:
    """Return the vendor-defined HID report descriptor."""
    return _HID_REPORT


def language_descriptor() -> bytes:
    """Return string descriptor zero, listing US English as the only language."""
    return struct.pack("<BBH", 4, DescriptorType.STRING, LANGID_ENGLISH_US)


def string_descriptor(text: str) -> bytes:
    """Return a UTF-16LE string descriptor for ``text``."""
    encoded = text.encode("utf-16-le")
    length = STRING_DESCRIPTOR_HEADER_SIZE + len(encoded)
    if length > 0xFF:
        raise ValueError(f"string descriptor of {length} bytes exceeds 255")
    return bytes([length, DescriptorType.STRING]) + encoded


def static_string_descriptors() -> tuple[bytes, ...]:
    """Return language, manufacturer, product, serial number and interface strings, in index order."""
    return (
        language_descriptor(),
        string_descriptor(MANUFACTURER_STRING),
        string_descriptor(PRODUCT_STRING),
        string_descriptor(SERIAL_NUMBER_STRING),
        string_descriptor(INTERFACE_STRING),
    )
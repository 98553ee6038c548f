"""Microsoft OS 2.0 descriptor set and the BOS descriptor that advertises it."""

from __future__ import annotations

import struct
import uuid

MS_OS20_SET_LENGTH = 0xA2
BOS_LENGTH = 0x21
BOS_LENGTH_USB3 = 0x32
VENDOR_CODE = 0x01

# Platform capability BOS descriptor.
DEVICE_CAPABILITY_TYPE_PLATFORM = 5
DEVICE_CAPABILITY_TYPE_USB2_0_EXTENSION = 2
DEVICE_CAPABILITY_TYPE_SUPERSPEED_USB = 3

PLATFORM_CAPABILITY_UUID = uuid.UUID("D8DD60DF-4589-4CC7-9CD2-659D9E648A9F")

# wIndex values of the vendor request.
MS_OS_20_DESCRIPTOR_INDEX = 7
MS_OS_20_SET_ALT_ENUMERATION = 8

# wDescriptorType values.
MS_OS_20_SET_HEADER_DESCRIPTOR = 0x00
MS_OS_20_SUBSET_HEADER_CONFIGURATION = 0x01
MS_OS_20_SUBSET_HEADER_FUNCTION = 0x02
MS_OS_20_FEATURE_COMPATIBLE_ID = 0x03
MS_OS_20_FEATURE_REG_PROPERTY = 0x04
MS_OS_20_FEATURE_MIN_RESUME_TIME = 0x05
MS_OS_20_FEATURE_MODEL_ID = 0x06
MS_OS_20_FEATURE_CCGP_DEVICE = 0x07

# Wireless USB extension descriptor types.
USB_DESCRIPTOR_TYPE_SECURITY = 12
USB_DESCRIPTOR_TYPE_KEY = 13
USB_DESCRIPTOR_TYPE_ENCRYPTION_TYPE = 14
USB_DESCRIPTOR_TYPE_BOS = 15
USB_DESCRIPTOR_TYPE_DEVICE_CAPABILITY = 16
USB_DESCRIPTOR_TYPE_WIRELESS_ENDPOINT_COMPANION = 17

# Extended compat ID feature descriptor.
USB_MS_EXTENDED_COMPAT_ID_VERSION = 0x0100
USB_MS_EXTENDED_COMPAT_ID_TYPE = 0x04
COMPATID_NONE = b"\x00" * 8
SUBCOMPATID_NONE = b"\x00" * 8
COMPATID_WINUSB = b"WINUSB\x00\x00"
COMPATID_RNDIS = b"RNDIS\x00\x00\x00"
COMPATID_PTP = b"PTP\x00\x00\x00\x00\x00"
COMPATID_MTP = b"MTP\x00\x00\x00\x00\x00"
COMPATID_BLUETOOTH = b"BLUTUTH\x00"
SUBCOMPATID_BT_V11 = b"11\x00\x00\x00\x00\x00\x00"
SUBCOMPATID_BT_V12 = b"12\x00\x00\x00\x00\x00\x00"
SUBCOMPATID_BT_V20EDR = b"EDR\x00\x00\x00\x00\x00"

# Windows 8.1 (NTDDI_WINBLUE).
WINDOWS_VERSION = 0x06030000

REG_MULTI_SZ = 7
DEVICE_INTERFACE_GUIDS_NAME = "DeviceInterfaceGUIDs"
CMSIS_DAP_V2_GUID = "{CDB3B5AD-293B-4663-AA36-1AAE46463776}"


def _utf16z(text: str, terminators: int = 1) -> bytes:
    return (text + "\x00" * terminators).encode("utf-16-le")


def _compatible_id() -> bytes:
    body = COMPATID_WINUSB + SUBCOMPATID_NONE
    return struct.pack("<HH", 4 + len(body), MS_OS_20_FEATURE_COMPATIBLE_ID) + body


def _registry_property() -> bytes:
    name = _utf16z(DEVICE_INTERFACE_GUIDS_NAME)
    value = _utf16z(CMSIS_DAP_V2_GUID, terminators=2)
    body = (
        struct.pack("<HH", REG_MULTI_SZ, len(name))
        + name
        + struct.pack("<H", len(value))
        + value
    )
    return struct.pack("<HH", 4 + len(body), MS_OS_20_FEATURE_REG_PROPERTY) + body


def ms_os20_descriptor_set() -> bytes:
    """Return the descriptor set that binds WinUSB with the CMSIS-DAP v2 GUID."""
    features = _compatible_id() + _registry_property()
    header_size = 10
    total = header_size + len(features)
    header = struct.pack(
        "<HHIH", header_size, MS_OS_20_SET_HEADER_DESCRIPTOR, WINDOWS_VERSION, total
    )
    return header + features


def _platform_capability() -> bytes:
    body = (
        bytes([USB_DESCRIPTOR_TYPE_DEVICE_CAPABILITY, DEVICE_CAPABILITY_TYPE_PLATFORM, 0x00])
        + PLATFORM_CAPABILITY_UUID.bytes_le
        + struct.pack("<IHBB", WINDOWS_VERSION, len(ms_os20_descriptor_set()), VENDOR_CODE, 0)
    )
    return bytes([1 + len(body)]) + body


def _usb3_capabilities() -> bytes:
    usb2_extension = bytes(
        [7, USB_DESCRIPTOR_TYPE_DEVICE_CAPABILITY, DEVICE_CAPABILITY_TYPE_USB2_0_EXTENSION]
    ) + struct.pack("<I", 0x02)
    superspeed = bytes(
        [10, USB_DESCRIPTOR_TYPE_DEVICE_CAPABILITY, DEVICE_CAPABILITY_TYPE_SUPERSPEED_USB, 0x00]
    ) + struct.pack("<HBBH", 0x0008, 0x03, 0x00, 0x0000)
    return usb2_extension + superspeed


def bos_descriptor(usb3: bool = False) -> bytes:
    """Return the BOS descriptor, with USB 3.0 capabilities when ``usb3`` is set."""
    if usb3:
        capabilities = _usb3_capabilities() + _platform_capability()
        count = 3
    else:
        capabilities = _platform_capability()
        count = 1
    header_size = 5
    total = header_size + len(capabilities)
    return struct.pack("<BBHB", header_size, USB_DESCRIPTOR_TYPE_BOS, total, count) + capabilities
"""Answers to the standard, class and vendor control requests on endpoint 0."""

from __future__ import annotations

import logging

from espdaplink.descriptors import (
    DescriptorConfig,
    config_descriptor,
    device_descriptor,
    hid_report_descriptor,
    interface_descriptor,
    language_descriptor,
    string_descriptor,
)
from espdaplink.msos20 import (
    MS_OS_20_DESCRIPTOR_INDEX,
    MS_OS_20_SET_ALT_ENUMERATION,
    bos_descriptor,
    ms_os20_descriptor_set,
)
from espdaplink.usb_defs import (
    CONFIGURATION_DESCRIPTOR_SIZE,
    DEVICE_QUALIFIER_DESCRIPTOR_SIZE,
    DescriptorType,
    HidRequest,
    SetupPacket,
    StandardRequest,
)

logger = logging.getLogger(__name__)

# String table served by GET_DESCRIPTOR(STRING); index 0 is the language list.
STRINGS: tuple[str | None, ...] = (
    None,
    "windowsair",
    "Wireless ESP CMSIS-DAP",
    "1234",
)

UNSUPPORTED_STRING_INDEX = 0xEE

_EMPTY = b""

_DEVICE_OUT_ACKS = frozenset(
    {
        StandardRequest.CLEAR_FEATURE,
        StandardRequest.SET_FEATURE,
        StandardRequest.SET_ADDRESS,
        StandardRequest.SET_DESCRIPTOR,
        StandardRequest.SET_CONFIGURATION,
    }
)
_INTERFACE_OUT_ACKS = frozenset(
    {
        StandardRequest.CLEAR_FEATURE,
        StandardRequest.SET_FEATURE,
        StandardRequest.SET_INTERFACE,
    }
)
_ENDPOINT_OUT_ACKS = frozenset({StandardRequest.CLEAR_FEATURE, StandardRequest.SET_FEATURE})
_INTERFACE_IN_ACKS = frozenset(
    {
        StandardRequest.GET_INTERFACE,
        StandardRequest.SET_SYNCH_FRAME,
        StandardRequest.GET_STATUS,
    }
)


class UnsupportedStringIndex(LookupError):
    """A string descriptor was requested for an index that has no string."""


def _unknown(request: SetupPacket) -> None:
    logger.debug(
        "USB unknown request, bmRequestType:%d, bRequest:%d, wIndex:%d",
        request.request_type,
        request.request,
        request.index,
    )
    return None


def _string(request: SetupPacket) -> bytes:
    index = request.value_low
    if index == 0:
        return language_descriptor()
    if index == UNSUPPORTED_STRING_INDEX:
        logger.debug("unsupported string descriptor %#x", index)
        return _EMPTY
    if index >= len(STRINGS) or STRINGS[index] is None:
        raise UnsupportedStringIndex(f"no string descriptor at index {index}")
    return string_descriptor(STRINGS[index])


def handle_get_descriptor(
    request: SetupPacket, data_length: int, config: DescriptorConfig | None = None
) -> bytes | None:
    """Answer a GET_DESCRIPTOR request.

    Returns the data stage to send back (possibly empty), or ``None`` when the
    request gets no reply.
    """
    config = config or DescriptorConfig()
    kind = request.value_high

    if kind == DescriptorType.DEVICE:
        return device_descriptor(config)
    if kind == DescriptorType.CONFIGURATION:
        header = config_descriptor(config)
        if data_length == CONFIGURATION_DESCRIPTOR_SIZE:
            return header
        return header + interface_descriptor(config)
    if kind == DescriptorType.STRING:
        return _string(request)
    if kind in (
        DescriptorType.INTERFACE,
        DescriptorType.ENDPOINT,
        DescriptorType.OTHER_SPEED_CONFIGURATION,
        DescriptorType.INTERFACE_POWER,
    ):
        logger.debug("descriptor type %#x is not provided", kind)
        return _EMPTY
    if kind == DescriptorType.DEVICE_QUALIFIER:
        return bytes(DEVICE_QUALIFIER_DESCRIPTOR_SIZE)
    if config.use_winusb and kind == DescriptorType.BOS:
        bos = bos_descriptor(config.usb3)
        return bos[: min(len(bos), request.length)]
    if not config.use_winusb and kind == DescriptorType.HID_REPORT:
        return hid_report_descriptor()

    logger.debug(
        "USB unknown Get Descriptor requested: low %d, high %d",
        request.value_low,
        request.value_high,
    )
    return None


def _device_in(request: SetupPacket, data_length: int, config: DescriptorConfig) -> bytes | None:
    if request.request == StandardRequest.GET_DESCRIPTOR:
        return handle_get_descriptor(request, data_length, config)
    if request.request in (StandardRequest.GET_CONFIGURATION, StandardRequest.GET_STATUS):
        return _EMPTY
    return _unknown(request)


def handle_control_request(
    request: SetupPacket, data_length: int, config: DescriptorConfig | None = None
) -> bytes | None:
    """Answer a control request on endpoint 0.

    Returns the data stage to send back (possibly empty), or ``None`` when the
    request gets no reply.
    """
    config = config or DescriptorConfig()
    request_type = request.request_type
    code = request.request

    if request_type == 0x00:
        return _EMPTY if code in _DEVICE_OUT_ACKS else _unknown(request)
    if request_type == 0x01:
        return _EMPTY if code in _INTERFACE_OUT_ACKS else _unknown(request)
    if request_type == 0x02:
        return _EMPTY if code in _ENDPOINT_OUT_ACKS else _unknown(request)
    if request_type == 0x80 or (request_type == 0x81 and not config.use_winusb):
        return _device_in(request, data_length, config)
    if request_type == 0x81:
        return _EMPTY if code in _INTERFACE_IN_ACKS else _unknown(request)
    if request_type == 0x82:
        return _EMPTY if code == StandardRequest.GET_STATUS else _unknown(request)
    if request_type == 0xC0:
        if request.index == MS_OS_20_DESCRIPTOR_INDEX:
            return ms_os20_descriptor_set()
        if request.index == MS_OS_20_SET_ALT_ENUMERATION:
            logger.debug("set alternate enumeration requested; this should not happen")
            return None
        return _unknown(request)
    if request_type == 0x21:
        return _EMPTY if code == HidRequest.SET_IDLE else _unknown(request)
    return _unknown(request)
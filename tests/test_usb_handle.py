import pytest

from espdaplink.descriptors import (
    DescriptorConfig,
    config_descriptor,
    device_descriptor,
    hid_report_descriptor,
    interface_descriptor,
    language_descriptor,
    string_descriptor,
)
from espdaplink.msos20 import bos_descriptor, ms_os20_descriptor_set
from espdaplink.usb_defs import DescriptorType, HidRequest, SetupPacket, StandardRequest
from espdaplink.usb_handle import (
    UnsupportedStringIndex,
    handle_control_request,
    handle_get_descriptor,
)

WINUSB = DescriptorConfig(use_winusb=True)
HID = DescriptorConfig(use_winusb=False)


def get_descriptor(kind, index=0, length=0xFFFF, request_type=0x80):
    return SetupPacket(
        request_type, StandardRequest.GET_DESCRIPTOR, (int(kind) << 8) | index, 0, length
    )


def test_device_descriptor():
    result = handle_control_request(get_descriptor(DescriptorType.DEVICE), 18, WINUSB)
    assert result == device_descriptor(WINUSB)
    assert result[0] == 18


def test_config_header_only_when_nine_bytes_asked():
    result = handle_get_descriptor(get_descriptor(DescriptorType.CONFIGURATION), 9, WINUSB)
    assert result == config_descriptor(WINUSB)


def test_full_configuration():
    result = handle_get_descriptor(get_descriptor(DescriptorType.CONFIGURATION), 255, WINUSB)
    assert result == config_descriptor(WINUSB) + interface_descriptor(WINUSB)
    assert int.from_bytes(result[2:4], "little") == len(result)


def test_language_string():
    result = handle_get_descriptor(get_descriptor(DescriptorType.STRING, 0), 255, WINUSB)
    assert result == language_descriptor()


def test_product_string():
    result = handle_get_descriptor(get_descriptor(DescriptorType.STRING, 2), 255, WINUSB)
    assert result == string_descriptor("Wireless ESP CMSIS-DAP")
    assert result[0] == len(result)
    assert result[2:].decode("utf-16-le") == "Wireless ESP CMSIS-DAP"


def test_unsupported_string_gets_empty_reply():
    result = handle_get_descriptor(get_descriptor(DescriptorType.STRING, 0xEE), 255, WINUSB)
    assert result == b""


def test_missing_string_index_raises():
    with pytest.raises(UnsupportedStringIndex):
        handle_get_descriptor(get_descriptor(DescriptorType.STRING, 9), 255, WINUSB)


def test_device_qualifier_is_zeroed():
    result = handle_get_descriptor(get_descriptor(DescriptorType.DEVICE_QUALIFIER), 10, WINUSB)
    assert result == bytes(10)


@pytest.mark.parametrize(
    "kind",
    [
        DescriptorType.INTERFACE,
        DescriptorType.ENDPOINT,
        DescriptorType.OTHER_SPEED_CONFIGURATION,
        DescriptorType.INTERFACE_POWER,
    ],
)
def test_unprovided_descriptors_get_empty_reply(kind):
    assert handle_get_descriptor(get_descriptor(kind), 0, WINUSB) == b""


def test_bos_truncated_to_requested_length():
    result = handle_get_descriptor(get_descriptor(DescriptorType.BOS, length=5), 5, WINUSB)
    assert result == bos_descriptor(False)[:5]


def test_bos_full():
    result = handle_get_descriptor(get_descriptor(DescriptorType.BOS), 255, WINUSB)
    assert result == bos_descriptor(False)


def test_bos_usb3():
    config = DescriptorConfig(use_winusb=True, usb3=True)
    result = handle_get_descriptor(get_descriptor(DescriptorType.BOS), 255, config)
    assert result == bos_descriptor(True)


def test_bos_not_served_in_hid_mode():
    assert handle_get_descriptor(get_descriptor(DescriptorType.BOS), 255, HID) is None


def test_hid_report_in_hid_mode():
    result = handle_get_descriptor(get_descriptor(DescriptorType.HID_REPORT), 255, HID)
    assert result == hid_report_descriptor()


def test_hid_report_not_served_in_winusb_mode():
    assert handle_get_descriptor(get_descriptor(DescriptorType.HID_REPORT), 255, WINUSB) is None


def test_msos20_descriptor_set():
    request = SetupPacket(0xC0, 0x01, 0, 7, 0xA2)
    assert handle_control_request(request, 0xA2, WINUSB) == ms_os20_descriptor_set()


def test_msos20_alt_enumeration_gets_no_reply():
    request = SetupPacket(0xC0, 0x01, 0, 8, 0)
    assert handle_control_request(request, 0, WINUSB) is None


@pytest.mark.parametrize(
    "request_type, code",
    [
        (0x00, StandardRequest.SET_ADDRESS),
        (0x00, StandardRequest.SET_CONFIGURATION),
        (0x01, StandardRequest.SET_INTERFACE),
        (0x02, StandardRequest.CLEAR_FEATURE),
        (0x80, StandardRequest.GET_STATUS),
        (0x80, StandardRequest.GET_CONFIGURATION),
        (0x82, StandardRequest.GET_STATUS),
        (0x21, HidRequest.SET_IDLE),
    ],
)
def test_acknowledged_requests(request_type, code):
    assert handle_control_request(SetupPacket(request_type, code), 0, WINUSB) == b""


@pytest.mark.parametrize(
    "request_type, code",
    [
        (0x00, StandardRequest.GET_STATUS),
        (0x02, StandardRequest.SET_INTERFACE),
        (0x40, 0x01),
    ],
)
def test_unknown_requests_get_no_reply(request_type, code):
    assert handle_control_request(SetupPacket(request_type, code), 0, WINUSB) is None


def test_interface_in_get_descriptor_in_hid_mode():
    request = get_descriptor(DescriptorType.HID_REPORT, request_type=0x81)
    assert handle_control_request(request, 255, HID) == hid_report_descriptor()


def test_interface_in_get_descriptor_ignored_in_winusb_mode():
    request = get_descriptor(DescriptorType.DEVICE, request_type=0x81)
    assert handle_control_request(request, 18, WINUSB) is None


def test_interface_in_get_interface_in_winusb_mode():
    request = SetupPacket(0x81, StandardRequest.GET_INTERFACE)
    assert handle_control_request(request, 1, WINUSB) == b""
import pytest

from espdaplink.usb_defs import (
    DescriptorType,
    RequestDirection,
    SetupPacket,
    StandardRequest,
    endpoint_address_in,
    endpoint_address_out,
)


def test_get_device_descriptor_parses():
    raw = bytes([0x80, 0x06, 0x00, 0x01, 0x00, 0x00, 0x12, 0x00])
    packet = SetupPacket.from_bytes(raw)
    assert packet.request_type == 0x80
    assert packet.request == StandardRequest.GET_DESCRIPTOR
    assert packet.value_high == DescriptorType.DEVICE
    assert packet.value_low == 0
    assert packet.length == 0x12
    assert packet.direction is RequestDirection.IN


def test_round_trip():
    packet = SetupPacket(0xC0, 0x01, 0x0203, 7, 0xA2)
    assert SetupPacket.from_bytes(packet.to_bytes()) == packet


def test_to_bytes_is_little_endian():
    packet = SetupPacket(0x00, StandardRequest.SET_CONFIGURATION, 0x0001, 0, 0)
    assert packet.to_bytes() == bytes([0x00, 0x09, 0x01, 0x00, 0x00, 0x00, 0x00, 0x00])


@pytest.mark.parametrize("length", [0, 7, 9])
def test_wrong_length_rejected(length):
    with pytest.raises(ValueError):
        SetupPacket.from_bytes(bytes(length))


def test_recipient_and_kind():
    packet = SetupPacket(0xC1, 0)
    assert packet.recipient == 0x01
    assert packet.kind == 0x40


def test_descriptor_type_values():
    assert DescriptorType(15) is DescriptorType.BOS
    assert DescriptorType(0x22) is DescriptorType.HID_REPORT


def test_endpoint_addresses():
    assert endpoint_address_in(2) == 0x82
    assert endpoint_address_out(1) == 0x01
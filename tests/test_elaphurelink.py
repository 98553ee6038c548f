import struct

import pytest

from espdaplink.elaphurelink import (
    DAP_VERSION,
    LINK_IDENTIFIER,
    ElaphureLink,
    HandshakeError,
    handshake_response,
)


def _hello(identifier=LINK_IDENTIFIER, command=0, version=1):
    return struct.pack(">III", identifier, command, version)


def _echo(request):
    return b"\x00" + request


class FakeSocket:
    def __init__(self, chunks):
        self.chunks = [bytes(c) for c in chunks]
        self.sent = []

    def recv(self, size):
        if not self.chunks:
            return b""
        chunk = self.chunks[0]
        head, rest = chunk[:size], chunk[size:]
        if rest:
            self.chunks[0] = rest
        else:
            self.chunks.pop(0)
        return head

    def sendall(self, data):
        self.sent.append(bytes(data))


def test_handshake_reply():
    assert handshake_response(_hello()) == struct.pack(
        ">III", LINK_IDENTIFIER, 0, DAP_VERSION
    )


@pytest.mark.parametrize(
    "packet",
    [_hello()[:11], _hello(identifier=0x12345678), _hello(command=1)],
)
def test_bad_handshake(packet):
    with pytest.raises(HandshakeError):
        handshake_response(packet)


def test_plain_dap_packet_goes_to_executor():
    link = ElaphureLink(_echo)
    assert link.process(b"\x00\x01") == b"\x00\x00\x01"


def test_native_passthrough_frames_response():
    link = ElaphureLink(_echo)
    packet = bytes([0x88, 0x01, 0x00, 0x02, 0x05, 0x06])
    assert link.process(packet) == bytes([0x88, 0x00, 0x00, 0x03, 0x00, 0x05, 0x06])


def test_scope_enter_and_exit():
    link = ElaphureLink(_echo)
    assert link.process(bytes([0x88, 0x02, 0x00, 0x00])) == b"\x88\x00\x00\x00"
    assert link.is_async is True
    assert link.process(bytes([0x88, 0x03, 0x00, 0x00])) == b"\x88\x00\x00\x00"
    assert link.is_async is False


def test_unknown_vendor_type_gives_nothing():
    link = ElaphureLink(_echo)
    assert link.vendor_command(bytes([0x7F, 0x00, 0x00])) == b""


def test_serve_handshake_then_plain_command():
    sock = FakeSocket([_hello(), b"\x00\x04"])
    ElaphureLink(_echo).serve(sock)
    assert sock.sent[0] == handshake_response(_hello())
    assert sock.sent[1:] == [b"\x00\x00\x04"]


def test_serve_vendor_frames_split_across_reads():
    frame_a = bytes([0x88, 0x01, 0x00, 0x01, 0x09])
    frame_b = bytes([0x88, 0x01, 0x00, 0x02, 0x0A, 0x0B])
    sock = FakeSocket([_hello(), frame_a + frame_b[:2], frame_b[2:]])
    ElaphureLink(_echo).serve(sock)
    assert sock.sent[1:] == [
        bytes([0x88, 0x00, 0x00, 0x02, 0x00, 0x09]),
        bytes([0x88, 0x00, 0x00, 0x03, 0x00, 0x0A, 0x0B]),
    ]


def test_serve_async_scope_reads_frames():
    enter = bytes([0x88, 0x02, 0x00, 0x00])
    cmd = bytes([0x88, 0x01, 0x00, 0x01, 0x07])
    leave = bytes([0x88, 0x03, 0x00, 0x00])
    sock = FakeSocket([_hello(), enter, cmd + leave])
    link = ElaphureLink(_echo)
    link.serve(sock)
    assert sock.sent[1:] == [
        b"\x88\x00\x00\x00",
        bytes([0x88, 0x00, 0x00, 0x02, 0x00, 0x07]),
        b"\x88\x00\x00\x00",
    ]
    assert link.is_async is False


def test_serve_rejects_bad_handshake():
    sock = FakeSocket([_hello(identifier=0)])
    with pytest.raises(HandshakeError):
        ElaphureLink(_echo).serve(sock)
    assert sock.sent == []
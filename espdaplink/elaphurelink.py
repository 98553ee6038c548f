"""The elaphureLink DAP-over-TCP protocol: handshake, vendor commands and serving."""

from __future__ import annotations

import struct
from typing import Callable, Protocol

LINK_IDENTIFIER = 0x8A656C70
DAP_VERSION = 0x10000
COMMAND_HANDSHAKE = 0x00000000

VENDOR_COMMAND_PREFIX = 0x88
NATIVE_COMMAND_PASSTHROUGH = 0x1
VENDOR_SCOPE_ENTER = 0x2
VENDOR_SCOPE_EXIT = 0x3

HANDSHAKE_SIZE = 12
BUFFER_SIZE = 1500

_HANDSHAKE = struct.Struct(">III")
_FRAME_HEADER = 4


class HandshakeError(ValueError):
    """The proxy's handshake packet was malformed."""


class _Socket(Protocol):
    def recv(self, size: int) -> bytes: ...

    def sendall(self, data: bytes) -> object: ...


def handshake_response(packet: bytes) -> bytes:
    """Validate a proxy handshake and return the reply to send back."""
    if len(packet) != HANDSHAKE_SIZE:
        raise HandshakeError(f"handshake must be {HANDSHAKE_SIZE} bytes, got {len(packet)}")
    identifier, command, _proxy_version = _HANDSHAKE.unpack(bytes(packet))
    if identifier != LINK_IDENTIFIER:
        raise HandshakeError(f"bad link identifier {identifier:#010x}")
    if command != COMMAND_HANDSHAKE:
        raise HandshakeError(f"unexpected command {command:#x}")
    return _HANDSHAKE.pack(LINK_IDENTIFIER, COMMAND_HANDSHAKE, DAP_VERSION)


def _recv_exact(sock: _Socket, size: int) -> bytes | None:
    chunks = bytearray()
    while len(chunks) < size:
        chunk = sock.recv(size - len(chunks))
        if not chunk:
            return None
        chunks += chunk
    return bytes(chunks)


def _payload_length(header: bytes) -> int:
    return struct.unpack_from(">H", header, 2)[0]


class ElaphureLink:
    """One elaphureLink session around a DAP command executor.

    ``execute`` takes a DAP request and returns the DAP response bytes.
    """

    def __init__(self, execute: Callable[[bytes], bytes]) -> None:
        self.execute = execute
        self.is_async = False

    def process(self, packet: bytes) -> bytes:
        """Run one packet and return the response to send."""
        if packet and packet[0] == VENDOR_COMMAND_PREFIX:
            body = self.vendor_command(packet[1:])
            return bytes([VENDOR_COMMAND_PREFIX]) + body if body else b""
        return self.execute(bytes(packet))

    def vendor_command(self, request: bytes) -> bytes:
        """Handle a vendor command body (type byte first); empty for unknown types."""
        if not request:
            return b""
        kind, rest = request[0], request[1:]
        if kind == NATIVE_COMMAND_PASSTHROUGH:
            return self.native_passthrough(rest)
        if kind == VENDOR_SCOPE_ENTER:
            self.is_async = True
            return b"\x00\x00\x00"
        if kind == VENDOR_SCOPE_EXIT:
            self.is_async = False
            return b"\x00\x00\x00"
        return b""

    def native_passthrough(self, request: bytes) -> bytes:
        """Run the DAP command after the two-byte length field and frame the reply."""
        response = self.execute(bytes(request[2:]))
        length = len(response) & 0xFFFF
        return bytes([0x00]) + struct.pack(">H", length) + response[:length]

    def _send(self, sock: _Socket, packet: bytes) -> None:
        response = self.process(packet)
        if response:
            sock.sendall(response)

    def _vendor_frames(self, sock: _Socket, data: bytes) -> bool:
        offset = 0
        while len(data) - offset >= _FRAME_HEADER:
            packet_len = _FRAME_HEADER + _payload_length(data[offset:])
            if offset + packet_len > len(data):
                break
            self._send(sock, data[offset:offset + packet_len])
            offset += packet_len

        remain = data[offset:]
        if not remain:
            return True
        if len(remain) < _FRAME_HEADER:
            more = _recv_exact(sock, _FRAME_HEADER - len(remain))
            if more is None:
                return False
            remain += more
        missing = _FRAME_HEADER + _payload_length(remain) - len(remain)
        if missing > 0:
            more = _recv_exact(sock, missing)
            if more is None:
                return False
            remain += more
        self._send(sock, remain)
        return True

    def serve(self, sock: _Socket) -> None:
        """Perform the handshake, then process packets until the peer closes."""
        self.is_async = False
        hello = _recv_exact(sock, HANDSHAKE_SIZE)
        if hello is None:
            return
        sock.sendall(handshake_response(hello))

        while True:
            data = sock.recv(BUFFER_SIZE)
            if not data:
                return
            if data[0] == VENDOR_COMMAND_PREFIX:
                if not self._vendor_frames(sock, data):
                    return
            else:
                self._send(sock, data)

            while self.is_async:
                header = _recv_exact(sock, _FRAME_HEADER)
                if header is None:
                    return
                payload = _recv_exact(sock, _payload_length(header)) if _payload_length(header) else b""
                if payload is None:
                    return
                self._send(sock, header + payload)
"""USB/IP wire structures for the device-list, import and URB stages."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum

from espdaplink.usb_defs import SetupPacket

SYSFS_PATH_SIZE = 256
BUSID_SIZE = 32

STAGE2_HEADER_SIZE = 48
_BASE = struct.Struct(">5I")
_SUBMIT = struct.Struct(">Iiiii")
_RET_SUBMIT = struct.Struct(">iiiii")
_UNION_SIZE = STAGE2_HEADER_SIZE - _BASE.size


class Stage1Command(IntEnum):
    DEVICE_LIST = 0x05
    DEVICE_ATTACH = 0x03


class Stage2Command(IntEnum):
    REQ_SUBMIT = 0x0001
    REQ_UNLINK = 0x0002
    RSP_SUBMIT = 0x0003
    RSP_UNLINK = 0x0004


class Direction(IntEnum):
    OUT = 0x00
    IN = 0x01


_STAGE1 = struct.Struct(">HHI")


@dataclass(frozen=True)
class Stage1Header:
    """Header of an operation request or reply."""

    version: int
    command: int
    status: int = 0

    SIZE = _STAGE1.size

    def pack(self) -> bytes:
        return _STAGE1.pack(self.version, self.command, self.status)

    @classmethod
    def unpack(cls, data: bytes) -> Stage1Header:
        if len(data) < _STAGE1.size:
            raise ValueError(f"stage 1 header needs {_STAGE1.size} bytes, got {len(data)}")
        return cls(*_STAGE1.unpack_from(data))


@dataclass(frozen=True)
class CmdSubmit:
    """Body of a USBIP_CMD_SUBMIT request."""

    transfer_flags: int = 0
    data_length: int = 0
    start_frame: int = 0
    number_of_packets: int = 0
    interval: int = 0
    setup: SetupPacket = field(default_factory=lambda: SetupPacket(0, 0))

    def pack(self) -> bytes:
        return (
            _SUBMIT.pack(
                self.transfer_flags,
                self.data_length,
                self.start_frame,
                self.number_of_packets,
                self.interval,
            )
            + self.setup.to_bytes()
        )

    @classmethod
    def unpack(cls, data: bytes) -> CmdSubmit:
        fields = _SUBMIT.unpack_from(data)
        setup = SetupPacket.from_bytes(data[_SUBMIT.size:_SUBMIT.size + SetupPacket.SIZE])
        return cls(*fields, setup=setup)


@dataclass
class Stage2Header:
    """Common 48-byte header of every URB-stage packet."""

    command: int
    seqnum: int
    devid: int = 0
    direction: int = Direction.OUT
    ep: int = 0
    submit: CmdSubmit | None = None
    unlink_seqnum: int | None = None

    @classmethod
    def unpack(cls, data: bytes) -> Stage2Header:
        if len(data) < STAGE2_HEADER_SIZE:
            raise ValueError(
                f"stage 2 header needs {STAGE2_HEADER_SIZE} bytes, got {len(data)}"
            )
        command, seqnum, devid, direction, ep = _BASE.unpack_from(data)
        tail = bytes(data[_BASE.size:STAGE2_HEADER_SIZE])
        header = cls(command, seqnum, devid, direction, ep)
        if command == Stage2Command.REQ_SUBMIT:
            header.submit = CmdSubmit.unpack(tail)
        elif command == Stage2Command.REQ_UNLINK:
            (header.unlink_seqnum,) = struct.unpack_from(">I", tail)
        return header

    def pack(self) -> bytes:
        base = _BASE.pack(self.command, self.seqnum, self.devid, self.direction, self.ep)
        if self.submit is not None:
            tail = self.submit.pack()
        elif self.unlink_seqnum is not None:
            tail = struct.pack(">I", self.unlink_seqnum)
        else:
            tail = b""
        return base + tail.ljust(_UNION_SIZE, b"\x00")


@dataclass(frozen=True)
class RetSubmit:
    """A USBIP_RET_SUBMIT reply header."""

    seqnum: int
    devid: int = 0
    direction: int = Direction.OUT
    ep: int = 0
    status: int = 0
    data_length: int = 0
    start_frame: int = 0
    number_of_packets: int = 0
    error_count: int = 0

    def pack(self) -> bytes:
        base = _BASE.pack(
            Stage2Command.RSP_SUBMIT, self.seqnum, self.devid, self.direction, self.ep
        )
        body = _RET_SUBMIT.pack(
            self.status,
            self.data_length,
            self.start_frame,
            self.number_of_packets,
            self.error_count,
        )
        return base + body.ljust(_UNION_SIZE, b"\x00")


@dataclass(frozen=True)
class RetUnlink:
    """A USBIP_RET_UNLINK reply header."""

    seqnum: int
    devid: int = 0
    direction: int = Direction.OUT
    ep: int = 0
    status: int = 0

    def pack(self) -> bytes:
        base = _BASE.pack(
            Stage2Command.RSP_UNLINK, self.seqnum, self.devid, self.direction, self.ep
        )
        return base + struct.pack(">i", self.status).ljust(_UNION_SIZE, b"\x00")
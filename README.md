# espdaplink

Building blocks for a network-attached CMSIS-DAP debug probe, in plain Python
with no third-party dependencies.

## What is in the package

- `espdaplink.usb_defs`: USB request codes, descriptor types and the
  eight-byte `SetupPacket` (`from_bytes`, `to_bytes`, `value_low`,
  `value_high`, `direction`, `kind`, `recipient`).
- `espdaplink.usbip_defs`: USB/IP wire structures: `Stage1Header`,
  `Stage2Header` (with `CmdSubmit` bodies and unlink sequence numbers),
  `RetSubmit` and `RetUnlink`, plus the `Stage1Command`, `Stage2Command` and
  `Direction` enums.
- `espdaplink.descriptors`: the device, interface, configuration, HID report
  and string descriptors, shaped by a `DescriptorConfig` (`use_winusb`,
  `usb3`, `endpoint_size`).
- `espdaplink.msos20`: the Microsoft OS 2.0 descriptor set that binds WinUSB
  with the CMSIS-DAP v2 interface GUID, and the BOS descriptor that points to it.
- `espdaplink.usb_handle`: `handle_control_request` and
  `handle_get_descriptor`, which answer endpoint-0 requests with the data
  stage to send back (bytes, possibly empty) or `None` when no reply is sent.
  A string request for an index with no string raises `UnsupportedStringIndex`.
- `espdaplink.elaphurelink`: the elaphureLink handshake (`handshake_response`,
  `HandshakeError`) and the `ElaphureLink` session, which frames DAP
  commands, handles vendor commands and serves a connected socket.
- `espdaplink.kcp_rtt`: `RttEstimator` (smoothed RTT and retransmission
  timeout) and `CongestionWindow` (slow start, congestion avoidance, fast
  resend and loss reactions) as used by the KCP protocol.
- `espdaplink.clock`: `iclock64()` and `iclock()`, millisecond wall-clock
  readings (the latter truncated to 32 bits).

## USB descriptors and control requests

```python
from espdaplink.descriptors import DescriptorConfig, device_descriptor
from espdaplink.usb_defs import SetupPacket
from espdaplink.usb_handle import handle_control_request

config = DescriptorConfig()          # WinUSB bulk interface, USB 2.1
print(device_descriptor(config).hex())

request = SetupPacket.from_bytes(bytes.fromhex("8006000100001200"))
reply = handle_control_request(request, 18, config)   # the device descriptor
```

`DescriptorConfig(use_winusb=False)` selects the HID interface instead; then
GET_DESCRIPTOR for the HID report is answered and BOS is not.

## elaphureLink

```python
from espdaplink.elaphurelink import ElaphureLink

link = ElaphureLink(execute=my_dap_execute)   # bytes -> bytes
link.serve(connected_socket)                  # needs recv() and sendall()
```

`serve` reads the 12-byte handshake, replies, then processes packets until
the peer closes the connection. `ElaphureLink.process(packet)` runs a single
packet and returns the response without any socket.

## RTT and congestion helpers

```python
from espdaplink.kcp_rtt import CongestionWindow, RttEstimator

rtt = RttEstimator()
timeout = rtt.update(rtt=40, interval=100)

window = CongestionWindow()
window.on_ack(mss=1376, rmt_wnd=128)
```

## What the package does not do

- There is no KCP segment codec and no KCP connection object: only the RTT
  estimator, the congestion window and the clock are provided.
- There is no USB/IP server. The package parses and builds the wire
  headers and computes the replies to control requests, but opening sockets,
  the device-list and import exchanges and sending URB replies are left to
  the caller.
- No DAP command executor is included; `ElaphureLink` calls the function
  it is given.
- There is no command-line program.

## Tests

The test suite uses pytest, available through the `test` extra.
"""USB/IP structures, USB descriptors and control requests, elaphureLink framing and KCP timing helpers."""

__version__ = "0.1.0"

__all__ = [
    "clock",
    "descriptors",
    "elaphurelink",
    "kcp_rtt",
    "msos20",
    "usb_defs",
    "usb_handle",
    "usbip_defs",
]
"""Round-trip-time estimation and congestion window control for KCP."""

from __future__ import annotations

from dataclasses import dataclass

RTO_NDL = 30
RTO_MIN = 100
RTO_DEF = 200
RTO_MAX = 60000

THRESH_INIT = 2
THRESH_MIN = 2

_MASK32 = 0xFFFFFFFF


@dataclass
class RttEstimator:
    """Smoothed RTT, RTT variance and the retransmission timeout derived from them."""

    srtt: int = 0
    rttval: int = 0
    rto: int = RTO_DEF
    minrto: int = RTO_MIN

    def update(self, rtt: int, interval: int) -> int:
        """Feed one RTT sample (milliseconds) and return the new timeout."""
        if self.srtt == 0:
            self.srtt = rtt
            self.rttval = rtt // 2
        else:
            delta = abs(rtt - self.srtt)
            self.rttval = (3 * self.rttval + delta) // 4
            self.srtt = max((7 * self.srtt + rtt) // 8, 1)
        rto = self.srtt + max(interval, 4 * self.rttval)
        self.rto = min(max(self.minrto, rto), RTO_MAX)
        return self.rto


@dataclass
class CongestionWindow:
    """Slow start, congestion avoidance and the reactions to loss."""

    cwnd: int = 0
    incr: int = 0
    ssthresh: int = THRESH_INIT

    def on_ack(self, mss: int, rmt_wnd: int) -> None:
        """Grow the window after the send window's lower edge advanced."""
        if self.cwnd >= rmt_wnd:
            return
        if self.cwnd < self.ssthresh:
            self.cwnd += 1
            self.incr += mss
        else:
            if self.incr < mss:
                self.incr = mss
            if self.incr > 0:
                self.incr += (mss * mss) // self.incr + mss // 16
            if (self.cwnd + 1) * mss <= self.incr:
                self.cwnd = (self.incr + mss - 1) // (mss if mss > 0 else 1)
        if self.cwnd > rmt_wnd:
            self.cwnd = rmt_wnd
            self.incr = rmt_wnd * mss

    def on_fast_resend(self, inflight: int, resent: int, mss: int) -> None:
        """Shrink the window after segments were fast-retransmitted."""
        self.ssthresh = max(inflight // 2, THRESH_MIN)
        self.cwnd = (self.ssthresh + resent) & _MASK32
        self.incr = (self.cwnd * mss) & _MASK32

    def on_loss(self, cwnd: int, mss: int) -> None:
        """Collapse the window after a retransmission timeout."""
        self.ssthresh = max(cwnd // 2, THRESH_MIN)
        self.cwnd = 1
        self.incr = mss
import time
from unittest import mock

from espdaplink.clock import iclock, iclock64


def test_iclock64_close_to_wall_clock():
    before = time.time_ns() // 1_000_000
    value = iclock64()
    after = time.time_ns() // 1_000_000
    assert before <= value <= after


def test_iclock64_truncates_to_milliseconds():
    with mock.patch("espdaplink.clock.time.time_ns", return_value=5_999_999):
        assert iclock64() == 5


def test_iclock_wraps_at_32_bits():
    ns = ((1 << 32) + 7) * 1_000_000
    with mock.patch("espdaplink.clock.time.time_ns", return_value=ns):
        assert iclock() == 7
        assert iclock64() == (1 << 32) + 7


def test_iclock_fits_32_bits():
    value = iclock()
    assert 0 <= value <= 0xFFFFFFFF


def test_iclock_matches_low_bits_of_iclock64():
    with mock.patch("espdaplink.clock.time.time_ns", return_value=1_700_000_000_000_000_000):
        assert iclock() == iclock64() & 0xFFFFFFFF
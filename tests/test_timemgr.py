from unittest.mock import patch

from pommesound.timemgr import get_date_time, microseconds, tick_count


def test_date_time_at_unix_epoch():
    with patch("time.time", return_value=0.0):
        assert get_date_time() == 2_082_844_800


def test_date_time_advances_with_clock():
    with patch("time.time", return_value=0.0):
        start = get_date_time()
    with patch("time.time", return_value=10.0):
        later = get_date_time()
    assert later - start == 10


def test_microseconds_non_decreasing():
    first = microseconds()
    second = microseconds()
    assert 0 <= first <= second


def test_tick_count_matches_microseconds():
    before = microseconds()
    ticks = tick_count()
    after = microseconds()
    assert 60 * before // 1_000_000 <= ticks <= 60 * after // 1_000_000
import numpy as np
import pytest

from candlepl.features import moving_average


def test_moving_average_indexed_by_bar_number(five_bars):
    average = moving_average(five_bars, period=2)
    assert list(average.index) == [1, 2, 3, 4, 5]
    assert np.isnan(average.loc[1])
    assert average.loc[2] == pytest.approx((12 + 11) / 2)
    assert average.loc[5] == pytest.approx((13 + 10) / 2)
    assert average.name == "ma_close_2"


def test_moving_average_other_field(five_bars):
    average = moving_average(five_bars, period=1, field="open")
    assert average.tolist() == [10.0, 12.0, 11.0, 13.0, 13.0]


def test_moving_average_validation(five_bars):
    with pytest.raises(ValueError):
        moving_average(five_bars, period=0)
    with pytest.raises(KeyError):
        moving_average(five_bars, period=2, field="vwap")

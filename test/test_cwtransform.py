# test/test_cwtransform.py
import logging

import numpy as np
import pandas as pd
import pytest

from morlet_cwt import CWTConfig, NonFiniteInputError, WaveletTransform, transform


def sine(n=1000, period=30.0, amplitude=5.0):
    t = np.arange(n)
    return amplitude * np.sin(2 * np.pi * t / period)


@pytest.fixture(scope="module")
def wt():
    return WaveletTransform(sine(), dt=1, lower_period=2, upper_period=200, dj=0.05)


def test_dominant_period(wt):
    assert abs(wt.dominant_period() - 30) <= 1
    assert abs(wt.dominant_period(exclude_coi=False) - 30) <= 1


def test_attributes(wt):
    n_scales = len(wt.grid)
    assert wt.wave.shape == (n_scales, 1000)
    assert wt.power.shape == wt.phase.shape == wt.wave.shape
    assert wt.coi_mask.shape == wt.wave.shape
    assert wt.coi.shape == (1000,)
    np.testing.assert_array_equal(wt.periods, wt.grid.periods)
    np.testing.assert_array_equal(wt.scales, wt.grid.scales)
    assert wt.xdata is None


def test_matches_functional_interface(wt):
    np.testing.assert_array_equal(wt.wave, transform(sine(), wt.grid))


def test_results_are_read_only(wt):
    with pytest.raises(ValueError):
        wt.power[0, 0] = 1.0
    with pytest.raises(ValueError):
        wt.wave[0, 0] = 1.0


def test_config_object_and_keywords_are_exclusive():
    cfg = CWTConfig(dj=0.1, upper_period=50)
    assert WaveletTransform(np.ones(200), config=cfg).config is cfg
    with pytest.raises(TypeError):
        WaveletTransform(np.ones(200), config=cfg, dj=0.2)


def test_lazy_construction():
    wt = WaveletTransform(dj=0.1)
    with pytest.raises(AttributeError):
        wt.power
    assert wt.cwt(sine(300)) is wt
    assert wt.power.shape[1] == 300


def test_default_period_bounds():
    wt = WaveletTransform(sine(600), dj=0.25)
    assert wt.periods[0] == pytest.approx(2)
    assert wt.periods[-1] <= 200


def test_reconstruct_band(wt):
    xr = wt.reconstruct(period_band=(15, 60))
    interior = slice(250, 750)
    assert np.max(np.abs(xr[interior] - sine()[interior])) < 0.25


def test_reconstruct_only_ridge_and_coi(wt):
    full = wt.reconstruct()
    ridge_only = wt.reconstruct(only_ridge=True)
    coi_only = wt.reconstruct(only_coi=True)
    assert ridge_only.shape == coi_only.shape == full.shape
    # Outside the cone only large scales are dropped
    assert np.max(np.abs(coi_only[300:700] - full[300:700])) < 0.25


def test_reconstruct_rescale(wt):
    y = sine()
    xr = wt.reconstruct(rescale=True)
    assert xr.mean() == pytest.approx(y.mean())
    assert xr.std() == pytest.approx(y.std())


def test_pandas_round_trip():
    index = pd.date_range('2000-01-01', periods=730, freq='D')
    s = pd.Series(sine(730, period=30), index=index, name='flow')
    wt = WaveletTransform(s, lower_period=2, upper_period=100, dj=0.1)

    rec = wt.reconstruct(as_series=True)
    assert isinstance(rec, pd.Series)
    assert rec.index.equals(index)
    assert rec.name == 'reconstruction'


def test_dataframe_input():
    df = pd.DataFrame({'time': np.arange(400) * 0.5, 'value': sine(400, period=40)})
    wt = WaveletTransform(df, dt=0.5, upper_period=50, dj=0.1)
    np.testing.assert_array_equal(wt.xdata, df['time'].to_numpy())
    assert abs(wt.dominant_period() - 20) <= 1.5


def test_mean_is_added_back():
    y = sine(1000) + 12.0
    wt = WaveletTransform(y, upper_period=200, dj=0.05)
    xr = wt.reconstruct()
    assert np.mean(xr[200:800]) == pytest.approx(12.0, abs=0.1)


def test_detrend_keeps_trend_as_baseline():
    t = np.arange(1000)
    trend = 3 + 0.5 * t
    y = trend + np.sin(2 * np.pi * t / 50)
    wt = WaveletTransform(y, detrend=True, upper_period=200, dj=0.1)

    np.testing.assert_allclose(wt.baseline, trend, atol=0.2)
    assert abs(wt.dominant_period() - 50) <= 3


def test_p_values_flag_is_a_logged_no_op(caplog):
    caplog.set_level(logging.INFO, logger='morlet_cwt.cwtransform')
    y = sine(300)
    with_flag = WaveletTransform(y, compute_p_values=True, dj=0.1)
    without = WaveletTransform(y, dj=0.1)

    np.testing.assert_array_equal(with_flag.wave, without.wave)
    assert 'compute_p_values' in caplog.text


def test_admissibility_warning():
    with pytest.warns(UserWarning, match="admissible"):
        WaveletTransform(omega=5)


def test_non_finite_input():
    y = sine(100)
    y[10] = np.nan
    with pytest.raises(NonFiniteInputError):
        WaveletTransform(y)


def test_stream_power(wt):
    rows = list(wt.stream_power(sine()))
    assert len(rows) == len(wt.grid)
    period, row = rows[10]
    assert period == wt.periods[10]
    np.testing.assert_allclose(row, wt.power[10], rtol=1e-10, atol=1e-9)

#!/usr/bin/env python3
"""
Tests for genome-size normalization of MAG read counts.
"""

import numpy as np
import pandas as pd
import pytest

from workflow_mags.mag_data.normalization import (
    FeatureOrderError, ZeroCompletenessError, check_feature_order,
    expected_genome_size, normalize_by_genome_size
)
from workflow_mags.utils.data import MissingColumnsError


def _quality(ids, completeness, genome_size):
    return pd.DataFrame(
        {'completeness': completeness, 'genome_size': genome_size},
        index=pd.Index(ids, name='feature_id')
    )


def test_expected_genome_size_example():
    """2,000,000 bp at 80% completeness -> 2,500,000 bp expected."""
    quality = _quality(['bin_1'], [80.0], [2_000_000])
    sizes = expected_genome_size(quality)
    assert sizes.name == 'expected_genome_size'
    assert sizes['bin_1'] == pytest.approx(2_500_000)


def test_normalized_value_example():
    """500 reads over an expected 2,500,000 bp -> 0.0002."""
    quality = _quality(['bin_1'], [80.0], [2_000_000])
    counts = pd.DataFrame({'S1': [500]}, index=['bin_1'])
    normalized = normalize_by_genome_size(counts, quality)
    assert normalized.loc['bin_1', 'S1'] == pytest.approx(0.0002)


def test_normalization_preserves_shape_and_labels():
    quality = _quality(['a', 'b', 'c'], [100, 50, 25], [1e6, 2e6, 3e6])
    counts = pd.DataFrame(
        {'S1': [10, 0, 30], 'S2': [5, 5, 5]}, index=['a', 'b', 'c']
    )
    normalized = normalize_by_genome_size(counts, quality)

    assert normalized.shape == counts.shape
    assert normalized.index.tolist() == counts.index.tolist()
    assert normalized.columns.tolist() == counts.columns.tolist()
    # Each row is scaled by its own expected size; no scaling across samples
    expected = counts.astype(float).div([1e6, 4e6, 12e6], axis=0)
    pd.testing.assert_frame_equal(normalized, expected)


def test_zero_counts_stay_zero():
    quality = _quality(['a', 'b'], [90, 60], [1e6, 1e6])
    counts = pd.DataFrame({'S1': [0, 7]}, index=['a', 'b'])
    normalized = normalize_by_genome_size(counts, quality)
    assert normalized.loc['a', 'S1'] == 0.0


def test_input_counts_not_modified():
    quality = _quality(['a'], [50], [1e6])
    counts = pd.DataFrame({'S1': [10]}, index=['a'])
    normalize_by_genome_size(counts, quality)
    assert counts.loc['a', 'S1'] == 10


def test_order_mismatch_is_fatal():
    quality = _quality(['b', 'a'], [50, 50], [1e6, 1e6])
    counts = pd.DataFrame({'S1': [1, 2]}, index=['a', 'b'])
    with pytest.raises(FeatureOrderError):
        normalize_by_genome_size(counts, quality)


def test_order_checked_before_completeness():
    quality = _quality(['b', 'a'], [0, 50], [1e6, 1e6])
    counts = pd.DataFrame({'S1': [1, 2]}, index=['a', 'b'])
    with pytest.raises(FeatureOrderError):
        normalize_by_genome_size(counts, quality)


def test_length_mismatch_is_fatal():
    quality = _quality(['a', 'b', 'c'], [50, 50, 50], [1e6, 1e6, 1e6])
    counts = pd.DataFrame({'S1': [1, 2]}, index=['a', 'b'])
    with pytest.raises(FeatureOrderError):
        check_feature_order(counts, quality)


def test_feature_order_error_is_an_assertion():
    assert issubclass(FeatureOrderError, AssertionError)


@pytest.mark.parametrize('completeness', [0, -5, np.nan])
def test_undefined_completeness_raises(completeness):
    quality = _quality(['a', 'b'], [80, completeness], [1e6, 1e6])
    with pytest.raises(ZeroCompletenessError, match="completeness"):
        expected_genome_size(quality)


def test_undefined_genome_size_raises():
    quality = _quality(['a'], [80], [0])
    with pytest.raises(ZeroCompletenessError, match="genome size"):
        expected_genome_size(quality)


def test_over_complete_warns(caplog):
    quality = _quality(['a'], [104.5], [1e6])
    with caplog.at_level('WARNING', logger='workflow_mags'):
        sizes = expected_genome_size(quality)
    assert sizes['a'] < 1e6
    assert "above 100%" in caplog.text


def test_missing_quality_columns():
    quality = pd.DataFrame({'completeness': [80]}, index=['a'])
    with pytest.raises(MissingColumnsError):
        expected_genome_size(quality)

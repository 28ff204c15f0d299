#!/usr/bin/env python3
"""
Tests for between-sample distances, PCoA and PERMANOVA.
"""

import numpy as np
import pandas as pd
import pytest
from skbio import DistanceMatrix

from conftest import SAMPLES
from workflow_mags.stats.beta_diversity import (
    distance_matrix, drop_empty_samples, pcoa, permanova_test,
    validate_distance_matrix
)


@pytest.fixture
def table(counts):
    """Samples × features."""
    return counts.T


def test_bray_curtis_values():
    table = pd.DataFrame(
        {'f1': [1, 0, 2], 'f2': [0, 1, 2]}, index=['S1', 'S2', 'S3']
    )
    dm = distance_matrix(table, metric='braycurtis')
    assert dm.ids == ('S1', 'S2', 'S3')
    assert dm['S1', 'S2'] == pytest.approx(1.0)
    # |1-2| + |0-2| over 1 + 4
    assert dm['S1', 'S3'] == pytest.approx(0.6)
    assert np.allclose(dm.data, dm.data.T)
    assert np.allclose(np.diag(dm.data), 0.0)


def test_jaccard_uses_presence_absence():
    table = pd.DataFrame(
        {'f1': [10, 1], 'f2': [0, 5], 'f3': [3, 3]}, index=['S1', 'S2']
    )
    dm = distance_matrix(table, metric='jaccard')
    assert dm['S1', 'S2'] == pytest.approx(1 / 3)


def test_empty_samples_dropped(table):
    table = table.copy()
    table.loc['EMPTY'] = 0
    dm = distance_matrix(table, metric='braycurtis')
    assert 'EMPTY' not in dm.ids
    assert len(dm.ids) == len(SAMPLES)


def test_drop_empty_samples_keeps_nonempty():
    df = pd.DataFrame({'f1': [0, 1]}, index=['a', 'b'])
    assert drop_empty_samples(df).index.tolist() == ['b']


def test_too_few_samples():
    table = pd.DataFrame({'f1': [1], 'f2': [2]}, index=['S1'])
    with pytest.raises(ValueError, match="At least 2 samples"):
        distance_matrix(table)


def test_degenerate_distance_matrix():
    dm = DistanceMatrix(
        np.array([[0, 1, 1], [1, 0, 1], [1, 1, 0]], dtype=float), ids=['a', 'b', 'c']
    )
    validated = validate_distance_matrix(dm)
    assert validated.shape == (3, 3)

    table = pd.DataFrame({'f1': [1, 1, 1], 'f2': [2, 2, 2]}, index=['a', 'b', 'c'])
    with pytest.raises(ValueError, match="degenerate"):
        validate_distance_matrix(distance_matrix(table, metric='euclidean'))


def test_pcoa(table):
    result = pcoa(table, metric='braycurtis')
    samples = result.samples
    assert samples.index.tolist() == SAMPLES
    assert samples.columns.tolist() == ['PCo1', 'PCo2', 'PCo3']
    assert result.proportion_explained.index.tolist() == ['PCo1', 'PCo2', 'PCo3']
    assert result.proportion_explained.iloc[0] >= result.proportion_explained.iloc[1]
    assert result.short_method_name == 'PCoA'


def test_pcoa_n_dimensions(table):
    result = pcoa(table, metric='braycurtis', n_dimensions=2)
    assert result.samples.shape == (len(SAMPLES), 2)
    assert len(result.proportion_explained) == 2


def test_permanova(table, mag_data):
    dm = distance_matrix(table)
    result = permanova_test(dm, mag_data.metadata['province'], permutations=99)
    assert result['method name'] == 'PERMANOVA'
    assert result['number of groups'] == 2
    assert 0 < result['p-value'] <= 1


def test_permanova_single_group(table, mag_data):
    dm = distance_matrix(table)
    grouping = pd.Series('MEDI', index=mag_data.metadata.index)
    with pytest.raises(ValueError, match="two groups"):
        permanova_test(dm, grouping, permutations=9)


def test_permanova_missing_group(table, mag_data):
    dm = distance_matrix(table)
    grouping = mag_data.metadata['province'].iloc[1:]
    with pytest.raises(ValueError, match="no group"):
        permanova_test(dm, grouping, permutations=9)

#!/usr/bin/env python3
"""
Tests for top-N feature selection.
"""

import pandas as pd
import pytest

from workflow_mags.mag_data.top_features import top_features, top_features_table


@pytest.fixture
def table():
    return pd.DataFrame(
        {'S1': [5, 4, 1, 6, 0], 'S2': [0, 6, 4, 4, 1]},
        index=['a', 'b', 'c', 'd', 'e']
    )


def test_returns_exactly_n_in_descending_order(table):
    assert top_features(table, 2) == ['b', 'd']
    assert len(top_features(table, 4)) == 4


def test_ties_keep_input_order(table):
    # a and c both total 5
    assert top_features(table, 4) == ['b', 'd', 'a', 'c']


def test_ties_at_the_cutoff():
    table = pd.DataFrame({'S1': [3, 3, 3, 9]}, index=['x', 'y', 'z', 'w'])
    assert top_features(table, 2) == ['w', 'x']


def test_all_features(table):
    assert sorted(top_features(table, len(table))) == sorted(table.index)


@pytest.mark.parametrize('n', [0, -1, 6])
def test_invalid_n(table, n):
    with pytest.raises(ValueError):
        top_features(table, n)


def test_top_features_table(table):
    subset = top_features_table(table, 3)
    assert subset.index.tolist() == ['b', 'd', 'a']
    assert subset.columns.tolist() == ['S1', 'S2']

# ===================================== IMPORTS ====================================== #

# Standard Library Imports
import logging
from typing import Optional

# Third-Party Imports
import numpy as np
import pandas as pd
from skbio.stats.distance import DistanceMatrix, permanova
from skbio.stats.ordination import OrdinationResults, pcoa as PCoA
from sklearn.metrics import pairwise_distances

# Local Imports
from workflow_mags import constants

# ========================== INITIALIZATION & CONFIGURATION ========================== #

logger = logging.getLogger('workflow_mags')

# ================================== CONSTANTS ======================================= #

# Undefined for samples without any abundance
ZERO_SENSITIVE_METRICS = {'braycurtis', 'jaccard'}

# =============================== HELPER FUNCTIONS ==================================== #

def validate_min_samples(df: pd.DataFrame, min_samples: int = 2) -> None:
    """Validate that the input contains sufficient samples for analysis.

    Args:
        df:          Samples × features DataFrame.
        min_samples: Minimum required number of samples.

    Raises:
        ValueError: If number of samples is less than required minimum
    """
    if len(df) < min_samples:
        raise ValueError(f"At least {min_samples} samples required, got {len(df)}")


def drop_empty_samples(df: pd.DataFrame) -> pd.DataFrame:
    empty = df.sum(axis=1) == 0
    if empty.any():
        logger.warning(
            f"Dropping {int(empty.sum())} sample(s) with zero total abundance: "
            f"{df.index[empty].tolist()[:5]}"
        )
    return df.loc[~empty]


def validate_distance_matrix(dm: DistanceMatrix) -> DistanceMatrix:
    """Check a distance matrix before ordination.

    Raises:
        ValueError: For NaNs, asymmetry or a degenerate (all identical) matrix
    """
    dm_data = dm.data.copy()
    if np.isnan(dm_data).any():
        raise ValueError("Distance matrix contains NaN values")

    if not np.allclose(dm_data, dm_data.T, atol=1e-8):
        raise ValueError("Distance matrix is not symmetric")
    # Make matrix exactly symmetric
    dm_data = (dm_data + dm_data.T) / 2

    if dm_data.size > 1 and np.allclose(dm_data, dm_data.flat[0]):
        raise ValueError("Distance matrix is degenerate (all values identical)")

    np.fill_diagonal(dm_data, 0.0)
    return DistanceMatrix(dm_data, ids=dm.ids)

# =============================== CORE FUNCTIONALITY ================================== #

def distance_matrix(
    table: pd.DataFrame,
    metric: str = constants.DEFAULT_METRIC
) -> DistanceMatrix:
    """Compute pairwise distances between samples.

    Args:
        table:  Samples × features abundances.
        metric: Distance metric understood by sklearn/scipy (default: Bray-Curtis).

    Returns:
        DistanceMatrix object containing pairwise distances between samples

    Raises:
        ValueError: For too few samples or data containing NaN/infinite values
    """
    df = drop_empty_samples(table) if metric in ZERO_SENSITIVE_METRICS else table
    validate_min_samples(df, min_samples=2)
    data = df.values.astype(float)

    if np.isnan(data).any():
        raise ValueError("Input data contains NaN values")
    if np.isinf(data).any():
        raise ValueError("Input data contains infinite values")

    if metric == 'jaccard':
        data = data > 0
    dist_array = pairwise_distances(data, metric=metric)
    dist_array = (dist_array + dist_array.T) / 2

    return DistanceMatrix(dist_array, ids=[str(i) for i in df.index])


def pcoa(
    table: pd.DataFrame,
    metric: str = constants.DEFAULT_METRIC,
    n_dimensions: Optional[int] = constants.DEFAULT_N_PCOA
) -> OrdinationResults:
    """Principal Coordinate Analysis on a between-sample distance matrix.

    Args:
        table:        Samples × features abundances.
        metric:       Distance metric to use (default: Bray-Curtis)
        n_dimensions: Number of axes to keep (default: all)

    Returns:
        OrdinationResults whose sample coordinates are named PCo1..PCoN, with
        `proportion_explained` trimmed to the same axes.

    Raises:
        ValueError: For insufficient samples or invalid distance matrices
    """
    dm = validate_distance_matrix(distance_matrix(table, metric=metric))

    result = PCoA(dm)

    max_dims = dm.shape[0] - 1
    n_dimensions = min(n_dimensions, max_dims) if n_dimensions else max_dims
    n_dimensions = min(n_dimensions, result.samples.shape[1])

    comp_names = [f"PCo{i+1}" for i in range(n_dimensions)]
    samples = result.samples.iloc[:, :n_dimensions].copy()
    samples.columns = comp_names
    proportion = result.proportion_explained.iloc[:n_dimensions].copy()
    proportion.index = comp_names
    eigvals = result.eigvals.iloc[:n_dimensions].copy()
    eigvals.index = comp_names

    return OrdinationResults(
        short_method_name='PCoA',
        long_method_name='Principal Coordinate Analysis',
        eigvals=eigvals,
        samples=samples,
        proportion_explained=proportion,
    )


def permanova_test(
    dm: DistanceMatrix,
    grouping: pd.Series,
    permutations: int = constants.DEFAULT_PERMUTATIONS
) -> pd.Series:
    """PERMANOVA of a metadata grouping on a distance matrix.

    Args:
        dm:           Between-sample distances.
        grouping:     Group label per sample, indexed by sample ID.
        permutations: Number of permutations for the p-value.

    Returns:
        skbio result Series ('test statistic', 'p-value', ...).

    Raises:
        ValueError: If samples lack a group or fewer than two groups remain
    """
    grouping = grouping.astype(str)
    ids = list(dm.ids)
    missing = [i for i in ids if i not in grouping.index]
    if missing:
        raise ValueError(f"{len(missing)} sample(s) have no group: {missing[:5]}")
    grouping = grouping.loc[ids]
    if grouping.nunique() < 2:
        raise ValueError(
            f"PERMANOVA needs at least two groups, got {grouping.unique().tolist()}"
        )
    return permanova(dm, grouping, permutations=permutations)

# ===================================== IMPORTS ====================================== #

# Standard Library Imports
import logging
from typing import Optional

# Third-Party Imports
import pandas as pd

# Local Imports
from workflow_mags import constants
from workflow_mags.utils.data import require_columns

# ========================== INITIALIZATION & CONFIGURATION ========================== #

logger = logging.getLogger("workflow_mags")

# ==================================== EXCEPTIONS ==================================== #

class FeatureOrderError(AssertionError):
    """Quality table rows are not in the same order as abundance matrix rows."""


class ZeroCompletenessError(ValueError):
    """Expected genome size is undefined for one or more features."""

# ==================================== FUNCTIONS ===================================== #

def check_feature_order(counts: pd.DataFrame, quality: pd.DataFrame) -> None:
    """Raise FeatureOrderError unless both tables list the same features in the
    same order."""
    if not counts.index.equals(quality.index):
        mismatches = [
            (i, c, q)
            for i, (c, q) in enumerate(zip(counts.index, quality.index))
            if c != q
        ]
        raise FeatureOrderError(
            f"Feature order of the quality table ({len(quality)} rows) does not "
            f"match the abundance matrix ({len(counts)} rows); first mismatches "
            f"(position, abundance, quality): {mismatches[:3]}"
        )


def expected_genome_size(
    quality: pd.DataFrame,
    completeness_col: str = constants.DEFAULT_COMPLETENESS_COLUMN,
    genome_size_col: str = constants.DEFAULT_GENOME_SIZE_COLUMN
) -> pd.Series:
    """Genome size a complete genome would have: estimated size / (completeness / 100).

    Raises:
        MissingColumnsError:   If either column is absent.
        ZeroCompletenessError: For missing or non-positive completeness or size.
    """
    require_columns(quality, [completeness_col, genome_size_col], "quality table")
    completeness = quality[completeness_col].astype(float)
    genome_size = quality[genome_size_col].astype(float)

    bad_completeness = completeness.isna() | (completeness <= 0)
    if bad_completeness.any():
        raise ZeroCompletenessError(
            "Expected genome size is undefined for features with missing or "
            f"non-positive completeness: {completeness.index[bad_completeness].tolist()[:10]}"
        )
    bad_size = genome_size.isna() | (genome_size <= 0)
    if bad_size.any():
        raise ZeroCompletenessError(
            "Expected genome size is undefined for features with missing or "
            f"non-positive genome size: {genome_size.index[bad_size].tolist()[:10]}"
        )

    over_complete = completeness > 100
    if over_complete.any():
        logger.warning(
            f"{int(over_complete.sum())} feature(s) report completeness above 100%"
        )

    return (genome_size / (completeness / 100)).rename(
        constants.EXPECTED_GENOME_SIZE_COLUMN
    )


def normalize_by_genome_size(
    counts: pd.DataFrame,
    quality: pd.DataFrame,
    completeness_col: str = constants.DEFAULT_COMPLETENESS_COLUMN,
    genome_size_col: str = constants.DEFAULT_GENOME_SIZE_COLUMN,
    sizes: Optional[pd.Series] = None
) -> pd.DataFrame:
    """Divide each feature's raw read counts by its expected genome size.

    Args:
        counts:  Raw read counts (features × samples).
        quality: Per-feature completeness and estimated genome size, with rows
                 in exactly the same order as `counts`.
        sizes:   Expected genome sizes already computed from `quality`.

    Returns:
        Matrix with the same shape and labels as `counts`. No scaling across
        samples is applied.

    Raises:
        FeatureOrderError:     If the row orders differ.
        ZeroCompletenessError: If an expected genome size is undefined.
    """
    check_feature_order(counts, quality)
    if sizes is None:
        sizes = expected_genome_size(quality, completeness_col, genome_size_col)
    normalized = counts.astype(float).div(sizes, axis=0)
    logger.info(
        f"Normalized {normalized.shape[0]} features × {normalized.shape[1]} "
        "samples by expected genome size"
    )
    return normalized

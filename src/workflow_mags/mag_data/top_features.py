# ===================================== IMPORTS ====================================== #

# Standard Library Imports
import logging
from typing import List

# Third‑Party Imports
import pandas as pd

# ========================== INITIALISATION & CONFIGURATION ========================== #

logger = logging.getLogger("workflow_mags")

# ==================================== FUNCTIONS ===================================== #

def top_features(table: pd.DataFrame, n: int) -> List[str]:
    """Return the `n` features (rows) with the highest total abundance across
    samples, most abundant first. Ties keep the input order.

    Raises:
        ValueError: If n is < 1 or larger than the number of features.
    """
    if n < 1:
        raise ValueError(f"n must be ≥ 1, got {n}")
    if n > table.shape[0]:
        raise ValueError(
            f"Requested top {n} features but the table only has {table.shape[0]}"
        )
    totals = table.sum(axis=1)
    # mergesort is stable, so equal totals stay in input order
    ranked = totals.sort_values(ascending=False, kind='mergesort')
    return ranked.index[:n].tolist()


def top_features_table(table: pd.DataFrame, n: int) -> pd.DataFrame:
    """Sub-matrix of the `n` most abundant features, in ranked order."""
    features = top_features(table, n)
    logger.debug(f"Top {n} features: {features}")
    return table.loc[features]

# ===================================== IMPORTS ====================================== #

# Standard Library Imports
import logging
from pathlib import Path
from typing import Iterable, Union

# Third-Party Imports
import numpy as np
import pandas as pd
from biom import Table, load_table

# ========================== INITIALIZATION & CONFIGURATION ========================== #

logger = logging.getLogger("workflow_mags")

# ==================================== EXCEPTIONS ==================================== #

class MissingColumnsError(ValueError):
    """Raised when an input table lacks columns the workflow depends on."""

# ================================= COLUMN HANDLING ================================== #

def normalize_column_name(name: str) -> str:
    """'Estimated Genome Size' -> 'estimated_genome_size'"""
    return (
        str(name).strip().lstrip('#').lower()
        .replace(' ', '_').replace('-', '_')
    )


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = [normalize_column_name(c) for c in df.columns]
    return df


def require_columns(
    df: pd.DataFrame,
    required: Iterable[str],
    source: Union[str, Path] = "table"
) -> None:
    """Raise MissingColumnsError naming every absent column at once."""
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise MissingColumnsError(
            f"Missing required column(s) {missing} in {source}. "
            f"Available: {list(df.columns)}"
        )


def check_path(path: Union[str, Path], description: str) -> Path:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"{description} file not found: {path}")
    return path


def read_tsv(tsv_path: Union[str, Path], text_columns: Iterable[str] = ()) -> pd.DataFrame:
    """Read a TSV and normalize its column names.

    Columns whose normalized name is in `text_columns` are read as strings so
    that IDs such as '007' keep their zero padding.
    """
    header = pd.read_csv(tsv_path, sep='\t', nrows=0).columns
    wanted = {normalize_column_name(c) for c in text_columns}
    dtype = {raw: str for raw in header if normalize_column_name(raw) in wanted}
    return normalize_columns(pd.read_csv(tsv_path, sep='\t', dtype=dtype))

# ================================ TABLE CONVERSION ================================== #

def biom_to_df(table: Table) -> pd.DataFrame:
    """BIOM Table -> dense features × samples DataFrame with string IDs."""
    df = table.to_dataframe(dense=True)
    df.index = pd.Index([str(i) for i in df.index], name='feature_id')
    df.columns = [str(c) for c in df.columns]
    return df

# =================================== IMPORTERS ====================================== #

def import_table_biom(biom_path: Union[str, Path]) -> pd.DataFrame:
    """Load a BIOM feature table as a features × samples DataFrame."""
    biom_path = check_path(biom_path, "BIOM table")
    return biom_to_df(load_table(str(biom_path)))


def import_table_tsv(tsv_path: Union[str, Path]) -> pd.DataFrame:
    """Load a read-count TSV whose first column holds feature IDs and whose
    remaining columns hold one sample each. IDs are read verbatim ('007' stays
    '007')."""
    tsv_path = check_path(tsv_path, "Read count table")
    first = pd.read_csv(tsv_path, sep='\t', nrows=0).columns[0]
    df = pd.read_csv(tsv_path, sep='\t', index_col=0, dtype={first: str})
    if df.shape[1] == 0:
        raise MissingColumnsError(f"No sample columns found in {tsv_path}")
    df.index = df.index.astype(str)
    df.index.name = 'feature_id'
    df.columns = [str(c) for c in df.columns]
    return df


def import_counts_table(path: Union[str, Path]) -> pd.DataFrame:
    """Load raw read counts (features × samples) from TSV or BIOM.

    Raises:
        ValueError: For duplicate IDs, non-numeric or negative counts.
    """
    path = Path(path)
    if path.suffix.lower() == '.biom':
        df = import_table_biom(path)
    else:
        df = import_table_tsv(path)

    if df.index.duplicated().any():
        dupes = df.index[df.index.duplicated()].unique().tolist()
        raise ValueError(f"Duplicate feature IDs in {path}: {dupes[:5]}")
    if df.columns.duplicated().any():
        dupes = df.columns[df.columns.duplicated()].unique().tolist()
        raise ValueError(f"Duplicate sample IDs in {path}: {dupes[:5]}")

    non_numeric = [c for c in df.columns if not pd.api.types.is_numeric_dtype(df[c])]
    if non_numeric:
        raise ValueError(f"Non-numeric count columns in {path}: {non_numeric[:5]}")
    if df.isna().any().any():
        raise ValueError(f"Read count table {path} contains missing values")
    if (df.values < 0).any():
        raise ValueError(f"Read count table {path} contains negative counts")

    logger.info(
        f"Loaded read counts: {df.shape[0]} features × {df.shape[1]} samples "
        f"({int(np.asarray(df.values).sum())} reads)"
    )
    return df

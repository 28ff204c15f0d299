# ===================================== IMPORTS ====================================== #

# Standard Imports
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

# Third Party Imports
import pandas as pd

# Local Imports
from workflow_mags import constants
from workflow_mags.utils.data import (
    check_path, normalize_column_name, read_tsv, require_columns
)

logger = logging.getLogger("workflow_mags")

# ==================================================================================== #

def split_sample_id(
    sample_id: str,
    separator: str = constants.DEFAULT_SAMPLE_ID_SEPARATOR,
    fields: Sequence[str] = constants.DEFAULT_SAMPLE_ID_FIELDS
) -> dict:
    """Decompose a sample ID into its named parts.

    The ID is split from the right so that the first field (the station) may
    itself contain the separator, e.g. 'TARA_018_0.22-3_SRF' ->
    {'station': 'TARA_018', 'fraction': '0.22-3', 'depth': 'SRF'}.

    Raises:
        ValueError: If the ID does not contain one part per field.
    """
    parts = str(sample_id).rsplit(separator, len(fields) - 1)
    if len(parts) != len(fields) or not all(parts):
        raise ValueError(
            f"Sample ID '{sample_id}' cannot be split on '{separator}' "
            f"into fields {list(fields)}"
        )
    return dict(zip(fields, parts))


def import_sample_metadata(
    tsv_path: Union[str, Path],
    id_column: str = constants.DEFAULT_SAMPLE_ID_COLUMN,
    separator: str = constants.DEFAULT_SAMPLE_ID_SEPARATOR,
    fields: Sequence[str] = constants.DEFAULT_SAMPLE_ID_FIELDS,
    required_columns: Optional[List[str]] = None
) -> pd.DataFrame:
    """Load the per-sample metadata TSV and decompose its sample IDs.

    Fields parsed out of the ID only fill columns the file does not already
    provide.

    Args:
        tsv_path:         Path to metadata TSV file.
        id_column:        Column holding sample IDs.
        separator:        Separator between sample ID fields.
        fields:           Names of the sample ID fields, in order.
        required_columns: Further columns that must be present.

    Returns:
        Metadata DataFrame indexed by sample ID.

    Raises:
        FileNotFoundError:   If specified path doesn't exist.
        MissingColumnsError: If the ID column or a required column is absent.
        ValueError:          For duplicate or malformed sample IDs.
    """
    tsv_path = check_path(tsv_path, "Sample metadata")
    id_column = normalize_column_name(id_column)
    df = read_tsv(tsv_path, text_columns=[id_column])
    require_columns(df, [id_column, *(required_columns or [])], tsv_path)

    df[id_column] = df[id_column].astype(str).str.strip()
    if df[id_column].duplicated().any():
        dupes = df.loc[df[id_column].duplicated(), id_column].tolist()
        raise ValueError(f"Duplicate sample IDs in {tsv_path}: {dupes[:5]}")

    parsed = pd.DataFrame(
        [split_sample_id(sid, separator, fields) for sid in df[id_column]],
        index=df.index
    )
    for col in parsed.columns:
        if col not in df.columns:
            df[col] = parsed[col]

    df = df.set_index(id_column)
    df.index.name = 'sample_id'
    logger.info(f"Loaded metadata for {len(df)} samples")
    return df


def import_station_metadata(
    tsv_path: Union[str, Path],
    station_column: str = constants.DEFAULT_STATION_COLUMN,
    required_columns: Sequence[str] = constants.DEFAULT_STATION_REQUIRED_COLUMNS
) -> pd.DataFrame:
    """Load the per-station metadata TSV (biogeographic province, coordinates...).

    Returns:
        Station DataFrame indexed by station.
    """
    tsv_path = check_path(tsv_path, "Station metadata")
    station_column = normalize_column_name(station_column)
    df = read_tsv(tsv_path, text_columns=[station_column])
    required = [normalize_column_name(c) for c in required_columns]
    require_columns(df, [station_column, *required], tsv_path)

    df[station_column] = df[station_column].astype(str).str.strip()
    if df[station_column].duplicated().any():
        dupes = df.loc[df[station_column].duplicated(), station_column].tolist()
        raise ValueError(f"Duplicate stations in {tsv_path}: {dupes[:5]}")

    df = df.set_index(station_column)
    df.index.name = constants.DEFAULT_STATION_COLUMN
    return df


def merge_metadata(
    samples: pd.DataFrame,
    stations: pd.DataFrame,
    station_column: str = constants.DEFAULT_STATION_COLUMN
) -> pd.DataFrame:
    """Attach station-level metadata to every sample.

    Raises:
        MissingColumnsError: If samples carry no station column.
        ValueError:          If a sample references an unknown station.
    """
    require_columns(samples, [station_column], "sample metadata")
    samples = samples.copy()
    samples[station_column] = samples[station_column].astype(str).str.strip()
    unknown = sorted(set(samples[station_column]) - set(stations.index))
    if unknown:
        raise ValueError(
            f"{len(unknown)} station(s) referenced by samples are missing from "
            f"the station metadata: {unknown[:5]}"
        )

    # Sample-level values win over station-level ones with the same name
    station_cols = [c for c in stations.columns if c not in samples.columns]
    merged = samples.join(stations[station_cols], on=station_column)
    logger.debug(
        f"Merged {len(station_cols)} station column(s) into sample metadata"
    )
    return merged

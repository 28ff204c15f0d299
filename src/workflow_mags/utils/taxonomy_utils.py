# ===================================== IMPORTS ====================================== #

# Standard Library Imports
import logging
from pathlib import Path
from typing import Dict, Optional, Union

# Third-Party Imports
import pandas as pd

# Local Imports
from workflow_mags import constants
from workflow_mags.utils.data import (
    check_path, normalize_column_name, read_tsv, require_columns
)

# ========================== INITIALIZATION & CONFIGURATION ========================== #

logger = logging.getLogger('workflow_mags')

DEFAULT_COLUMNS = {
    'feature_id': constants.DEFAULT_FEATURE_ID_COLUMN,
    'classification': constants.DEFAULT_CLASSIFICATION_COLUMN,
    'completeness': constants.DEFAULT_COMPLETENESS_COLUMN,
    'contamination': constants.DEFAULT_CONTAMINATION_COLUMN,
    'genome_size': constants.DEFAULT_GENOME_SIZE_COLUMN,
}

# ================================== TAXONOMY CLASS ================================== #

class Taxonomy:
    """
    Handler for MAG taxonomy and genome quality data (e.g. GTDB-Tk classification
    joined with CheckM estimates).

    Attributes:
        taxonomy (pd.DataFrame): Parsed table indexed by feature ID, in file order,
            with columns:
            - classification: Raw taxonomy string
            - completeness:   Estimated completeness (%)
            - contamination:  Estimated contamination (%), if provided
            - genome_size:    Estimated genome size (bp)
            - taxstring:      Cleaned taxonomy string
            - Domain..Species: Taxonomic ranks (missing where GTDB leaves a rank empty)
    """

    def __init__(
        self,
        tsv_path: Union[str, Path],
        columns: Optional[Dict[str, str]] = None
    ) -> None:
        self.tsv_path = Path(tsv_path)
        self.columns = {
            key: normalize_column_name(value)
            for key, value in {**DEFAULT_COLUMNS, **(columns or {})}.items()
        }
        self.taxonomy: pd.DataFrame = self._import_taxonomy_tsv(self.tsv_path)

    def _import_taxonomy_tsv(self, tsv_path: Path) -> pd.DataFrame:
        tsv_path = check_path(tsv_path, "Taxonomy/quality")
        id_col = self.columns['feature_id']
        tax_col = self.columns['classification']
        comp_col = self.columns['completeness']
        cont_col = self.columns['contamination']
        size_col = self.columns['genome_size']
        df = read_tsv(tsv_path, text_columns=[id_col])
        require_columns(df, [id_col, tax_col, comp_col, size_col], tsv_path)

        df[id_col] = df[id_col].astype(str)
        if df[id_col].duplicated().any():
            dupes = df.loc[df[id_col].duplicated(), id_col].tolist()
            raise ValueError(f"Duplicate feature IDs in {tsv_path}: {dupes[:5]}")

        renames = {
            tax_col: 'classification',
            comp_col: constants.DEFAULT_COMPLETENESS_COLUMN,
            size_col: constants.DEFAULT_GENOME_SIZE_COLUMN,
        }
        if cont_col in df.columns:
            renames[cont_col] = constants.DEFAULT_CONTAMINATION_COLUMN
        df = df.rename(columns=renames).set_index(id_col)
        df.index.name = 'feature_id'

        for col in (constants.DEFAULT_COMPLETENESS_COLUMN,
                    constants.DEFAULT_GENOME_SIZE_COLUMN):
            df[col] = pd.to_numeric(df[col], errors='raise')

        df['classification'] = df['classification'].fillna(constants.UNCLASSIFIED)
        df['taxstring'] = (
            df['classification'].astype(str)
            .str.replace(r' *[dpcofgs]__', '', regex=True)
        )
        for level, rank in constants.TAXONOMIC_RANKS.items():
            df[rank] = df['classification'].apply(
                lambda x: self._extract_level(x, level)
            )

        logger.info(f"Loaded taxonomy and quality for {len(df)} features")
        return df

    def _extract_level(
        self,
        taxonomy: str,
        level: str
    ) -> Optional[str]:
        """
        Extract specific taxonomic level from a GTDB-style taxonomy string.

        Args:
            taxonomy: Raw taxonomy string.
            level:    Taxonomic level prefix (d/p/c/o/f/g/s).

        Returns:
            Taxonomic name for specified level, or None if not found.
        """
        prefix = level + '__'
        if not taxonomy or taxonomy in ['Unassigned', constants.UNCLASSIFIED]:
            return constants.UNCLASSIFIED

        start = taxonomy.find(prefix)
        if start == -1:
            return None

        end = taxonomy.find(';', start)
        name = (
            taxonomy[start+len(prefix):end]
            if end != -1 else
            taxonomy[start+len(prefix):]
        )
        return name or None

    def get_taxstring_by_id(self, feature_id: str) -> Optional[str]:
        return (
            self.taxonomy.loc[feature_id, 'taxstring']
            if feature_id in self.taxonomy.index else
            None
        )

    def label(self, feature_id: str, rank: str = 'Genus') -> str:
        return feature_label(self.taxonomy, feature_id, rank)

# ==================================== FUNCTIONS ===================================== #

def feature_label(
    taxonomy: pd.DataFrame,
    feature_id: str,
    rank: str = 'Genus'
) -> str:
    """'bin_12 (Pelagibacter)', falling back to coarser ranks when the
    requested rank is unassigned."""
    if feature_id not in taxonomy.index:
        return feature_id
    ranks = list(constants.TAXONOMIC_RANKS.values())
    for r in reversed(ranks[:ranks.index(rank) + 1]):
        if r not in taxonomy.columns:
            continue
        name = taxonomy.at[feature_id, r]
        if isinstance(name, str) and name and name != constants.UNCLASSIFIED:
            return f"{feature_id} ({name})"
    return f"{feature_id} ({constants.UNCLASSIFIED})"

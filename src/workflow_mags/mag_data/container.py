# ===================================== IMPORTS ====================================== #

# Standard Library Imports
import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

# Third‑Party Imports
import pandas as pd
from skbio import TreeNode

# ================================== LOCAL IMPORTS =================================== #

from workflow_mags import constants
from workflow_mags.mag_data.normalization import (
    check_feature_order, expected_genome_size, normalize_by_genome_size
)
from workflow_mags.utils.data import import_counts_table
from workflow_mags.utils.metadata import (
    import_sample_metadata, import_station_metadata, merge_metadata
)
from workflow_mags.utils.taxonomy_utils import Taxonomy
from workflow_mags.utils.tree import compare_tips, import_tree

# ========================== INITIALISATION & CONFIGURATION ========================== #

logger = logging.getLogger("workflow_mags")

# ==================================================================================== #

@dataclass
class MAGData:
    """MAG abundance data keyed by feature ID and sample ID.

    Attributes:
        taxonomy:      Taxonomy and genome quality per feature (rows = features).
        counts:        Abundance matrix (features × samples).
        metadata:      Sample metadata (rows = samples, in `counts` column order).
        tree:          Phylogenetic tree of the features. Never modified.
        is_normalized: Whether `counts` holds genome-size normalized values.

    Every feature in `counts` must have a taxonomy row and vice versa, and every
    sample in `counts` must have a metadata row. Feature order is left as
    loaded; normalization checks it.
    """
    taxonomy: pd.DataFrame
    counts: pd.DataFrame
    metadata: pd.DataFrame
    tree: Optional[TreeNode] = None
    is_normalized: bool = False

    def __post_init__(self):
        self._check_features()
        self._align_metadata()
        self._check_tree()

    # ------------------------------- VALIDATION --------------------------------- #

    def _check_features(self) -> None:
        counts_ids = set(self.counts.index)
        taxonomy_ids = set(self.taxonomy.index)
        no_taxonomy = sorted(counts_ids - taxonomy_ids)
        no_counts = sorted(taxonomy_ids - counts_ids)
        if no_taxonomy or no_counts:
            raise ValueError(
                "Feature IDs differ between abundance matrix and taxonomy table: "
                f"{len(no_taxonomy)} without taxonomy {no_taxonomy[:5]}, "
                f"{len(no_counts)} without counts {no_counts[:5]}"
            )

    def _align_metadata(self) -> None:
        missing = [s for s in self.counts.columns if s not in self.metadata.index]
        if missing:
            raise ValueError(
                f"{len(missing)} sample(s) in the abundance matrix have no "
                f"metadata: {missing[:5]}"
            )
        extra = self.metadata.index.difference(self.counts.columns)
        if len(extra):
            logger.warning(
                f"Dropping {len(extra)} metadata row(s) without abundance data: "
                f"{extra.tolist()[:5]}"
            )
        self.metadata = self.metadata.loc[list(self.counts.columns)]

    def _check_tree(self) -> None:
        if self.tree is None:
            return
        not_in_tree, not_features = compare_tips(self.tree, self.counts.index)
        if not_in_tree:
            logger.warning(
                f"{len(not_in_tree)} feature(s) are not tips of the tree: "
                f"{sorted(not_in_tree)[:5]}"
            )
        if not_features:
            logger.debug(f"{len(not_features)} tree tip(s) are not features")

    # ------------------------------- PROPERTIES --------------------------------- #

    @property
    def feature_ids(self) -> List[str]:
        return self.counts.index.tolist()

    @property
    def sample_ids(self) -> List[str]:
        return self.counts.columns.tolist()

    @property
    def shape(self) -> Tuple[int, int]:
        return self.counts.shape

    # ----------------------------- TRANSFORMATIONS ------------------------------ #

    def align_feature_order(self) -> "MAGData":
        """Return a copy whose taxonomy rows follow the abundance matrix order."""
        return replace(self, taxonomy=self.taxonomy.loc[self.counts.index])

    def normalize(self) -> "MAGData":
        """Return a copy with counts divided by expected genome size.

        Raises:
            FeatureOrderError:     If taxonomy and counts rows are not aligned.
            ZeroCompletenessError: If an expected genome size is undefined.
        """
        if self.is_normalized:
            raise ValueError("Counts are already normalized by genome size")
        check_feature_order(self.counts, self.taxonomy)
        sizes = expected_genome_size(self.taxonomy)
        normalized = normalize_by_genome_size(self.counts, self.taxonomy, sizes=sizes)
        taxonomy = self.taxonomy.copy()
        taxonomy[constants.EXPECTED_GENOME_SIZE_COLUMN] = sizes
        return replace(
            self, taxonomy=taxonomy, counts=normalized, is_normalized=True
        )

    def samples_by_features(self) -> pd.DataFrame:
        """Abundances transposed to samples × features, for ordination."""
        return self.counts.T

    # ------------------------------- CONSTRUCTION ------------------------------- #

    @classmethod
    def from_config(cls, config: Dict) -> "MAGData":
        """Load taxonomy, counts, metadata and tree from the `inputs` section."""
        inputs = config["inputs"]
        columns = config.get("columns", {})
        sample_id = config.get("sample_id", {})

        taxonomy = Taxonomy(inputs["taxonomy"], columns.get("taxonomy")).taxonomy
        counts = import_counts_table(inputs["counts"])

        samples = import_sample_metadata(
            inputs["sample_metadata"],
            id_column=sample_id.get("column", constants.DEFAULT_SAMPLE_ID_COLUMN),
            separator=sample_id.get("separator", constants.DEFAULT_SAMPLE_ID_SEPARATOR),
            fields=sample_id.get("fields", constants.DEFAULT_SAMPLE_ID_FIELDS),
        )
        station_column = columns.get("station", constants.DEFAULT_STATION_COLUMN)
        if inputs.get("station_metadata"):
            stations = import_station_metadata(
                inputs["station_metadata"],
                station_column=station_column,
                required_columns=columns.get(
                    "station_required", constants.DEFAULT_STATION_REQUIRED_COLUMNS
                ),
            )
            metadata = merge_metadata(samples, stations)
        else:
            metadata = samples

        tree = import_tree(inputs["tree"]) if inputs.get("tree") else None

        data = cls(taxonomy=taxonomy, counts=counts, metadata=metadata, tree=tree)
        if config.get("normalization", {}).get("align_feature_order", False):
            data = data.align_feature_order()
        logger.info(
            f"Assembled MAG data: {data.shape[0]} features × {data.shape[1]} samples"
        )
        return data

"""
Ocean MAG Abundance Workflow
----------------------------------------------------------------------------------------
Exploratory analysis of metagenome-assembled genome (MAG) abundances across ocean
metagenomics samples: loads taxonomy, genome quality, read counts, sample/station
metadata and the MAG tree, normalizes read counts by expected genome size and draws
heatmaps, ordinations and per-MAG abundance plots.
"""
# ===================================== IMPORTS ====================================== #

# Standard Library Imports
import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

# Third-Party Imports
import pandas as pd

# Local Imports
from workflow_mags import constants
from workflow_mags.config import get_config, is_enabled
from workflow_mags.figures.beta_diversity import create_ordination_plot
from workflow_mags.figures.feature_abundance import feature_abundance_plots
from workflow_mags.figures.figures import Palette
from workflow_mags.figures.heatmaps import clustered_heatmap, top_features_heatmap
from workflow_mags.logger import setup_logging_from_config
from workflow_mags.mag_data.container import MAGData
from workflow_mags.mag_data.top_features import top_features
from workflow_mags.stats.beta_diversity import distance_matrix, pcoa, permanova_test
from workflow_mags.utils.dir_utils import SubDirs

# ========================== INITIALIZATION & CONFIGURATION ========================== #

pd.set_option('display.max_colwidth', None)

logger = logging.getLogger('workflow_mags')

# =================================== MAIN WORKFLOW ================================== #

class WorkflowError(Exception):
    """Raised when the workflow aborts."""


class WorkflowMAGs:
    def __init__(self, config_path: Path = constants.DEFAULT_CONFIG_PATH) -> None:
        self.config = get_config(config_path)
        self.project_dir = SubDirs(
            self.config.get("project_dir", constants.DEFAULT_PROJECT_DIR)
        )
        self.logger = setup_logging_from_config(
            self.project_dir.logs, self.config.get("logging")
        )

        figures_config = self.config.get("figures", {})
        self.show = figures_config.get("show", False)
        self.save_as = figures_config.get("save_as", constants.DEFAULT_SAVE_AS)
        self.palette = Palette.from_config(self.config.get("palette"))

        self.data: Optional[MAGData] = None
        self.figures: Dict = {}

    def run(self) -> None:
        """Execute the workflow based on configuration settings."""
        try:
            self._load()
            self._normalize()
            self._heatmaps()
            self._ordination()
            self._feature_abundance()
        except Exception as e:
            self.logger.critical(f"Workflow execution failed: {e}", exc_info=True)
            raise WorkflowError("Workflow aborted due to errors") from e
        self.logger.info(f"Workflow complete → {self.project_dir.final}")

    # ----------------------------------- STAGES --------------------------------- #

    def _load(self) -> None:
        self.logger.info("Loading MAG data")
        self.data = MAGData.from_config(self.config)

    def _normalize(self) -> None:
        self.data = self.data.normalize()
        output_path = self.project_dir.tables / "normalized_abundance.tsv"
        self.data.counts.to_csv(output_path, sep='\t')
        self.logger.info(f"Wrote normalized abundance table → {output_path}")

    def _heatmaps(self) -> None:
        if not is_enabled(self.config, "heatmap"):
            return
        heatmap_config = self.config.get("heatmap", {})
        kwargs = dict(
            taxonomy=self.data.taxonomy,
            palette=self.palette,
            method=heatmap_config.get("method", constants.DEFAULT_CLUSTER_METHOD),
            metric=heatmap_config.get("metric", constants.DEFAULT_CLUSTER_METRIC),
            transform=heatmap_config.get("transform"),
            rank=heatmap_config.get("rank", "Genus"),
            output_dir=self.project_dir.heatmaps,
            save_as=self.save_as,
            show=self.show,
        )
        self.figures["heatmap_all"] = clustered_heatmap(self.data.counts, **kwargs)

        n = min(heatmap_config.get("top_n", constants.DEFAULT_TOP_N), self.data.shape[0])
        self.figures["heatmap_top"] = top_features_heatmap(
            self.data.counts, n=n, **kwargs
        )

    def _ordination(self) -> None:
        if not is_enabled(self.config, "ordination"):
            return
        ordination_config = self.config.get("ordination", {})
        color_col = ordination_config.get("color_col", constants.DEFAULT_COLOR_COL)
        symbol_col = ordination_config.get("symbol_col", constants.DEFAULT_SYMBOL_COL)
        metrics: List[str] = ordination_config.get("metrics", [constants.DEFAULT_METRIC])
        permanova_config = ordination_config.get("permanova", {})

        table = self.data.samples_by_features()
        permanova_results = []
        for metric in metrics:
            result = pcoa(
                table, metric=metric,
                n_dimensions=ordination_config.get("n_dimensions", constants.DEFAULT_N_PCOA)
            )
            fig, _ = create_ordination_plot(
                components=result.samples,
                metadata=self.data.metadata,
                ordination_type='PCoA',
                proportion_explained=result.proportion_explained,
                color_col=color_col,
                symbol_col=symbol_col,
                palette=self.palette,
                metric=metric,
                output_dir=self.project_dir.ordination,
                save_as=self.save_as,
                show=self.show,
            )
            self.figures[f"pcoa_{metric}"] = fig

            if permanova_config.get("enabled", False):
                dm = distance_matrix(table, metric=metric)
                for group_col in permanova_config.get("group_cols", [color_col]):
                    stats = permanova_test(
                        dm,
                        self.data.metadata[group_col],
                        permutations=permanova_config.get(
                            "permutations", constants.DEFAULT_PERMUTATIONS
                        ),
                    )
                    self.logger.info(
                        f"PERMANOVA {metric} ~ {group_col}: "
                        f"pseudo-F = {stats['test statistic']:.3f}, p = {stats['p-value']:.4f}"
                    )
                    permanova_results.append(
                        stats.rename(f"{metric}~{group_col}")
                    )

        if permanova_results:
            output_path = self.project_dir.tables / "permanova.tsv"
            pd.concat(permanova_results, axis=1).T.to_csv(output_path, sep='\t')
            self.logger.info(f"Wrote PERMANOVA results → {output_path}")

    def _feature_abundance(self) -> None:
        if not is_enabled(self.config, "feature_abundance"):
            return
        fa_config = self.config.get("feature_abundance", {})
        n = min(fa_config.get("n", constants.DEFAULT_N_FEATURE_PLOTS), self.data.shape[0])
        features = top_features(self.data.counts, n)
        self.figures["feature_abundance"] = feature_abundance_plots(
            self.data.counts,
            features,
            self.data.metadata,
            x_col=fa_config.get("x_col", constants.DEFAULT_X_COL),
            facet_col=fa_config.get("facet_col", constants.DEFAULT_FACET_COL),
            color_col=fa_config.get("color_col", constants.DEFAULT_COLOR_COL),
            palette=self.palette,
            taxonomy=self.data.taxonomy,
            category_orders=fa_config.get("category_orders"),
            output_dir=self.project_dir.feature_abundance,
            save_as=self.save_as,
            show=self.show,
        )


def main(argv: Optional[List[str]] = None) -> int:
    """Run the entire workflow."""
    parser = argparse.ArgumentParser(description="Run the ocean MAG abundance workflow.")
    parser.add_argument(
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help="Path to the configuration file.",
    )
    args = parser.parse_args(argv)
    try:
        workflow = WorkflowMAGs(args.config)
    except Exception as e:
        logger.critical(f"Workflow setup failed: {e}", exc_info=True)
        return 1
    try:
        workflow.run()
    except WorkflowError:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

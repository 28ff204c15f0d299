# ===================================== IMPORTS ====================================== #

# Standard Library Imports
import logging
from pathlib import Path
from typing import List, Optional, Union

# Third Party Imports
import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
from scipy.cluster.hierarchy import leaves_list, linkage
from scipy.spatial.distance import pdist

# Local Imports
from workflow_mags import constants
from workflow_mags.figures.figures import Palette, plotly_show_and_save
from workflow_mags.mag_data.top_features import top_features_table
from workflow_mags.utils.taxonomy_utils import feature_label

# ========================== INITIALIZATION & CONFIGURATION ========================== #

logger = logging.getLogger('workflow_mags')

TRANSFORMS = (None, 'log10', 'sqrt')

# ================================ DATA PREPARATION ================================== #

def transform_abundance(data: pd.DataFrame, transform: Optional[str] = None) -> pd.DataFrame:
    """Scale abundances for display.

    'log10' adds a pseudocount of half the smallest non-zero value so that
    absent features stay finite.
    """
    if transform not in TRANSFORMS:
        raise ValueError(f"Unknown transform '{transform}'. Options: {TRANSFORMS}")
    if transform is None:
        return data
    if transform == 'sqrt':
        return np.sqrt(data)
    nonzero = data.values[data.values > 0]
    pseudocount = nonzero.min() / 2 if nonzero.size else 1.0
    return np.log10(data + pseudocount)


def cluster_order(
    data: pd.DataFrame,
    method: str = constants.DEFAULT_CLUSTER_METHOD,
    metric: str = constants.DEFAULT_CLUSTER_METRIC
) -> List[int]:
    """Row positions in hierarchical-clustering leaf order.

    Pairs of empty profiles, for which metrics like Bray-Curtis are undefined,
    are treated as identical.
    """
    if data.shape[0] < 2:
        return list(range(data.shape[0]))
    distances = np.nan_to_num(pdist(data.values, metric=metric), nan=0.0)
    return leaves_list(linkage(distances, method=method)).tolist()

# ================================ VISUALIZATIONS ================================== #

def create_heatmap(
    data: pd.DataFrame,
    taxonomy: Optional[pd.DataFrame] = None,
    palette: Palette = Palette(),
    title: str = f"{constants.DEFAULT_FEATURE_TYPE} Abundance Heatmap",
    cluster_rows: bool = True,
    cluster_cols: bool = True,
    method: str = constants.DEFAULT_CLUSTER_METHOD,
    metric: str = constants.DEFAULT_CLUSTER_METRIC,
    transform: Optional[str] = None,
    rank: str = 'Genus',
    output_dir: Union[Path, None] = None,
    file_stem: str = "heatmap",
    save_as: List[str] = constants.DEFAULT_SAVE_AS,
    show: bool = False
) -> go.Figure:
    """
    Generate a feature abundance heatmap.

    Args:
        data:         Abundance matrix (features x samples).
        taxonomy:     Taxonomy table used to label rows; feature IDs otherwise.
        palette:      Colors; `palette.continuous` is the color scale.
        title:        Figure title.
        cluster_rows: Reorder features by hierarchical clustering.
        cluster_cols: Reorder samples by hierarchical clustering.
        method:       scipy linkage method.
        metric:       scipy distance metric used for clustering.
        transform:    None, 'log10' or 'sqrt'.
        rank:         Taxonomic rank shown in row labels.
        output_dir:   Directory to save outputs.
        file_stem:    Output file name without extension.
        save_as:      Output formats.
        show:         Display figure interactively.

    Returns:
        Plotly heatmap figure
    """
    if data.empty:
        raise ValueError("Cannot draw a heatmap of an empty table")

    values = transform_abundance(data, transform).copy()
    if cluster_rows:
        values = values.iloc[cluster_order(values, method, metric)]
    if cluster_cols:
        values = values.iloc[:, cluster_order(values.T, method, metric)]

    if taxonomy is not None:
        values.index = [feature_label(taxonomy, f, rank) for f in values.index]

    color_label = 'Abundance' if transform is None else f'{transform}(Abundance)'
    fig = px.imshow(
        values,
        color_continuous_scale=palette.continuous,
        labels={'x': 'Samples', 'y': constants.DEFAULT_FEATURE_TYPE, 'color': color_label},
        title=title,
        aspect='auto'
    )

    fig.update_layout(
        template='mags',
        height=max(600, 20 * values.shape[0] + 300),
        width=max(constants.DEFAULT_WIDTH, 25 * values.shape[1] + 500),
        xaxis_tickangle=-90,
        coloraxis_colorbar=dict(thickness=30, len=0.85, yanchor='middle', y=0.5)
    )

    if output_dir:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        plotly_show_and_save(fig, show, output_dir / file_stem, save_as)
    elif show:
        fig.show()

    return fig


def clustered_heatmap(
    data: pd.DataFrame,
    taxonomy: Optional[pd.DataFrame] = None,
    palette: Palette = Palette(),
    **kwargs
) -> go.Figure:
    """Heatmap over all features with rows and columns clustered."""
    return create_heatmap(
        data,
        taxonomy=taxonomy,
        palette=palette,
        title=f"{constants.DEFAULT_FEATURE_TYPE} Abundance ({data.shape[0]} features)",
        cluster_rows=True,
        file_stem=f"heatmap.all.{constants.DEFAULT_FEATURE_TYPE.lower()}",
        **kwargs
    )


def top_features_heatmap(
    data: pd.DataFrame,
    n: int = constants.DEFAULT_TOP_N,
    taxonomy: Optional[pd.DataFrame] = None,
    palette: Palette = Palette(),
    **kwargs
) -> go.Figure:
    """Heatmap of the `n` most abundant features, rows in rank order."""
    subset = top_features_table(data, n)
    return create_heatmap(
        subset,
        taxonomy=taxonomy,
        palette=palette,
        title=f"Top {n} {constants.DEFAULT_FEATURE_TYPE}s",
        cluster_rows=False,
        file_stem=f"heatmap.top{n}.{constants.DEFAULT_FEATURE_TYPE.lower()}",
        **kwargs
    )

# ===================================== IMPORTS ====================================== #

# Standard Library Imports
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Union

# Third Party Imports
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

# ================================== LOCAL IMPORTS =================================== #

from workflow_mags import constants
from workflow_mags.figures.figures import Palette, _validate_metadata, plotly_show_and_save
from workflow_mags.utils.progress import _format_task_desc, get_progress_bar
from workflow_mags.utils.taxonomy_utils import feature_label

# ========================== INITIALIZATION & CONFIGURATION ========================== #

logger = logging.getLogger('workflow_mags')

# ================================ DATA PREPARATION ================================== #

def feature_long_format(
    data: pd.DataFrame,
    feature: str,
    metadata: pd.DataFrame,
    columns: List[str]
) -> pd.DataFrame:
    """One row per sample: sample_id, abundance of `feature` and the metadata
    columns used for grouping."""
    if feature not in data.index:
        raise KeyError(f"Feature '{feature}' not found in abundance table")
    columns = list(dict.fromkeys(c for c in columns if c))
    _validate_metadata(metadata, columns)

    long = data.loc[feature].rename('abundance').to_frame()
    long.index.name = 'sample_id'
    long = long.join(metadata[columns], how='left')
    long[columns] = (
        long[columns].astype(object)
        .fillna(constants.DEFAULT_PLACEHOLDER).astype(str)
    )
    return long.reset_index()

# ================================ VISUALIZATIONS ================================== #

def _category_order(values: pd.Series, preferred: Optional[List[str]] = None) -> List[str]:
    """Categories in `preferred` order first, then any others sorted."""
    present = set(values.unique())
    head = [str(c) for c in (preferred or []) if str(c) in present]
    return head + sorted(present - set(head))


def create_feature_abundance_plot(
    data: pd.DataFrame,
    feature: str,
    metadata: pd.DataFrame,
    x_col: str = constants.DEFAULT_X_COL,
    facet_col: Optional[str] = constants.DEFAULT_FACET_COL,
    color_col: str = constants.DEFAULT_COLOR_COL,
    palette: Palette = Palette(),
    taxonomy: Optional[pd.DataFrame] = None,
    category_orders: Optional[Dict[str, List[str]]] = None,
    output_dir: Union[Path, None] = None,
    save_as: List[str] = constants.DEFAULT_SAVE_AS,
    show: bool = False
) -> go.Figure:
    """
    Jittered per-sample abundance of one feature, grouped along the x axis and
    faceted by a second metadata column.

    Args:
        data:       Abundance matrix (features x samples).
        feature:    Feature ID to plot.
        metadata:   Sample metadata indexed by sample ID.
        x_col:      Metadata column on the x axis.
        facet_col:  Metadata column to facet by (None for a single panel).
        color_col:  Metadata column to color points by.
        palette:    Color assignment for `color_col` categories.
        taxonomy:   Taxonomy table used to label the feature.
        category_orders: Preferred category order per metadata column for the
                    x axis and facets. Unlisted values follow sorted.
        output_dir: Directory to save outputs.
        save_as:    Output formats.
        show:       Display figure interactively.

    Returns:
        Plotly strip plot figure
    """
    long = feature_long_format(data, feature, metadata, [x_col, facet_col, color_col])
    colordict = palette.color_map(long[color_col])
    label = feature_label(taxonomy, feature) if taxonomy is not None else feature

    preferred = (
        constants.DEFAULT_CATEGORY_ORDERS if category_orders is None else category_orders
    )
    orders = {
        col: _category_order(long[col], preferred.get(col))
        for col in (x_col, facet_col) if col
    }
    orders[color_col] = list(colordict)

    fig = px.strip(
        long,
        x=x_col,
        y='abundance',
        color=color_col,
        facet_col=facet_col,
        color_discrete_map=colordict,
        category_orders=orders,
        hover_data=['sample_id'],
        title=label
    )
    fig.update_traces(jitter=0.6, marker=dict(size=10, opacity=0.8))
    n_facets = long[facet_col].nunique() if facet_col else 1
    fig.update_layout(
        template='mags',
        yaxis_title='Normalized abundance',
        height=600,
        width=max(800, 350 * n_facets),
    )
    fig.for_each_annotation(lambda a: a.update(text=a.text.split('=', 1)[-1]))

    if output_dir:
        plot_dir = Path(output_dir)
        plot_dir.mkdir(parents=True, exist_ok=True)
        safe_name = re.sub(r"[^A-Za-z0-9._-]", "_", feature)
        file_stem = f"{safe_name}.{x_col}.{facet_col or 'all'}".lower()
        plotly_show_and_save(fig, show, plot_dir / file_stem, save_as)
    elif show:
        fig.show()

    return fig


def feature_abundance_plots(
    data: pd.DataFrame,
    features: List[str],
    metadata: pd.DataFrame,
    **kwargs
) -> Dict[str, go.Figure]:
    """Strip plots for each feature in `features`, keyed by feature ID."""
    figures = {}
    with get_progress_bar() as progress:
        task = progress.add_task(
            _format_task_desc(f"Plotting {len(features)} feature abundances"),
            total=len(features)
        )
        for feature in features:
            figures[feature] = create_feature_abundance_plot(
                data, feature, metadata, **kwargs
            )
            progress.update(task, advance=1)
    return figures

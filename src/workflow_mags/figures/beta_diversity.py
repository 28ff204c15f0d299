# ===================================== IMPORTS ====================================== #

# Standard Library Imports
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

# Third Party Imports
import pandas as pd
import plotly.graph_objects as go

# Local Imports
from workflow_mags import constants
from workflow_mags.figures.figures import (
    Palette, _apply_common_layout, _create_base_scatter_plot, _validate_metadata,
    plotly_show_and_save
)

# ========================== INITIALIZATION & CONFIGURATION ========================== #

logger = logging.getLogger('workflow_mags')

# ================================ DATA PREPARATION ================================== #

def _prepare_visualization_data(
    components: pd.DataFrame,
    metadata: pd.DataFrame,
    columns: List[str]
) -> pd.DataFrame:
    """Join ordination coordinates with the metadata columns used for styling.

    Raises:
        ValueError: If no sample is shared between coordinates and metadata.
    """
    common = components.index.intersection(metadata.index)
    if len(common) == 0:
        raise ValueError(
            "No common samples between ordination and metadata: "
            f"{components.index.tolist()[:5]} vs {metadata.index.tolist()[:5]}"
        )
    if len(common) < len(components):
        logger.warning(
            f"{len(components) - len(common)} ordinated sample(s) have no metadata"
        )
    unique_columns = list(dict.fromkeys(columns))
    data = components.loc[common].join(metadata.loc[common, unique_columns])
    data[unique_columns] = (
        data[unique_columns].astype(object)
        .fillna(constants.DEFAULT_PLACEHOLDER).astype(str)
    )
    return data

# ================================ VISUALIZATIONS ================================== #

def create_ordination_plot(
    components: pd.DataFrame,
    metadata: pd.DataFrame,
    ordination_type: str = 'PCoA',
    proportion_explained: Optional[pd.Series] = None,
    color_col: str = constants.DEFAULT_COLOR_COL,
    symbol_col: str = constants.DEFAULT_SYMBOL_COL,
    palette: Palette = Palette(),
    dimensions: Tuple[int, int] = (1, 2),
    metric: str = constants.DEFAULT_METRIC,
    output_dir: Union[Path, None] = None,
    save_as: List[str] = constants.DEFAULT_SAVE_AS,
    show: bool = False
) -> Tuple[go.Figure, Dict[str, str]]:
    """
    Generate an ordination plot.

    Args:
        components:           Sample coordinates (samples × axes, PCo1..PCoN).
        metadata:             Sample metadata indexed by sample ID.
        ordination_type:      Ordination name used in titles and file names.
        proportion_explained: Variance explained per axis.
        color_col:            Column to use for coloring points.
        symbol_col:           Column to use for point symbols.
        palette:              Color assignment for `color_col` categories.
        dimensions:           Tuple of 1-based axes to plot (x, y).
        metric:               Distance metric the ordination was computed on.
        output_dir:           Directory to save outputs.
        save_as:              Output formats.
        show:                 Display figure interactively.

    Returns:
        Tuple containing figure and color mapping dictionary.
    """
    _validate_metadata(metadata, [color_col, symbol_col])

    x_dim, y_dim = dimensions
    prefix = 'PCo' if ordination_type == 'PCoA' else ordination_type
    x_col, y_col = f'{prefix}{x_dim}', f'{prefix}{y_dim}'
    for col in (x_col, y_col):
        if col not in components.columns:
            raise ValueError(
                f"Column '{col}' not found. Available: {components.columns.tolist()[:5]}"
            )

    data = _prepare_visualization_data(
        components[[x_col, y_col]], metadata, [color_col, symbol_col]
    )
    data['sample_id'] = data.index
    colordict = palette.color_map(data[color_col])

    if proportion_explained is not None and len(proportion_explained) >= max(x_dim, y_dim):
        x_title = f"{x_col} ({proportion_explained.iloc[x_dim-1]*100:.1f}%)"
        y_title = f"{y_col} ({proportion_explained.iloc[y_dim-1]*100:.1f}%)"
    else:
        x_title, y_title = x_col, y_col

    fig = _create_base_scatter_plot(
        data, x_col, y_col, color_col, symbol_col, colordict,
        hover_data=list(dict.fromkeys(['sample_id', color_col, symbol_col]))
    )
    title = f'{ordination_type}: {metric.title()}'
    fig = _apply_common_layout(fig, x_title, y_title, title)
    fig.update_layout(xaxis=dict(scaleanchor="y", scaleratio=1.0))

    if output_dir:
        plot_dir = Path(output_dir) / ordination_type.lower()
        plot_dir.mkdir(parents=True, exist_ok=True)
        file_stem = f"{ordination_type.lower()}.{metric}.{x_dim}-{y_dim}.{color_col}"
        plotly_show_and_save(fig, show, plot_dir / file_stem, save_as)
    elif show:
        fig.show()

    return fig, colordict

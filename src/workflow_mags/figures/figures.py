# ===================================== IMPORTS ====================================== #

# Standard Library Imports
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

# Third Party Imports
import colorcet as cc
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import plotly.io as pio

# Local Imports
from workflow_mags import constants

# ========================== INITIALIZATION & CONFIGURATION ========================== #

logger = logging.getLogger('workflow_mags')

# ================================= GLOBAL VARIABLES ================================= #

largecolorset = list(
  cc.glasbey + cc.glasbey_light + cc.glasbey_warm + cc.glasbey_cool + cc.glasbey_dark
)

STATIC_FORMATS = {"png", "jpg", "jpeg", "pdf", "svg", "eps"}

# Boxed axes without grid lines, shared by x and y
_AXIS_STYLE = dict(
    showgrid=False, zeroline=False, showline=True, linewidth=2,
    linecolor='black', automargin=True, mirror=True
)

pio.templates["mags"] = go.layout.Template(
  layout=dict(
    height=constants.DEFAULT_HEIGHT,
    width=constants.DEFAULT_WIDTH,
    title=dict(
      font=dict(
        family='HelveticaNeue-CondensedBold, Helvetica, Sans-serif', size=32, color='#000'
      ),
      x=0.5
    ),
    font=dict(family='Helvetica Neue, Helvetica, Sans-serif', size=18, color='#000'),
    paper_bgcolor='rgba(0, 0, 0, 0)',
    plot_bgcolor='#fff',
    xaxis=_AXIS_STYLE,
    yaxis=_AXIS_STYLE,
  )
)

# ==================================== PALETTE ======================================= #

@dataclass(frozen=True)
class Palette:
    """Color assignment passed explicitly to every plotting function.

    Categories are sorted before colors are handed out so the same category set
    always receives the same colors; `overrides` pins individual categories.
    """
    colors: Tuple[str, ...] = tuple(largecolorset)
    overrides: Dict[str, str] = field(default_factory=dict)
    continuous: str = constants.DEFAULT_HEATMAP_COLORSCALE
    nan_color: str = constants.NAN_COLOR

    def color_map(self, values: Iterable) -> Dict[str, str]:
        categories = sorted({str(v) for v in values if pd.notnull(v)})
        free = [c for c in self.colors if c not in self.overrides.values()]
        if not free:
            free = list(self.colors)
        color_map = {}
        i = 0
        for category in categories:
            if category in self.overrides:
                color_map[category] = self.overrides[category]
            else:
                color_map[category] = free[i % len(free)]
                i += 1
        return color_map

    @classmethod
    def from_config(cls, config: Optional[Dict]) -> "Palette":
        config = config or {}
        name = config.get('name', constants.DEFAULT_PALETTE)
        if name not in cc.palette:
            raise ValueError(f"Unknown colorcet palette: '{name}'")
        return cls(
            colors=tuple(cc.palette[name]),
            overrides={str(k): v for k, v in (config.get('overrides') or {}).items()},
            continuous=config.get('continuous', constants.DEFAULT_HEATMAP_COLORSCALE),
        )

# ================================== SAVING ========================================== #

def _strip_figure_suffix(path: Path) -> Path:
    """'heatmap.html' -> 'heatmap'; other dots ('pcoa.braycurtis.1-2') are kept."""
    if path.suffix.lstrip('.') in STATIC_FORMATS | {'html'}:
        return path.with_suffix('')
    return path


def plotly_show_and_save(
    fig: go.Figure,
    show: bool = False,
    output_path: Union[str, Path, None] = None,
    save_as: List[str] = constants.DEFAULT_SAVE_AS,
    scale: int = 3,
    verbose: bool = False,
    **write_kwargs
) -> List[Path]:
    """
    Optionally display a Plotly figure and write it in each requested format.

    Args:
        fig:            Plotly figure.
        show:           Display the figure interactively.
        output_path:    Base path; '.html', '.png'... are appended per format.
        save_as:        Formats to write ('html' and/or static image formats).
        scale:          Scale factor for raster outputs.
        verbose:        Log each written file at INFO instead of DEBUG.
        **write_kwargs: Forwarded to `fig.write_image` / `fig.write_html`.

    Returns:
        Paths that were written. Export failures are logged, not raised;
        static formats need kaleido (`pip install workflow-mags[export]`).
    """
    if show:
        fig.show()
    if not output_path:
        return []

    base = _strip_figure_suffix(Path(output_path).expanduser().resolve())
    base.parent.mkdir(parents=True, exist_ok=True)
    log_ok = logger.info if verbose else logger.debug

    unknown = set(save_as) - STATIC_FORMATS - {'html'}
    if unknown:
        logger.warning(f"Ignoring unsupported figure format(s): {sorted(unknown)}")

    written = []
    for fmt in sorted(STATIC_FORMATS.intersection(save_as)) + (
        ['html'] if 'html' in save_as else []
    ):
        target = Path(f"{base}.{fmt}")
        try:
            if fmt == 'html':
                fig.write_html(target, **write_kwargs)
            else:
                fig.write_image(target, format=fmt, scale=scale, **write_kwargs)
        except Exception as e:
            hint = "" if fmt == 'html' else " Static export needs kaleido installed."
            logger.error(f"Failed to save figure '{target}': {e}.{hint}")
            continue
        log_ok(f"Saved figure to '{target}'.")
        written.append(target)
    return written

# ================================ SHARED PLOTTING =================================== #

def _validate_metadata(metadata: pd.DataFrame, required_cols: List[str]) -> None:
    """
    Validate presence of required columns in metadata.

    Raises:
        ValueError: If any required columns are missing.
    """
    missing = [col for col in required_cols if col not in metadata.columns]
    if missing:
        raise ValueError(f"Metadata missing required columns: {missing}")


def _create_base_scatter_plot(
    data: pd.DataFrame,
    x_col: str,
    y_col: str,
    color_col: str,
    symbol_col: str,
    colordict: Dict[str, str],
    hover_data: List[str]
) -> go.Figure:
    """
    Create standardized scatter plot configuration.

    Args:
        data:       DataFrame containing visualization data.
        x_col:      Column name for x-axis values.
        y_col:      Column name for y-axis values.
        color_col:  Column name for coloring points.
        symbol_col: Column name for point symbols.
        colordict:  Color mapping dictionary.
        hover_data: Additional columns to show in hover info.

    Returns:
        Configured Plotly scatter plot
    """
    fig = px.scatter(
        data,
        x=x_col,
        y=y_col,
        color=color_col,
        symbol=symbol_col,
        color_discrete_map=colordict,
        category_orders={color_col: list(colordict)},
        hover_data=hover_data,
        opacity=0.8,
    )
    fig.update_traces(marker=dict(size=12, line=dict(width=1, color='black')))
    fig.add_annotation(
        text=f"n = {data.shape[0]}",
        xref="paper", yref="paper",        # relative to full plot
        x=0.99, y=0.01,                    # bottom‑right corner
        xanchor="right", yanchor="bottom",
        showarrow=False,
        font=dict(size=18, color="black"),
        bgcolor="rgba(255,255,255,0.4)",
    )
    return fig


def _apply_common_layout(
    fig: go.Figure,
    x_title: str,
    y_title: str,
    title: str = None,
    height: int = constants.DEFAULT_HEIGHT,
    width: int = constants.DEFAULT_WIDTH
) -> go.Figure:
    layout_updates = {
        'template': 'mags',
        'height': height,
        'width': width,
        'showlegend': True,
    }
    if title:
        layout_updates.update({
            'title_text': title,
            'title_x': 0.5
        })

    fig.update_layout(
        xaxis_title=x_title,
        yaxis_title=y_title,
        **layout_updates
    )
    return fig

# ===================================== IMPORTS ====================================== #

# Standard Library Imports
from datetime import timedelta

# Third-Party Imports
from rich.progress import (
    BarColumn, Progress, ProgressColumn, SpinnerColumn, Task, TextColumn
)
from rich.text import Text

# Local Imports
from workflow_mags import constants

# ==================================== COLUMNS ======================================= #

class MofNCompleteColumn(ProgressColumn):
    """'3/10' features done."""
    def render(self, task: Task) -> Text:
        total = "?" if task.total is None else int(task.total)
        return Text(
            f"{int(task.completed)}/{total}".rjust(10),
            style=constants.DEFAULT_M_OF_N_COMPLETE_STYLE,
            justify="right"
        )


class TimeElapsedColumn(ProgressColumn):
    def render(self, task: Task) -> Text:
        elapsed = task.finished_time if task.finished else task.elapsed
        text = "-:--:--" if elapsed is None else str(timedelta(seconds=int(elapsed)))
        return Text(f"E {text}", style=constants.DEFAULT_TIME_ELAPSED_STYLE)

# =================================== PROGRESS BAR =================================== #

def get_progress_bar(
    transient: bool = False,
    description_width: int = constants.DEFAULT_PROGRESS_TEXT_N
) -> Progress:
    """Progress bar used for per-feature loops (spinner, description, m/n, bar,
    percentage, elapsed time)."""
    return Progress(
        SpinnerColumn(
            "dots", style=constants.DEFAULT_BAR_COLUMN_COMPLETE_STYLE, speed=0.75
        ),
        TextColumn(
            "{task.description}".ljust(description_width),
            style=constants.DEFAULT_DESCRIPTION_STYLE,
        ),
        MofNCompleteColumn(),
        BarColumn(
            bar_width=constants.DEFAULT_BAR_WIDTH,
            style="black",
            complete_style=constants.DEFAULT_BAR_COLUMN_COMPLETE_STYLE,
            finished_style=constants.DEFAULT_FINISHED_STYLE
        ),
        TextColumn(
            "{task.percentage:>3.0f}%",
            style=constants.DEFAULT_PROGRESS_PERCENTAGE_STYLE,
            justify="right"
        ),
        TimeElapsedColumn(),
        transient=transient,
        expand=False
    )


def _format_task_desc(desc: str, width: int = constants.DEFAULT_PROGRESS_TEXT_N) -> str:
    return f"[white]{str(desc):<{width}}"

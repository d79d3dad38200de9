"""Common chart styling utilities to eliminate code duplication."""

import logging

import matplotlib.pyplot as plt
import seaborn as sns


def set_chart_style(style="whitegrid", despine=True):
    """Set seaborn chart style."""
    sns.set_style(style)
    if despine:
        sns.despine()


def label_daily_axis(ax, dates, date_format):
    """Label a daily x axis with at most ~20 evenly spaced dates.

    Args:
        ax: Matplotlib axis object
        dates: Sequence of dates (datetime-like) plotted at positions 0..n-1
        date_format: strftime format used for the labels
    """
    step = max(1, len(dates) // 20)
    positions = list(range(0, len(dates), step))
    ax.set_xticks(positions)
    ax.set_xticklabels(
        [dates[i].strftime(date_format) for i in positions],
        rotation=70,
        size="small",
    )


def save_chart_with_styling(fig, output_file, title="Chart"):
    """Save chart with common styling and logging.

    Args:
        fig: Matplotlib figure object
        output_file: Output file path
        title: Chart title for logging
    """
    logger = logging.getLogger(__name__)

    logger.info("Writing %s chart to %s", title, output_file)
    fig.savefig(output_file, bbox_inches="tight", dpi=300)
    plt.close(fig)

"""
ASCII charts for the statistics view.

Creates terminal-friendly bars showing interval load against target.
"""

from .stats import CategoryStats


def create_progress_bar(label: str, percentage: float, width: int = 30) -> str:
    """
    One-line completion bar, e.g. ``strength [██████····]  60%``.

    The bar fills at 100%; larger values are printed but not drawn past the end.
    """
    pct = max(0.0, percentage)
    filled = min(width, int(pct / 100 * width))
    bar = "█" * filled + "·" * (width - filled)
    return f"{label} [{bar}] {pct:4.0f}%"


def create_daily_load_chart(stats: CategoryStats, width: int = 40) -> str:
    """
    Daily load of one category over the interval, oldest day first.

    Each row is a day: the bar is the day's load as a percentage of the
    per-day target, and ``┆`` marks the moving average on the same scale.

    Args:
        stats: CategoryStats for one category
        width: Bar width corresponding to the largest value shown

    Returns:
        ASCII chart string
    """
    if not stats.has_data:
        return f"No {stats.category} entries in the last {stats.training_interval} day(s)."

    daily = stats.daily_percentages()
    ma = stats.moving_average_percentages()
    ma = [0.0] * (len(daily) - len(ma)) + ma
    scale = max(max(daily), max(ma), 100.0)

    lines = [
        f"{stats.category.capitalize()}: daily load (% of daily target)",
        "─" * (width + 18),
    ]
    last = len(daily) - 1
    for i, (value, avg) in enumerate(zip(daily, ma)):
        ago = last - i
        label = "today" if ago == 0 else f"-{ago}d"
        cells = [" "] * width
        for x in range(min(width, int(value / scale * width))):
            cells[x] = "█"
        marker = min(width - 1, int(avg / scale * width))
        if avg > 0:
            cells[marker] = "┆" if cells[marker] == " " else "╪"
        lines.append(f"{label:>6} │{''.join(cells)} {value:5.0f}%")

    lines.append("█ daily load   ┆ moving average")
    return "\n".join(lines)

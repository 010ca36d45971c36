# viz.py
import matplotlib.pyplot as plt

from analysis import MonthSummary
from models import CATEGORY_COLORS


def plot_category_pie(summary: MonthSummary, ax=None, title=None):
    if ax is None:
        fig, ax = plt.subplots(figsize=(6,6))
    # a pie can only show positive totals
    slices = {c: v for c, v in summary.by_category.items() if v > 0}
    if slices:
        ax.pie(
            list(slices.values()),
            labels=list(slices.keys()),
            colors=[CATEGORY_COLORS.get(c, "#cccccc") for c in slices],
            autopct="%1.1f%%",
        )
    else:
        ax.text(0.5, 0.5, "No expenses this month.", ha="center", va="center")
        ax.axis("off")
    ax.set_title(title or f"Spending by category, {summary.month}")
    return ax

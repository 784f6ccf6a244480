# analytics.py
"""Dashboard numbers derived from the views/clicks vanity counters."""

import math
from typing import List, Sequence

from nainzaka.schemas import ChartData, ChartDataset, DashboardStats, ProductOut

LABEL_MAX_LENGTH = 15


def dashboard_stats(products: Sequence[ProductOut]) -> DashboardStats:
    total_views = sum(p.views or 0 for p in products)
    total_clicks = sum(p.clicks or 0 for p in products)
    average = int(math.floor(total_views / len(products) + 0.5)) if products else 0
    return DashboardStats(
        totalProducts=len(products),
        totalViews=total_views,
        totalClicks=total_clicks,
        averageViews=average,
    )


def chart_label(name: str) -> str:
    if len(name) > LABEL_MAX_LENGTH:
        return name[:LABEL_MAX_LENGTH] + "..."
    return name


def engagement_chart(products: Sequence[ProductOut], limit: int = 10) -> ChartData:
    """Views and clicks series for the first `limit` products, in the order given."""
    top: List[ProductOut] = list(products)[:limit]
    return ChartData(
        title=f"Top {limit} Products Analytics",
        labels=[chart_label(p.name or "") for p in top],
        datasets=[
            ChartDataset(label="Views", data=[p.views or 0 for p in top]),
            ChartDataset(label="Clicks", data=[p.clicks or 0 for p in top]),
        ],
    )

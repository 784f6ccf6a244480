from conftest import make_product
from nainzaka import analytics


def test_dashboard_stats_totals_and_average():
    products = [
        make_product(id="a", name="A", views=10, clicks=2),
        make_product(id="b", name="B", views=5, clicks=0),
        make_product(id="c", name="C"),
        make_product(id="d", name="D", views=3, clicks=1),
    ]
    stats = analytics.dashboard_stats(products)
    assert stats.totalProducts == 4
    assert stats.totalViews == 18
    assert stats.totalClicks == 3
    assert stats.averageViews == 5  # 4.5 rounds up


def test_dashboard_stats_on_empty_catalog():
    stats = analytics.dashboard_stats([])
    assert (stats.totalProducts, stats.totalViews, stats.totalClicks, stats.averageViews) == (0, 0, 0, 0)


def test_chart_labels_are_truncated():
    assert analytics.chart_label("Vitamin C Brightening Serum") == "Vitamin C Brigh..."
    assert analytics.chart_label("Exactly fifteen") == "Exactly fifteen"


def test_engagement_chart_keeps_order_and_limit():
    products = [make_product(id=str(i), name=f"P{i}", views=i, clicks=i * 2) for i in range(12)]
    chart = analytics.engagement_chart(products, limit=10)

    assert chart.title == "Top 10 Products Analytics"
    assert chart.labels == [f"P{i}" for i in range(10)]
    views, clicks = chart.datasets
    assert views.label == "Views" and views.data == list(range(10))
    assert clicks.label == "Clicks" and clicks.data == [i * 2 for i in range(10)]

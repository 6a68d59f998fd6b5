"""
Analytics service: aggregates query history and product views for the dashboard.
"""
from collections import Counter
from typing import Sequence

from deals_bot.models import AnalyticsSnapshot, Product, QueryStatus
from ..schemas import AnalyticsSummary, TopProduct, TopQuery


def build_summary(snapshot: AnalyticsSnapshot, products: Sequence[Product], top: int = 5) -> AnalyticsSummary:
    """Totals, conversion (queries that led to a selection), top products and queries."""
    total_queries = len(snapshot.queries)
    successful = sum(1 for q in snapshot.queries if q.status == QueryStatus.SUCCESS)
    names = {str(p.id): p.name for p in products}

    top_products = sorted(snapshot.product_views.items(), key=lambda item: item[1], reverse=True)[:top]
    query_counts = Counter(q.query.strip().lower() for q in snapshot.queries if q.query.strip())

    return AnalyticsSummary(
        traffic=snapshot.traffic,
        total_queries=total_queries,
        successful_queries=successful,
        conversion_rate=round(successful / total_queries * 100, 2) if total_queries else 0.0,
        unique_users=len({q.chat_id for q in snapshot.queries}),
        total_views=sum(snapshot.product_views.values()),
        top_products=[
            TopProduct(product_id=product_id, name=names.get(product_id), views=views)
            for product_id, views in top_products
        ],
        top_queries=[
            TopQuery(query=query, count=count)
            for query, count in query_counts.most_common(top)
        ],
    )

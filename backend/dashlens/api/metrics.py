"""
Metrics endpoint for performance monitoring.
"""
from fastapi import APIRouter
from dashlens.core.performance import PerformanceMonitor
from dashlens.services.data_store import get_data_store

router = APIRouter()


@router.get("/metrics")
async def get_metrics():
    """
    Durations of tracked operations (analyze, parse_csv, load_file,
    request_duration) and the number of registered data sources.
    """
    return {
        'performance': PerformanceMonitor.get_all_metrics(),
        'data_sources': get_data_store().size(),
    }

from pydantic import BaseModel
from typing import Optional, Dict, Any
from datetime import datetime


class HealthCheckResponse(BaseModel):
    status: str
    now: datetime
    uptime_seconds: float
    db_ok: bool
    extra: Optional[Dict[str, Any]] = None


class SystemMetricsResponse(BaseModel):
    uptime_seconds: float
    now: datetime

    # middleware counters
    requests_count: int
    avg_response_ms: Optional[float] = None

    # DB metrics
    total_orders_today: int
    total_orders: int
    pending_orders: int
    average_order_value: Optional[float] = None
    pending_commissions: int

    # optional arbitrary metrics map
    extra: Optional[Dict[str, Any]] = None

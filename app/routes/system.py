import logging
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime

from app.database.connection import get_db
from app.dependencies.auth import require_admin
from app.schemas.system import HealthCheckResponse, SystemMetricsResponse
from app.models.commission import Commission
from app.models.order import Order

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])


@router.get("/health", response_model=HealthCheckResponse)
def health_check(request: Request, db: Session = Depends(get_db)):
    """
    Lightweight public health check.
    Returns ok + DB connectivity check (SELECT 1).
    """
    now = datetime.utcnow()
    start_time = getattr(request.app.state, "start_time", now)
    uptime_seconds = (now - start_time).total_seconds()

    db_ok = True
    extra = {}
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check database error: {e}")
        db_ok = False
        extra["db_error"] = str(e)

    status = "ok" if db_ok else "degraded"

    return HealthCheckResponse(
        status=status,
        now=now,
        uptime_seconds=uptime_seconds,
        db_ok=db_ok,
        extra=extra or None,
    )


@router.get("/metrics", response_model=SystemMetricsResponse, dependencies=[Depends(require_admin)])
def system_metrics(request: Request, db: Session = Depends(get_db)):
    """
    Admin-only system metrics in JSON form.
    Uses in-process counters stored on app.state.metrics and DB-derived metrics.
    """
    now = datetime.utcnow()
    start_time = getattr(request.app.state, "start_time", now)
    uptime_seconds = (now - start_time).total_seconds()

    metrics = getattr(request.app.state, "metrics", None) or {}
    requests_count = int(metrics.get("requests", 0))
    total_response_ms = float(metrics.get("total_response_ms", 0.0))
    avg_response_ms = (total_response_ms / requests_count) if requests_count > 0 else None

    start_today = datetime.combine(now.date(), datetime.min.time())

    total_orders_today = (
        db.query(func.count(Order.id))
        .filter(Order.created_at >= start_today)
        .scalar()
    ) or 0

    total_orders = db.query(func.count(Order.id)).scalar() or 0

    pending_orders = (
        db.query(func.count(Order.id))
        .filter(Order.status == "pending")
        .scalar()
    ) or 0

    average_order_value = db.query(func.avg(Order.total_amount)).scalar()
    if average_order_value is not None:
        average_order_value = float(average_order_value)

    pending_commissions = (
        db.query(func.count(Commission.id))
        .filter(Commission.status == "pending")
        .scalar()
    ) or 0

    return SystemMetricsResponse(
        uptime_seconds=uptime_seconds,
        now=now,
        requests_count=requests_count,
        avg_response_ms=avg_response_ms,
        total_orders_today=int(total_orders_today),
        total_orders=int(total_orders),
        pending_orders=int(pending_orders),
        average_order_value=average_order_value,
        pending_commissions=int(pending_commissions),
        extra=None,
    )

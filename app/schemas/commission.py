from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from app.enums.commission_status import CommissionStatus
from app.schemas.order import Pagination


class CommissionResponse(BaseModel):
    id: int
    order_id: int
    order_number: str
    order_total: Decimal
    commission_rate: Decimal
    commission_amount: Decimal
    status: CommissionStatus
    customer_name: Optional[str] = None
    created_at: datetime


class CommissionListResponse(BaseModel):
    commissions: List[CommissionResponse]
    pagination: Pagination

from enum import Enum


class OrderStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


# forward fulfilment sequence; cancelled sits outside it
FULFILMENT_SEQUENCE = [
    OrderStatus.pending,
    OrderStatus.confirmed,
    OrderStatus.processing,
    OrderStatus.shipped,
    OrderStatus.delivered,
]

TERMINAL_STATUSES = {OrderStatus.delivered, OrderStatus.cancelled}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """
    pending -> confirmed -> processing -> shipped -> delivered, skipping
    forward is allowed; cancelled from anything not yet terminal.
    """
    if current in TERMINAL_STATUSES:
        return False
    if target == OrderStatus.cancelled:
        return True
    return FULFILMENT_SEQUENCE.index(target) > FULFILMENT_SEQUENCE.index(current)

from enum import Enum

class CommissionStatus(str, Enum):
    pending = "pending"
    paid = "paid"

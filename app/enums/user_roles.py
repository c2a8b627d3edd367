from enum import Enum

class UserRole(str, Enum):
    customer = "customer"
    sales_agent = "sales_agent"
    admin = "admin"

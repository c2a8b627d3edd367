from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.core.security import get_password_hash
from app.models.order import Order
from app.models.user import User

CENT = Decimal("0.01")


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def create_user(
    db: Session,
    username: str,
    password: str,
    email: Optional[str] = None,
    role: str = "customer",
    sales_agent_id: Optional[int] = None,
) -> User:
    user = User(
        username=username,
        email=email,
        hashed_password=get_password_hash(password),
        role=role,
        sales_agent_id=sales_agent_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def get_assigned_agent(db: Session, user_id: int) -> Optional[int]:
    return db.execute(
        select(User.sales_agent_id).where(User.id == user_id)
    ).scalar_one_or_none()


def get_lifetime_order_count(db: Session, user_id: int) -> int:
    """
    Every order the user has placed, whatever its status. Cancelled orders
    are counted too.
    """
    count = db.execute(
        select(func.count(Order.id)).where(Order.user_id == user_id)
    ).scalar()
    return int(count or 0)


# ---------- REFERRED CUSTOMERS ----------

def count_referred_customers(db: Session, sales_agent_id: int) -> int:
    """Active customers the agent referred."""
    count = db.execute(
        select(func.count(User.id)).where(
            User.sales_agent_id == sales_agent_id,
            User.is_active.is_(True),
        )
    ).scalar()
    return int(count or 0)


def list_referred_customers(
    db: Session,
    sales_agent_id: int,
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
) -> Tuple[List[Tuple[User, int, Decimal]], int]:
    """
    Returns ([(customer, order_count, total_spent)], total_count), newest
    customers first. search matches username or email, case-insensitively.
    """
    page = max(page, 1)
    limit = min(max(limit, 1), 100)

    filters = [User.sales_agent_id == sales_agent_id]
    if search:
        pattern = f"%{search}%"
        filters.append(or_(User.username.ilike(pattern), User.email.ilike(pattern)))

    total = db.execute(select(func.count(User.id)).where(*filters)).scalar() or 0

    order_count = func.count(Order.id)
    total_spent = func.coalesce(func.sum(Order.total_amount), 0)
    rows = db.execute(
        select(User, order_count, total_spent)
        .outerjoin(Order, Order.user_id == User.id)
        .where(*filters)
        .group_by(User.id)
        .order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    return [
        (user, int(count or 0), Decimal(str(spent or 0)).quantize(CENT))
        for user, count, spent in rows
    ], int(total)

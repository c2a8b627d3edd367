from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI

from app.core.config import settings
from app.core.exception_handlers import register_exception_handlers
from app.core.logging import configure_logging
from app.middleware.metrics import MetricsMiddleware, new_metrics
from app.database.connection import Base, engine
from app.models import cart, commission, order, product, user  # noqa: F401  (register tables)
from app.routes import system
from app.routes.auth import router as auth_router
from app.routes.products import router as product_router
from app.routes.pricing.calculate_price import router as calculate_price_router
from app.routes.cart import router as cart_router
from app.routes.orders import router as orders_router
from app.routes.sales_agent import router as sales_agent_router

configure_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # schema is owned by alembic in deployed environments; this covers fresh dev databases
    Base.metadata.create_all(bind=engine)
    app.state.start_time = datetime.utcnow()
    app.state.metrics = new_metrics()
    yield


app = FastAPI(title="Storefront Order Service", lifespan=lifespan)

app.add_middleware(MetricsMiddleware)
register_exception_handlers(app)


app.include_router(auth_router)
app.include_router(product_router)
app.include_router(calculate_price_router)
app.include_router(cart_router)
app.include_router(orders_router)
app.include_router(sales_agent_router)
app.include_router(system.router)

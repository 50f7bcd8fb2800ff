from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi import Request
from mangum import Mangum
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from config import ENVIRONMENT, PUBLIC_API_URL, SEED_DEFAULT_DATA, configure_logging, get_db, init_db
from seed import seed_database

from routers.dashboard.dashboard import router as dashboard_router
from routers.products.products import router as products_router
from routers.orders.orders import router as orders_router
from routers.payments.payments import router as payments_router
from routers.transactions.transactions import router as transactions_router
from routers.users.users import router as users_router
from routers.admin.admin import router as admin_router

IS_PRODUCTION = ENVIRONMENT == "prod"

API_SERVERS = [{"url": "http://localhost:8000", "description": "Local Development Server"}]
if PUBLIC_API_URL:
    API_SERVERS.insert(0, {"url": PUBLIC_API_URL, "description": "Production Server"})

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not IS_PRODUCTION:
        # Production schema comes from alembic migrations
        await init_db()
    if SEED_DEFAULT_DATA:
        await seed_database()
    logger.info(f"KaamDhenu API started ({ENVIRONMENT})")
    yield


app = FastAPI(
    title="KaamDhenu API",
    description="Inventory, order and payment reconciliation console for multi-district goods distribution.",
    version="1.0.0",
    root_path="/Prod" if IS_PRODUCTION else "",
    docs_url="/apidocs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    servers=API_SERVERS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(dashboard_router)
app.include_router(products_router)
app.include_router(orders_router)
app.include_router(payments_router)
app.include_router(transactions_router)
app.include_router(users_router)
app.include_router(admin_router)


@app.get("/docs", include_in_schema=False)
async def api_documentation(request: Request):
    openapi_url = "/Prod/openapi.json" if IS_PRODUCTION else "/openapi.json"
    return HTMLResponse(
        f"""
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1, shrink-to-fit=no">
    <title>KaamDhenu API DOCS</title>
    <script src="https://unpkg.com/@stoplight/elements/web-components.min.js"></script>
    <link rel="stylesheet" href="https://unpkg.com/@stoplight/elements/styles.min.css">
  </head>
  <body>
    <elements-api
      apiDescriptionUrl="{openapi_url}"
      router="hash"
      theme="dark"
    />
  </body>
</html>"""
    )


@app.get("/health")
async def health(db: AsyncSession = Depends(get_db)):
    """Health check with database status"""
    result = {"status": "ok", "version": app.version, "environment": ENVIRONMENT}
    try:
        await db.execute(text("SELECT 1"))
        result["database"] = "healthy"
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        result["database"] = "unreachable"
        result["status"] = "degraded"
    return result


handler = Mangum(app, lifespan="off")

# File: main.py

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import database
from auth.router import router as auth_router
from auth.utils import FirebaseTokenVerifier
from config.settings import Settings, get_settings
from errors import register_exception_handlers
from logging_config import setup_logging
from routers.orders import router as orders_router
from routers.payments import router as payments_router
from routers.plants import router as plants_router
from routers.status import router as status_router
from routers.users import router as users_router
from services.checkout import StripeCheckout

logger = logging.getLogger(__name__)


def create_app(settings: Settings = None, db=None, checkout=None, verifier=None) -> FastAPI:
    """
    Builds the API. Collaborators passed in are used as-is; anything left
    out is created at startup from `settings` and released at shutdown.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        mongo_client = None
        http = None

        if app.state.db is None:
            mongo_client = database.connect(settings.MONGODB_URI)
            database.ping(mongo_client)
            app.state.db = mongo_client[settings.DB_NAME]
        database.ensure_indexes(app.state.db)

        if app.state.checkout is None or app.state.verifier is None:
            http = httpx.AsyncClient()
        if app.state.checkout is None:
            app.state.checkout = StripeCheckout(
                settings.STRIPE_SECRET_KEY,
                settings.CLIENT_DOMAIN,
                http,
                api_base=settings.STRIPE_API_BASE,
                currency=settings.CURRENCY,
            )
        if app.state.verifier is None:
            app.state.verifier = FirebaseTokenVerifier(settings.FIREBASE_PROJECT_ID, http)

        logger.info(f"{settings.PROJECT_NAME} API started")
        try:
            yield
        finally:
            if http is not None:
                await http.aclose()
            if mongo_client is not None:
                mongo_client.close()
            logger.info(f"{settings.PROJECT_NAME} API stopped")

    app = FastAPI(
        title=f"{settings.PROJECT_NAME} API",
        description="Plant marketplace backend: listings, checkout, orders and seller onboarding.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = db
    app.state.checkout = checkout
    app.state.verifier = verifier

    # --- CORS Middleware ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CLIENT_DOMAIN],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # --- Include Routers ---
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(plants_router)
    app.include_router(orders_router)
    app.include_router(payments_router)
    app.include_router(status_router)

    # --- Root Endpoint ---
    @app.get("/")
    def read_root():
        return "Hello from Server.."

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=get_settings().PORT)

from fastapi.openapi.utils import get_openapi

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from devgad.core.config import settings
from devgad.core.errors import ProviderError, StorefrontError, pick_language
from devgad.db.session import engine, Base
from devgad.db import events  # registers the change feed session hooks
from devgad.models import order, user  # table metadata
from devgad.api.routes_auth import router as auth_router
from devgad.api.routes_product import router as product_router
from devgad.api.routes_cart import router as cart_router
from devgad.api.routes_order import router as order_router
from devgad.api.routes_admin import router as admin_router


app = FastAPI(
    title="devgad-hapus-api",
    description="Storefront for Devgad Alphonso mango deliveries in Mumbai",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Cart-Id"],
)

Base.metadata.create_all(bind=engine)

@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    language = pick_language(request.headers.get("accept-language"))
    body = {"detail": exc.message(language)}
    if isinstance(exc, ProviderError):
        body["code"] = exc.code
    if getattr(exc, "field", None):
        body["field"] = exc.field
    return JSONResponse(status_code=exc.status_code, content=body)

app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
app.include_router(product_router, prefix="/api/products", tags=["Catalog"])
app.include_router(cart_router, prefix="/api/cart", tags=["Cart"])
app.include_router(order_router, prefix="/api/orders", tags=["Order"])
app.include_router(admin_router, prefix="/api/admin", tags=["Admin"])

@app.get("/")
def root():
    return {"message": "Devgad Hapus API running"}

def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title="Devgad Hapus API",
        version="1.0.0",
        description="Catalog, cart, checkout, order history and admin console.",
        routes=app.routes,
    )

    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT"
        }
    }
    for path in openapi_schema["paths"].values():
        for method in path.values():
            method["security"] = [{"BearerAuth": []}]

    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi

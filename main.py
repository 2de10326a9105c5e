from contextlib import asynccontextmanager, contextmanager
from typing import List, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from database import CatalogStore, connect
from errors import InternalError, MethodNotAllowed, NotFoundError, ValidationError
from logging_config import get_logger
from schemas import COLLECTION_TYPES, CategoryRecord, ProductRecord, ProductSearch
from settings import Settings

logger = get_logger("api")

router = APIRouter()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the MongoDB client for the life of the process, unless a store was injected."""
    client = None
    if app.state.store is None:
        if Settings.MONGODB_URI:
            client = connect()
            app.state.store = CatalogStore(client[Settings.DATABASE_NAME])
            logger.info("Catalog store bound to database '%s'", Settings.DATABASE_NAME)
        else:
            logger.warning("MONGODB_URI is not set; catalog routes will fail with 500")
    try:
        yield
    finally:
        if client is not None:
            client.close()
            logger.info("MongoDB client closed")


def get_store(request: Request) -> CatalogStore:
    store = request.app.state.store
    if store is None:
        raise InternalError("Database not configured")
    return store


@contextmanager
def store_errors(message: str):
    """Log any store failure and surface it as a 500 carrying only ``message``."""
    try:
        yield
    except HTTPException:
        raise
    except Exception:
        logger.exception(message)
        raise InternalError(message)


def _parse_limit(raw: Optional[str]) -> int:
    if not raw:
        return Settings.DEFAULT_COLLECTION_LIMIT
    try:
        limit = int(raw)
    except ValueError:
        raise ValidationError("Invalid limit parameter")
    if limit < 1:
        raise ValidationError("Invalid limit parameter")
    return limit


def product_search_params(
    search: Optional[str] = None,
    category: Optional[str] = None,
    material: Optional[str] = None,
    collection_type: Optional[str] = Query(None, alias="collectionType"),
    price_min: Optional[str] = Query(None, alias="priceMin"),
    price_max: Optional[str] = Query(None, alias="priceMax"),
) -> ProductSearch:
    raw = {
        "search": search,
        "category": category,
        "material": material,
        "collection_type": collection_type,
        "price_min": price_min,
        "price_max": price_max,
    }
    try:
        # Blank query values are treated as not sent
        return ProductSearch.model_validate({k: v for k, v in raw.items() if v})
    except PydanticValidationError:
        raise ValidationError("Invalid query parameters")


@router.get("/")
def root():
    return {"name": "Saree Catalog API", "status": "ok"}


@router.get("/test")
def test_database(request: Request):
    resp = {"backend": "running", "database": "not configured"}
    store = request.app.state.store
    try:
        if store is not None:
            resp["database"] = "connected"
            resp["collections"] = store.collection_names()
    except Exception as e:
        resp["error"] = str(e)
    return resp


@router.get("/categories", response_model=List[CategoryRecord])
def list_categories(store: CatalogStore = Depends(get_store)):
    with store_errors("Failed to fetch categories"):
        categories = store.get_categories()
    logger.info("Returning %d categories", len(categories))
    return categories


@router.get("/categories/{slug}", response_model=CategoryRecord)
def get_category(slug: str, store: CatalogStore = Depends(get_store)):
    if not slug.strip():
        raise ValidationError("Invalid slug parameter")
    with store_errors("Failed to fetch category"):
        category = store.get_category_by_slug(slug)
    if category is None:
        raise NotFoundError("Category not found")
    return category


@router.get("/products", response_model=List[ProductRecord])
def list_products(
    search: ProductSearch = Depends(product_search_params),
    store: CatalogStore = Depends(get_store),
):
    logger.debug("Product search: %s", search.model_dump(exclude_none=True))
    with store_errors("Failed to fetch products"):
        products = store.get_products(search)
    logger.info("Returning %d products", len(products))
    return products


@router.get("/products/category/{category}", response_model=List[ProductRecord])
def list_products_by_category(category: str, store: CatalogStore = Depends(get_store)):
    if not category.strip():
        raise ValidationError("Invalid category parameter")
    with store_errors("Failed to fetch products by category"):
        products = store.get_products_by_category(category)
    logger.info("Returning %d products for category '%s'", len(products), category)
    return products


@router.get("/products/{product_id}", response_model=ProductRecord)
def get_product(product_id: str, store: CatalogStore = Depends(get_store)):
    if not ObjectId.is_valid(product_id):
        raise ValidationError("Invalid product ID")
    with store_errors("Failed to fetch product"):
        product = store.get_product_by_id(product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


@router.get("/collections/{collection_type}", response_model=List[ProductRecord])
def list_collection(
    collection_type: str,
    limit: Optional[str] = None,
    store: CatalogStore = Depends(get_store),
):
    if collection_type not in COLLECTION_TYPES:
        raise ValidationError("Invalid collection type")
    limit_value = _parse_limit(limit)
    with store_errors("Failed to fetch collection products"):
        products = store.get_products_by_collection(collection_type, limit_value)
    logger.info("Returning %d '%s' products (limit %d)", len(products), collection_type, limit_value)
    return products


@router.get("/search", response_model=List[ProductRecord])
def search_products(q: Optional[str] = None, store: CatalogStore = Depends(get_store)):
    if not q or not q.strip():
        raise ValidationError("Search query is required")
    with store_errors("Failed to search products"):
        products = store.search_products(q)
    logger.info("Search '%s' matched %d products", q, len(products))
    return products


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405 and not isinstance(exc, MethodNotAllowed):
        allow = (exc.headers or {}).get("Allow", "GET")
        exc = MethodNotAllowed(allow=allow)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.debug("Rejected request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request parameters"})


def create_app(store: Optional[CatalogStore] = None) -> FastAPI:
    """Build the API. Pass ``store`` to skip connecting from settings (tests, scripts)."""
    app = FastAPI(title="Saree Catalog API", lifespan=lifespan)
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=Settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=Settings.PORT)

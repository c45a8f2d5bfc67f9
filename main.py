import logging
from contextlib import asynccontextmanager
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database

import accounts
import catalog
import search
from config import Settings, get_settings, setup_logging
from database import connect, ensure_indexes, get_db
from errors import ApiError
from schemas import (
    Address,
    Cart,
    ChangePasswordBody,
    LoginBody,
    LoginResponse,
    MenuItem,
    NewOrder,
    NewProduct,
    RegisterBody,
    RestaurantCategories,
    SearchHit,
)
from security import create_access_token, get_app_settings, get_current_user_id

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, db: Optional[Database] = None) -> FastAPI:
    """
    Build the API.

    ``db`` may be supplied to run against an existing database handle;
    otherwise a MongoClient is opened from ``settings.database_url`` and
    closed on shutdown.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    client = None
    if db is None:
        client = connect(settings)
        db = client[settings.database_name]

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s %s", settings.app_name, settings.app_version)
        ensure_indexes(db)
        yield
        logger.info("Shutting down...")
        if client is not None:
            client.close()

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.db = db

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def reject_foreign_origins(request: Request, call_next):
        origin = request.headers.get("origin")
        if origin and origin not in settings.allowed_origins:
            logger.warning("Rejected request from origin %s", origin)
            return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"msg": "Not allowed by CORS"})
        return await call_next(request)

    register_exception_handlers(app)
    app.include_router(build_routes())
    return app


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        logger.warning("%s %s -> %d %s: %s", request.method, request.url.path,
                       exc.status_code, exc.__class__.__name__, exc)
        return JSONResponse(status_code=exc.status_code, content={"msg": str(exc)}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"msg": "Invalid request", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": str(exc)})


def build_routes():
    router = APIRouter()

    @router.get("/")
    def root():
        return {"name": "Foodie", "status": "ok"}

    @router.get("/test")
    def test_database(db: Database = Depends(get_db)):
        response = {"backend": "Running", "database": "Not Available", "collections": []}
        try:
            response["collections"] = db.list_collection_names()[:10]
            response["database"] = "Connected & Working"
        except Exception as e:
            response["database"] = f"Error: {str(e)[:80]}"
        return response

    # Auth

    @router.post("/register", status_code=status.HTTP_201_CREATED)
    def register(body: RegisterBody, db: Database = Depends(get_db),
                 settings: Settings = Depends(get_app_settings)):
        accounts.register(db, settings, body)
        return {"msg": "User registered successfully"}

    @router.post("/login", response_model=LoginResponse)
    def login(body: LoginBody, db: Database = Depends(get_db),
              settings: Settings = Depends(get_app_settings)):
        logger.info("Login attempt for %s", body.email)
        user = accounts.authenticate(db, body.email, body.password)
        user_id = str(user["_id"])
        return {
            "token": create_access_token(user_id, settings),
            "user": {"id": user_id, "email": user["email"], "fullName": user["fullName"]},
        }

    # User (protected)

    @router.get("/user")
    def read_user(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
        return accounts.get_user(db, user_id)

    @router.put("/user/password")
    def change_password(body: ChangePasswordBody, user_id: str = Depends(get_current_user_id),
                        db: Database = Depends(get_db), settings: Settings = Depends(get_app_settings)):
        accounts.change_password(db, settings, user_id, body.current_password, body.new_password)
        return {"msg": "Password updated successfully"}

    @router.put("/user/address/{kind}")
    def set_address(kind: Literal["home", "work"], body: Address,
                    user_id: str = Depends(get_current_user_id),
                    db: Database = Depends(get_db), settings: Settings = Depends(get_app_settings)):
        return accounts.set_address(db, settings, user_id, kind, body)

    @router.put("/user/cart")
    def replace_cart(body: Cart, user_id: str = Depends(get_current_user_id),
                     db: Database = Depends(get_db), settings: Settings = Depends(get_app_settings)):
        return accounts.replace_cart(db, settings, user_id, body)

    @router.post("/user/orders", status_code=status.HTTP_201_CREATED)
    def append_order(body: NewOrder, user_id: str = Depends(get_current_user_id),
                     db: Database = Depends(get_db)):
        return accounts.append_order(db, user_id, body)

    # Catalog

    @router.get("/restaurants")
    def list_restaurants(db: Database = Depends(get_db)):
        return catalog.list_restaurants(db)

    @router.post("/add-product", status_code=status.HTTP_201_CREATED)
    def add_product(body: NewProduct, db: Database = Depends(get_db)):
        item = MenuItem.model_validate(body.model_dump(exclude={"restaurant"}))
        product, position = catalog.add_menu_item(db, body.restaurant, item)
        return {"msg": "Product added successfully", "product": product, "position": position}

    @router.get("/products-data", response_model=List[RestaurantCategories])
    def products_data(db: Database = Depends(get_db)):
        return search.build_category_tree(db)

    @router.get("/search", response_model=List[SearchHit])
    def search_products(
        q: Optional[str] = None,
        category: Optional[str] = None,
        sub_category: Optional[str] = Query(None, alias="subCategory"),
        min_price: Optional[float] = Query(None, alias="minPrice"),
        max_price: Optional[float] = Query(None, alias="maxPrice"),
        min_rating: Optional[float] = Query(None, alias="minRating"),
        db: Database = Depends(get_db),
    ):
        return search.search_items(
            db,
            text=q,
            category=category,
            sub_category=sub_category,
            min_price=min_price,
            max_price=max_price,
            min_rating=min_rating,
        )

    return router


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run("main:create_app", factory=True, host=settings.api_host, port=settings.api_port)

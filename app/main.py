# app/main.py

import logging
import sys
from typing import Any, Dict, List

from fastapi import Depends, FastAPI, File, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from . import crud
from .config import get_settings
from .db import Base, engine, get_db
from .errors import (
    InternalError,
    InvalidCredentials,
    MissingCredentials,
    NotFound,
    ServiceError,
    ServiceUnavailable,
    ValidationError,
)
from .schemas import (
    PRICE_ERROR,
    LoginRequest,
    MessageResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    PromotionCreate,
    ProtectedResponse,
    TokenResponse,
)
from .security import AdminCredentials, BearerAuth, TokenService
from .storage import ALLOWED_CONTENT_TYPES, build_image_storage

settings = get_settings()

# --- Standard Logging Configuration ---
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

# Suppress noisy logs from third-party libraries for cleaner output
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("uvicorn.error").setLevel(logging.INFO)
logging.getLogger("azure").setLevel(logging.WARNING)

MISSING_PRODUCT_FIELDS = "Falta nombre, precio o categoría."
MISSING_PROMOTION_FIELDS = "Falta nombre, precio o promo."
MISSING_IMAGE_FILE = "Falta el archivo de imagen."

token_service = TokenService(settings.jwt_secret, settings.jwt_expiration)
admin_credentials = AdminCredentials(settings.admin_username, settings.admin_password_hash)
require_admin = BearerAuth(token_service)
image_storage = build_image_storage(settings)

# --- FastAPI Application Setup ---
app = FastAPI(
    title="TALØ Admin API",
    description="Admin login and product catalogue management for the TALØ storefront.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


# --- Error Rendering ---
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    message = _validation_message(request, exc.errors())
    logger.warning(
        f"Admin Service: Rejected {request.method} {request.url.path}: {message}"
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"error": message}
    )


def _validation_message(request: Request, errors) -> str:
    """
    Picks the client-facing message for a body that failed schema validation.
    Missing, null or mistyped fields get the endpoint's own message; a bad
    promo or a negative price get theirs.
    """
    specific = []
    for error in errors:
        field = error["loc"][-1] if error.get("loc") else None
        if error["type"] == "value_error":
            specific.append(error["msg"].removeprefix("Value error, "))
        elif error["type"] == "greater_than_equal" and field == "precio":
            specific.append(PRICE_ERROR)
        else:
            return MISSING_FIELD_MESSAGES.get(
                request.scope.get("endpoint"), ValidationError.default_message
            )
    return specific[0] if specific else ValidationError.default_message


# --- FastAPI Event Handlers ---
@app.on_event("startup")
async def startup_event():
    try:
        logger.info("Admin Service: Connecting to the database and ensuring tables exist...")
        Base.metadata.create_all(bind=engine)
        logger.info("Admin Service: Database ready.")
    except OperationalError as e:
        logger.critical(f"Admin Service: Failed to connect to the database: {e}. Exiting application.")
        sys.exit(1)
    except Exception as e:
        logger.critical(
            f"Admin Service: An unexpected error occurred during database startup: {e}",
            exc_info=True,
        )
        sys.exit(1)


# --- Root Endpoints ---
@app.get("/", response_class=PlainTextResponse, summary="Liveness message")
async def read_root():
    return "Servidor TALØ Admin activo."


@app.get("/health", status_code=status.HTTP_200_OK, summary="Health check endpoint")
async def health_check():
    return {"status": "ok", "service": "admin-service"}


# --- Authentication ---
@app.post("/login", response_model=TokenResponse, summary="Exchange admin credentials for a bearer token")
def login(credentials: LoginRequest):
    try:
        valid = admin_credentials.verify(credentials.username, credentials.password)
    except Exception as e:
        logger.error(f"Admin Service: Error checking credentials: {e}", exc_info=True)
        raise InternalError() from e

    if not valid:
        logger.warning(f"Admin Service: Failed login attempt for user '{credentials.username}'.")
        raise InvalidCredentials()

    logger.info(f"Admin Service: User '{credentials.username}' logged in.")
    return {"token": token_service.issue(credentials.username)}


@app.get("/api/test", response_model=ProtectedResponse, summary="Check a bearer token")
async def protected_test(user: Dict[str, Any] = Depends(require_admin)):
    return {"message": "Acceso concedido a ruta protegida.", "user": user}


# --- Products ---
@app.get(
    "/api/products",
    response_model=List[ProductResponse],
    summary="Retrieve all products, newest first",
)
def list_products(db: Session = Depends(get_db)):
    try:
        products = crud.list_products(db)
    except Exception as e:
        logger.error(f"Admin Service: Error listing products: {e}", exc_info=True)
        raise InternalError("Error al obtener productos.") from e
    logger.info(f"Admin Service: Retrieved {len(products)} products.")
    return products


@app.get(
    "/api/products/{product_id}",
    response_model=ProductResponse,
    summary="Retrieve a single product by ID",
)
def get_product(product_id: str, db: Session = Depends(get_db)):
    logger.info(f"Admin Service: Fetching product with ID: {product_id}")
    try:
        product = crud.get_product(db, product_id)
    except Exception as e:
        logger.error(f"Admin Service: Error fetching product {product_id}: {e}", exc_info=True)
        raise InternalError("Error al obtener producto.") from e
    if product is None:
        logger.warning(f"Admin Service: Product with ID {product_id} not found.")
        raise NotFound()
    return product


@app.post(
    "/api/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    dependencies=[Depends(require_admin)],
)
def create_product(product: ProductCreate, db: Session = Depends(get_db)):
    logger.info(f"Admin Service: Creating product: {product.nombre}")
    try:
        db_product = crud.create_product(db, product)
    except Exception as e:
        db.rollback()
        logger.error(f"Admin Service: Error creating product: {e}", exc_info=True)
        raise InternalError("Error al crear producto.") from e
    logger.info(
        f"Admin Service: Product '{db_product.nombre}' (ID: {db_product.id}) created successfully."
    )
    return db_product


@app.put(
    "/api/products/{product_id}",
    response_model=ProductResponse,
    summary="Replace an existing product by ID",
    dependencies=[Depends(require_admin)],
)
def update_product(product_id: str, product: ProductUpdate, db: Session = Depends(get_db)):
    logger.info(f"Admin Service: Updating product with ID: {product_id}")
    try:
        db_product = crud.update_product(db, product_id, product)
    except Exception as e:
        db.rollback()
        logger.error(f"Admin Service: Error updating product {product_id}: {e}", exc_info=True)
        raise InternalError("Error al actualizar producto.") from e
    if db_product is None:
        logger.warning(f"Admin Service: Attempted to update non-existent product with ID {product_id}.")
        raise NotFound()
    logger.info(f"Admin Service: Product {product_id} updated successfully.")
    return db_product


@app.delete(
    "/api/products/{product_id}",
    response_model=MessageResponse,
    summary="Delete a product by ID",
    dependencies=[Depends(require_admin)],
)
def delete_product(product_id: str, db: Session = Depends(get_db)):
    logger.info(f"Admin Service: Attempting to delete product with ID: {product_id}")
    try:
        deleted = crud.delete_product(db, product_id)
    except Exception as e:
        db.rollback()
        logger.error(f"Admin Service: Error deleting product {product_id}: {e}", exc_info=True)
        raise InternalError("Error al eliminar producto.") from e
    if not deleted:
        logger.warning(f"Admin Service: Attempted to delete non-existent product with ID {product_id}.")
        raise NotFound()
    logger.info(f"Admin Service: Product {product_id} deleted successfully.")
    return {"message": "Producto eliminado correctamente."}


@app.post(
    "/api/products/{product_id}/imagenes",
    response_model=ProductResponse,
    summary="Upload an image for a product to Azure Blob Storage",
    dependencies=[Depends(require_admin)],
)
def upload_product_image(product_id: str, file: UploadFile = File(...), db: Session = Depends(get_db)):
    """
    Uploads an image to Azure Blob Storage and appends its read-only SAS URL
    to the product's ``imagenes``.
    """
    if image_storage is None:
        raise ServiceUnavailable("El almacenamiento de imágenes no está configurado.")

    try:
        db_product = crud.get_product(db, product_id)
    except Exception as e:
        logger.error(f"Admin Service: Error fetching product {product_id}: {e}", exc_info=True)
        raise InternalError("Error al obtener producto.") from e
    if db_product is None:
        logger.warning(f"Admin Service: Product with ID {product_id} not found for image upload.")
        raise NotFound()

    if file.content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError("Tipo de archivo no permitido.")

    try:
        image_url = image_storage.upload(product_id, file.filename, file.content_type, file.file)
        db_product = crud.add_image(db, db_product, image_url)
    except Exception as e:
        db.rollback()
        logger.error(f"Admin Service: Error uploading image for product {product_id}: {e}", exc_info=True)
        raise InternalError("Error al subir imagen.") from e
    logger.info(f"Admin Service: Image added to product {product_id}.")
    return db_product


# --- Promotions ---
@app.get(
    "/api/promociones",
    response_model=List[ProductResponse],
    summary="Retrieve products on promotion, newest first",
)
def list_promotions(db: Session = Depends(get_db)):
    try:
        promotions = crud.list_promotions(db)
    except Exception as e:
        logger.error(f"Admin Service: Error listing promotions: {e}", exc_info=True)
        raise InternalError("Error al obtener promociones.") from e
    logger.info(f"Admin Service: Retrieved {len(promotions)} promotions.")
    return promotions


@app.post(
    "/api/promociones",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product on promotion",
    dependencies=[Depends(require_admin)],
)
def create_promotion(promotion: PromotionCreate, db: Session = Depends(get_db)):
    logger.info(f"Admin Service: Creating promotion: {promotion.nombre} ({promotion.promo}%)")
    try:
        db_product = crud.create_product(db, promotion)
    except Exception as e:
        db.rollback()
        logger.error(f"Admin Service: Error creating promotion: {e}", exc_info=True)
        raise InternalError("Error al crear promoción.") from e
    logger.info(f"Admin Service: Promotion '{db_product.nombre}' (ID: {db_product.id}) created successfully.")
    return db_product


MISSING_FIELD_MESSAGES = {
    login: MissingCredentials.default_message,
    create_product: MISSING_PRODUCT_FIELDS,
    update_product: MISSING_PRODUCT_FIELDS,
    create_promotion: MISSING_PROMOTION_FIELDS,
    upload_product_image: MISSING_IMAGE_FILE,
}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)

"""FastAPI endpoints for the Catalogue: public browsing and admin product entry."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.dependencies import require_admin
from storefront.catalogue.api.schemas import (
    CreateProductRequest,
    ProductIdResponse,
    ProductResponse,
    SeedCatalogueResponse,
    StatusResponse,
    UpdateProductRequest,
)
from storefront.catalogue.filtering import ALL_CATEGORIES, filter_products, list_categories
from storefront.catalogue.management import CreateProduct, RemoveProduct, UpdateProduct
from storefront.catalogue.product import Product
from storefront.catalogue.seed import SeedCatalogue

product_router = APIRouter(prefix="/products", tags=["products"])
admin_product_router = APIRouter(
    prefix="/admin/products",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


def _join_tags(tags):
    return ",".join(tags) if tags is not None else None


# --- Browsing ---


@product_router.get("", response_model=list[ProductResponse])
async def list_products(category: str = ALL_CATEGORIES, q: str = "") -> list[ProductResponse]:
    products = current_domain.repository_for(Product).list_products()
    return [ProductResponse.from_product(p) for p in filter_products(products, category, q)]


@product_router.get("/categories", response_model=list[str])
async def get_categories() -> list[str]:
    return list_categories(current_domain.repository_for(Product).list_products())


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    product = current_domain.repository_for(Product).get(product_id)
    return ProductResponse.from_product(product)


# --- Admin ---


@admin_product_router.post("", status_code=201, response_model=ProductIdResponse)
async def create_product(body: CreateProductRequest) -> ProductIdResponse:
    command = CreateProduct(
        title=body.title,
        description=body.description,
        price=body.price,
        available_quantity=body.available_quantity,
        category=body.category,
        tags=_join_tags(body.tags),
        image_url=body.image_url,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@admin_product_router.put("/{product_id}", response_model=ProductIdResponse)
async def update_product(product_id: str, body: UpdateProductRequest) -> ProductIdResponse:
    command = UpdateProduct(
        product_id=product_id,
        title=body.title,
        description=body.description,
        price=body.price,
        available_quantity=body.available_quantity,
        category=body.category,
        tags=_join_tags(body.tags),
        image_url=body.image_url,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@admin_product_router.delete("/{product_id}", response_model=StatusResponse)
async def remove_product(product_id: str) -> StatusResponse:
    current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)
    return StatusResponse(status="removed")


@admin_product_router.post("/seed", response_model=SeedCatalogueResponse)
async def seed_catalogue(force: bool = False) -> SeedCatalogueResponse:
    created = current_domain.process(SeedCatalogue(force=force), asynchronous=False)
    return SeedCatalogueResponse(created=created)

"""Pydantic request/response schemas for the Catalogue API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands.
"""

from pydantic import BaseModel, Field


class ProductResponse(BaseModel):
    id: str
    title: str
    description: str
    price: float
    available_quantity: int
    category: str
    tags: list[str] = []
    image_url: str | None = None
    in_stock: bool

    @classmethod
    def from_product(cls, product) -> "ProductResponse":
        return cls(
            id=str(product.id),
            title=product.title,
            description=product.description,
            price=product.price,
            available_quantity=product.available_quantity,
            category=product.category,
            tags=product.tag_list(),
            image_url=product.image_url,
            in_stock=product.in_stock(),
        )


class CreateProductRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    price: float = Field(gt=0)
    available_quantity: int = Field(ge=0)
    category: str = Field(min_length=1, max_length=100)
    tags: list[str] = []
    image_url: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "Premium Whey Protein Isolate",
                    "description": "27g of protein per serving.",
                    "price": 59.99,
                    "available_quantity": 50,
                    "category": "Protein",
                    "tags": ["whey", "isolate"],
                }
            ]
        }
    }


class UpdateProductRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    price: float | None = Field(default=None, gt=0)
    available_quantity: int | None = Field(default=None, ge=0)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    tags: list[str] | None = None
    image_url: str | None = None


class ProductIdResponse(BaseModel):
    product_id: str


class SeedCatalogueResponse(BaseModel):
    created: int


class StatusResponse(BaseModel):
    status: str = "ok"

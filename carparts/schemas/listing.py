from pydantic import BaseModel
from datetime import datetime


class ListingDetail(BaseModel):
    id: int
    user_id: int
    car_part_id: int | None
    name: str
    description: str | None
    price_usd: float
    condition: str
    location: str | None
    status: str
    phone_number: str | None
    email: str | None
    created_date: datetime | None
    seller_username: str | None
    part_name: str | None
    category_name: str | None
    brand_name: str | None
    model_name: str | None


class PartDetail(BaseModel):
    id: int
    name: str
    car_part_category_id: int
    car_brand_id: int | None
    car_model_id: int | None
    serial_number: str | None
    description: str | None
    price: float | None
    image: str | None
    condition: str | None
    created_date: datetime | None
    category_name: str | None
    brand_name: str | None
    model_name: str | None

from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, Float, DateTime, Text, ForeignKey, Index
)
from carparts.db.database import Base


def _now():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False)
    first_name = Column(String(100))
    last_name = Column(String(100))
    email = Column(String(255), unique=True, nullable=False)
    role = Column(String(20), default="user")  # "user" or "admin"
    created_date = Column(DateTime(timezone=True), default=_now)


class CarBrand(Base):
    __tablename__ = "car_brands"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    created_date = Column(DateTime(timezone=True), default=_now)


class CarModel(Base):
    __tablename__ = "car_models"

    id = Column(Integer, primary_key=True, autoincrement=True)
    car_brand_id = Column(Integer, ForeignKey("car_brands.id"), nullable=False)
    name = Column(String(100), nullable=False)
    years_start = Column(Integer)
    years_end = Column(Integer)  # NULL while still in production
    created_date = Column(DateTime(timezone=True), default=_now)

    __table_args__ = (
        Index("ix_car_models_brand", "car_brand_id"),
    )


class PartCategory(Base):
    __tablename__ = "car_parts_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text)
    created_date = Column(DateTime(timezone=True), default=_now)


class CarPart(Base):
    __tablename__ = "car_parts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    car_part_category_id = Column(Integer, ForeignKey("car_parts_categories.id"), nullable=False)
    car_brand_id = Column(Integer, ForeignKey("car_brands.id"))
    car_model_id = Column(Integer, ForeignKey("car_models.id"))
    serial_number = Column(String(100))
    description = Column(Text)
    price = Column(Float)
    image = Column(String(1000))
    condition = Column(String(20))  # new, like_new, good, fair, poor
    created_date = Column(DateTime(timezone=True), default=_now)

    __table_args__ = (
        Index("ix_car_parts_category", "car_part_category_id"),
        Index("ix_car_parts_brand_model", "car_brand_id", "car_model_id"),
    )


class ProductListing(Base):
    __tablename__ = "product_listings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    car_part_id = Column(Integer, ForeignKey("car_parts.id"))
    name = Column(String(200), nullable=False)
    description = Column(Text)
    price_usd = Column(Float, nullable=False)
    condition = Column(String(20), nullable=False)
    location = Column(String(300))
    status = Column(String(20), nullable=False, default="active")  # active, pending, sold, hidden
    phone_number = Column(String(50))
    email = Column(String(255))
    created_date = Column(DateTime(timezone=True), default=_now)

    __table_args__ = (
        Index("ix_listings_status_created", "status", "created_date"),
        Index("ix_listings_user", "user_id"),
        Index("ix_listings_part", "car_part_id"),
    )

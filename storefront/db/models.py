"""SQLAlchemy database models."""

import json
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Product(Base):
    """Catalog product, scraped or entered by hand."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    platform: Mapped[str] = mapped_column(String(32), nullable=False, default="Other")
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Prices are display strings ("₹370", "Rs. 1,234")
    price: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    original_price: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    image_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    rating: Mapped[str] = mapped_column(String(16), nullable=False, default="")
    category: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    images: Mapped[str] = mapped_column(Text, nullable=False, default="")  # JSON array of URLs
    long_description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_new: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_bestseller: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    added_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )

    @property
    def image_list(self) -> list[str]:
        """Decoded ``images`` column; empty on blank or malformed JSON."""
        if not self.images:
            return []
        try:
            value = json.loads(self.images)
        except json.JSONDecodeError:
            return []
        if not isinstance(value, list):
            return []
        return [img for img in value if isinstance(img, str)]

    @property
    def gallery(self) -> list[str]:
        """Images to show on the product page, falling back to the main image."""
        images = self.image_list
        if not images and self.image_url:
            images = [self.image_url]
        return images


class PageView(Base):
    """A single tracked page view."""

    __tablename__ = "page_views"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    path: Mapped[str] = mapped_column(Text, nullable=False)
    product_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    referrer: Mapped[str] = mapped_column(Text, nullable=False, default="")
    user_agent: Mapped[str] = mapped_column(Text, nullable=False, default="")
    visitor_id: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )

    __table_args__ = (
        Index("idx_page_views_created_at", "created_at"),
        Index("idx_page_views_path", "path"),
        Index("idx_page_views_product_id", "product_id"),
    )


class WhatsAppClick(Base):
    """Click on an order/contact button that opens WhatsApp."""

    __tablename__ = "wa_clicks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    click_type: Mapped[str] = mapped_column(String(32), nullable=False, default="order")
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )

"""Checkout product catalog: price ids and modes the checkout probe sends."""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price_id: str
    credits: int
    mode: str  # 'payment' | 'subscription'


PRODUCTS: Tuple[Product, ...] = (
    Product("monthly-subscription", "Monthly Subscription", "price_1RiUt0AK7V4m73aluYckgD6P", 250, "subscription"),
    Product("small-topup", "Small Credits", "price_1RiUvhAK7V4m73alSPDpllg2", 100, "payment"),
    Product("medium-topup", "Medium Credits", "price_1RiUxdAK7V4m73alz8Oad0YH", 500, "payment"),
    Product("xxl-topup", "XXL Credits", "price_1RiUyPAK7V4m73alBCuO8sYC", 1500, "payment"),
)


def get_product(product_id: str) -> Optional[Product]:
    return next((p for p in PRODUCTS if p.id == product_id), None)


def get_product_by_price_id(price_id: str) -> Optional[Product]:
    return next((p for p in PRODUCTS if p.price_id == price_id), None)

"""HTTP probes for the hosted checkout backend and edge functions."""

from src.probes.edge_functions import EdgeFunctionProbe, ProbeResult, build_checkout_payload
from src.probes.products import PRODUCTS, Product, get_product, get_product_by_price_id

__all__ = [
    "EdgeFunctionProbe",
    "ProbeResult",
    "build_checkout_payload",
    "PRODUCTS",
    "Product",
    "get_product",
    "get_product_by_price_id",
]

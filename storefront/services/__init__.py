# Services Module
from .models import Category, Product, ProductPage, ProductQuery
from .products import ProductNotFoundError, ProductService, ProductServiceError, get_product_service

__all__ = [
    "Category",
    "Product",
    "ProductPage",
    "ProductQuery",
    "ProductService",
    "ProductServiceError",
    "ProductNotFoundError",
    "get_product_service",
]

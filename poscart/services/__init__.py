"""Catalog services: money helpers, product model and repositories."""
from .models import Product

__all__ = ["Product"]

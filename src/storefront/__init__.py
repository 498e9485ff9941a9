"""Storefront commerce backend."""

"""Utility modules for the BigCommerce client."""

"""Marketplace bounded context: catalogue, checkout pricing, buyer lists, COD orders and reviews."""

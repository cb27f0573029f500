"""
ARL Django HTTP adapter.
Thin framework glue over the registry service.
"""

"""Warehouse productivity tracking backend."""

"""Async client for the storefront REST API."""

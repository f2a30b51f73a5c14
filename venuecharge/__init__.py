"""
Backend package for the venue charging marketing site.

This package provides a FastAPI application exposing the contact form,
venue registration and advertiser registration endpoints, backed by either
Postgres or an in-memory store.
"""

"""
FastAPI routers for all API endpoints.

Each module defines a router for one area (profile, pages, gallery, ...).
Owner routes build an RLS-scoped client from the caller's token; the
public, webhook and admin routes use the service role client.
"""

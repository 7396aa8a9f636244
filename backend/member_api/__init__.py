"""Application package for the member/team search backend.

This package exposes the model, query composition, repository and
service modules used by the FastAPI application. Query building lives
in `predicates`, `query`, `projections` and `paging`; the modules are
small and documented individually.
"""

"""Typed procedure layer.

Procedures are named, schema-validated queries and mutations grouped
into routers, served over HTTP with a tRPC-compatible envelope.
"""

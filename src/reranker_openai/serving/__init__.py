"""
Serving — FastAPI application exposing the reranker over HTTP.

This module lets the reranker run as a standalone container that any
workflow host can call instead of embedding the Python package.
"""

"""Reranker OpenAI — rerank retrieved documents through an OpenAI-compatible API."""

__version__ = "0.1.0"

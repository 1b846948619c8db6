"""Keyword-vector retrieval over a sectioned résumé."""

"""Bilingual PDF rendering."""

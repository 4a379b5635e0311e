"""Core models, errors, orchestration and reassembly."""

"""Arabic grammar normalization."""

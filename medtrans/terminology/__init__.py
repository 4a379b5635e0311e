"""Medical and general terminology tables."""

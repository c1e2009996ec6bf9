"""Statement construction."""

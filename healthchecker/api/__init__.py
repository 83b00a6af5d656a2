"""HTTP surface for the health check report."""

"""HTTP surface for the load calendar."""

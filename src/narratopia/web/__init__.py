"""HTTP surface for the manuscript store."""

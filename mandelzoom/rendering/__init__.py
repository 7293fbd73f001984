"""Coloring, rendering backends and image export."""

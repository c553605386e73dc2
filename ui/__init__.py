"""flet status surface."""

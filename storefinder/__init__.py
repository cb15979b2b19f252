"""Store Finder web application."""

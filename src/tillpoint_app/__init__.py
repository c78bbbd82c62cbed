"""Checkout engine and view bindings for tillpoint terminals."""

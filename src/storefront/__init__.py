"""Storefront core: trace log, backing store and application wiring."""

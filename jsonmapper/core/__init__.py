"""Mapper construction and publication."""

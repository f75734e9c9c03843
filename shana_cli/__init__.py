"""Shana command line shell."""

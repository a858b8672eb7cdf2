"""Scaffolded learning tutor package root."""

"""Provforge CLI — Typer application."""

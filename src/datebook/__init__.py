"""Datebook - personal appointment calendar."""

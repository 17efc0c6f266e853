"""Diagnostic plots for the day/night cycle."""

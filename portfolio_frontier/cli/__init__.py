"""Command-line front ends: batch (pf-analyze) and interactive (pf-interactive)."""

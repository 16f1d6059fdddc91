"""Command line interface for shuttlehub."""

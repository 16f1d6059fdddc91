"""HTTP API for shuttlehub."""

"""Rate computation and metric export for system activity snapshots."""

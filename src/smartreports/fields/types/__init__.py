"""Field type handlers, one per report data type."""

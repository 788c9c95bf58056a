"""Document console."""

"""HTTP surface shared by both services (health + metrics only)."""

"""Infrastructure layer: PostgreSQL persistence behind the domain's store protocols."""

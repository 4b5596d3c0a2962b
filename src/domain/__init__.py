"""Domain layer: business rules that don't depend on FastAPI or SQLAlchemy."""

"""Payvault - payment allocation and tax vault service.

Splits each completed incoming payment across a freelancer's savings goals,
with a privileged tax vault that always takes its cut first and never
completes.

Architecture Overview:
- **API Layer**: FastAPI routers, middleware and error handlers
- **Core Layer**: Configuration, logging, exceptions and tracing
- **Domain Layer**: Allocation engine and tax vault lifecycle
- **Infrastructure Layer**: SQLAlchemy models and stores on PostgreSQL
"""

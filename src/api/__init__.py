"""HTTP API of Payvault.

- **main**: Application factory and lifespan
- **routers**: Allocation, tax vault and savings goal endpoints
- **dependencies**: Bearer authentication and service wiring
- **middleware**: Security headers, correlation ids, request logging and
  exception handlers
- **schemas**: Request bodies, goal views and the error response
- **utils**: orjson response class
"""

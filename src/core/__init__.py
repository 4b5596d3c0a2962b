"""Cross-cutting functionality shared by every layer of Payvault.

- **config**: Pydantic Settings with nested sections and .env support
- **context**: Correlation id and authenticated user id per request
- **exceptions**: Error hierarchy with codes and severities
- **error_context**: Redaction of sensitive values before logging
- **logging**: Loguru setup with console and JSON formatters
- **observability**: OpenTelemetry tracing
- **types**: Shared type aliases
"""

"""Database constants."""

POOL_RECYCLE_SECONDS = 3600  # 1 hour
COMMAND_TIMEOUT_SECONDS = 60

# Longest SQL text kept in slow query log records
MAX_LOGGED_STATEMENT_LENGTH = 500

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Partial unique index that allows at most one tax vault per user
TAX_VAULT_UNIQUE_INDEX = "uq_savings_goals_user_tax_vault"

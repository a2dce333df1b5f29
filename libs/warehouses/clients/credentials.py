"""
Type-safe credentials for warehouse clients.

One frozen pydantic model per backend, discriminated on ``type``. These are
produced by the configuration layer after it has parsed and validated
profiles; clients only read them.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    TypeAdapter,
    model_validator,
)

from ..types import WarehouseType, WeekDay


class SSLMode(str, Enum):
    """SSL connection modes for Postgres-protocol connections."""

    DISABLE = "disable"
    ALLOW = "allow"
    PREFER = "prefer"
    REQUIRE = "require"
    VERIFY_CA = "verify-ca"
    VERIFY_FULL = "verify-full"


class BigqueryPriority(str, Enum):
    """BigQuery job priorities."""

    INTERACTIVE = "interactive"
    BATCH = "batch"


class BaseWarehouseCredentials(BaseModel):
    """
    Base class for all warehouse credentials.

    Credentials are immutable once constructed and reject unknown keys.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    start_of_week: WeekDay | None = Field(
        default=None, description="First day of the week, Monday=0"
    )


class SnowflakeCredentials(BaseWarehouseCredentials):
    """Credentials for Snowflake."""

    type: Literal["snowflake"] = "snowflake"

    account: str = Field(..., min_length=1, description="Snowflake account identifier")
    user: str = Field(..., min_length=1, description="Username for authentication")

    # Authentication (either password or private key required)
    password: SecretStr | None = Field(
        default=None, description="Password for authentication"
    )
    private_key: SecretStr | None = Field(
        default=None, description="PEM private key for key-pair authentication"
    )
    private_key_passphrase: SecretStr | None = Field(
        default=None, description="Passphrase for an encrypted private key"
    )

    database: str = Field(..., min_length=1, description="Default database")
    warehouse_schema: str = Field(
        ..., alias="schema", min_length=1, description="Default schema"
    )
    warehouse: str = Field(..., min_length=1, description="Virtual warehouse to use")
    role: str | None = Field(default=None, min_length=1, description="Role to assume")

    client_session_keep_alive: bool = Field(
        default=False, description="Keep client session alive"
    )
    access_url: str | None = Field(
        default=None, description="Custom endpoint, e.g. a private link URL"
    )
    query_tag: str | None = Field(default=None, description="QUERY_TAG for sessions")

    @model_validator(mode="after")
    def validate_authentication(self) -> "SnowflakeCredentials":
        """Ensure either password or private key is provided."""
        if not self.password and not self.private_key:
            raise ValueError("Either password or private_key must be provided")
        return self


class BigqueryCredentials(BaseWarehouseCredentials):
    """Credentials for Google BigQuery."""

    type: Literal["bigquery"] = "bigquery"

    project: str = Field(..., min_length=1, description="Google Cloud project ID")
    dataset: str = Field(..., min_length=1, description="Default dataset")
    keyfile_contents: dict[str, Any] | None = Field(
        default=None,
        description="Service account JSON; application default credentials if absent",
    )
    location: str | None = Field(default=None, description="Job location")
    timeout_seconds: int = Field(
        default=300, ge=1, le=21600, description="Job timeout in seconds"
    )
    priority: BigqueryPriority = Field(
        default=BigqueryPriority.INTERACTIVE, description="Job priority"
    )
    maximum_bytes_billed: int | None = Field(
        default=None, ge=0, description="Maximum bytes billed per query"
    )


class PostgresCredentials(BaseWarehouseCredentials):
    """Credentials for PostgreSQL."""

    type: Literal["postgres"] = "postgres"

    host: str = Field(..., min_length=1, description="Server host")
    port: int = Field(default=5432, ge=1, le=65535, description="Port number")
    user: str = Field(..., min_length=1, description="Username for authentication")
    password: SecretStr = Field(..., description="Password for authentication")
    dbname: str = Field(..., min_length=1, description="Database name")
    warehouse_schema: str = Field(
        ..., alias="schema", min_length=1, description="Default schema"
    )
    sslmode: SSLMode = Field(default=SSLMode.PREFER, description="SSL connection mode")
    search_path: str | None = Field(default=None, description="Session search_path")
    keepalives_idle: int | None = Field(
        default=None, ge=0, description="TCP keepalive idle seconds"
    )
    connect_timeout: int = Field(
        default=60, ge=1, le=300, description="Connection timeout in seconds"
    )


class RedshiftCredentials(BaseWarehouseCredentials):
    """Credentials for Amazon Redshift."""

    type: Literal["redshift"] = "redshift"

    host: str = Field(..., min_length=1, description="Redshift cluster endpoint")
    port: int = Field(default=5439, ge=1, le=65535, description="Port number")
    user: str = Field(..., min_length=1, description="Username for authentication")
    password: SecretStr = Field(..., description="Password for authentication")
    dbname: str = Field(..., min_length=1, description="Database name")
    warehouse_schema: str = Field(
        ..., alias="schema", min_length=1, description="Default schema"
    )
    sslmode: SSLMode = Field(
        default=SSLMode.VERIFY_CA, description="SSL connection mode"
    )
    connect_timeout: int = Field(
        default=60, ge=1, le=300, description="Connection timeout in seconds"
    )
    ra3_node: bool = Field(
        default=False, description="Cluster runs RA3 nodes (cross-database queries)"
    )


class DatabricksCredentials(BaseWarehouseCredentials):
    """Credentials for a Databricks SQL warehouse or cluster."""

    type: Literal["databricks"] = "databricks"

    server_host_name: str = Field(..., min_length=1, description="Workspace host")
    http_path: str = Field(..., min_length=1, description="HTTP path of the endpoint")
    personal_access_token: SecretStr = Field(..., description="Access token")
    catalog: str | None = Field(
        default=None, min_length=1, description="Unity Catalog name"
    )
    database: str = Field(..., min_length=1, description="Default schema")


class DuckdbCredentials(BaseWarehouseCredentials):
    """Credentials for an embedded DuckDB database."""

    type: Literal["duckdb"] = "duckdb"

    path: str = Field(default=":memory:", min_length=1, description="Database file")
    database: str | None = Field(
        default=None, min_length=1, description="Catalog to USE after connecting"
    )
    warehouse_schema: str | None = Field(
        default=None, alias="schema", min_length=1, description="Schema to USE"
    )
    read_only: bool = Field(default=False, description="Open the file read-only")
    threads: int | None = Field(default=None, ge=1, description="Worker threads")


WarehouseCredentials = Annotated[
    Union[
        SnowflakeCredentials,
        BigqueryCredentials,
        PostgresCredentials,
        RedshiftCredentials,
        DatabricksCredentials,
        DuckdbCredentials,
    ],
    Field(discriminator="type"),
]

CREDENTIALS_MODEL_MAP: dict[WarehouseType, type[BaseWarehouseCredentials]] = {
    WarehouseType.SNOWFLAKE: SnowflakeCredentials,
    WarehouseType.BIGQUERY: BigqueryCredentials,
    WarehouseType.POSTGRES: PostgresCredentials,
    WarehouseType.REDSHIFT: RedshiftCredentials,
    WarehouseType.DATABRICKS: DatabricksCredentials,
    WarehouseType.DUCKDB: DuckdbCredentials,
}

_credentials_adapter: TypeAdapter[WarehouseCredentials] = TypeAdapter(
    WarehouseCredentials
)


def parse_credentials(data: dict[str, Any]) -> BaseWarehouseCredentials:
    """
    Validate a credentials mapping into its typed model.

    Raises:
        pydantic.ValidationError: If the mapping is not valid credentials
    """
    return _credentials_adapter.validate_python(data)

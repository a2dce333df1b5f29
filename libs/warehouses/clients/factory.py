"""
Factory for creating warehouse clients.

This module maps validated credentials onto the matching client class.
Creating a client never touches the network; the first call on the client
opens its first connection.
"""

from typing import Any

import structlog
from pydantic import ValidationError

from ..errors import UnsupportedWarehouseError
from ..types import WarehouseType
from .base import WarehouseClient
from .bigquery import BigqueryWarehouseClient
from .credentials import (
    CREDENTIALS_MODEL_MAP,
    BaseWarehouseCredentials,
    parse_credentials,
)
from .databricks import DatabricksWarehouseClient
from .duckdb import DuckdbWarehouseClient
from .postgres import PostgresWarehouseClient
from .redshift import RedshiftWarehouseClient
from .snowflake import SnowflakeWarehouseClient


class WarehouseClientFactory:
    """Factory for creating warehouse clients."""

    logger = structlog.get_logger(__name__)

    _clients: dict[WarehouseType, type[WarehouseClient]] = {
        WarehouseType.SNOWFLAKE: SnowflakeWarehouseClient,
        WarehouseType.BIGQUERY: BigqueryWarehouseClient,
        WarehouseType.REDSHIFT: RedshiftWarehouseClient,
        WarehouseType.POSTGRES: PostgresWarehouseClient,
        WarehouseType.DATABRICKS: DatabricksWarehouseClient,
        WarehouseType.DUCKDB: DuckdbWarehouseClient,
    }

    @classmethod
    def _unsupported(cls, warehouse_type: Any) -> UnsupportedWarehouseError:
        warehouse_type = getattr(warehouse_type, "value", warehouse_type)
        supported = ", ".join(wt.value for wt in cls._clients)
        cls.logger.error(
            "unsupported_warehouse_type",
            warehouse_type=str(warehouse_type),
            supported_types=[wt.value for wt in cls._clients],
        )
        return UnsupportedWarehouseError(
            f"Unsupported warehouse type: {warehouse_type}. "
            f"Supported types: {supported}"
        )

    @classmethod
    def create_client(cls, credentials: BaseWarehouseCredentials) -> WarehouseClient:
        """
        Create a client for validated credentials.

        Args:
            credentials: Typed credentials for one backend

        Returns:
            WarehouseClient: Configured, not yet connected client

        Raises:
            TypeError: If credentials is not a credentials model
            UnsupportedWarehouseError: If no client is registered for the type
        """
        if not isinstance(credentials, BaseWarehouseCredentials):
            cls.logger.error("invalid_credentials_type", type=type(credentials))
            raise TypeError(
                "credentials must be BaseWarehouseCredentials subclass, "
                f"got {type(credentials)}"
            )

        tag = getattr(credentials, "type", None)
        try:
            warehouse_type = WarehouseType(tag)
        except ValueError:
            raise cls._unsupported(tag) from None

        client_class = cls._clients.get(warehouse_type)
        if client_class is None:
            raise cls._unsupported(warehouse_type.value)

        cls.logger.info(
            "creating_client",
            warehouse_type=warehouse_type.value,
            client_class=client_class.__name__,
        )
        client = client_class(credentials)  # type: ignore[arg-type]
        cls.logger.debug(
            "client_created_successfully",
            warehouse_type=warehouse_type.value,
            client_id=id(client),
        )
        return client

    @classmethod
    def create_client_from_dict(cls, data: dict[str, Any]) -> WarehouseClient:
        """
        Validate a credentials mapping and create its client.

        Args:
            data: Credentials mapping carrying a ``type`` tag

        Returns:
            WarehouseClient: Configured, not yet connected client

        Raises:
            TypeError: If data is not a dictionary
            UnsupportedWarehouseError: If the type tag is unknown
            pydantic.ValidationError: If the credentials are invalid
        """
        if not isinstance(data, dict):
            cls.logger.error("invalid_credentials_data", data_type=type(data))
            raise TypeError(f"credentials must be dict, got {type(data)}")

        tag = data.get("type")
        if tag not in {wt.value for wt in cls._clients}:
            raise cls._unsupported(tag)

        try:
            credentials = parse_credentials(data)
        except ValidationError as e:
            cls.logger.error(
                "credentials_validation_failed",
                warehouse_type=tag,
                error_count=e.error_count(),
            )
            raise

        return cls.create_client(credentials)

    @classmethod
    def register_client(
        cls,
        warehouse_type: WarehouseType,
        client_class: type[WarehouseClient],
    ) -> None:
        """
        Register a client class for a warehouse type.

        Raises:
            TypeError: If inputs are not of the correct type
            ValueError: If client_class is not a WarehouseClient subclass
        """
        if not isinstance(warehouse_type, WarehouseType):
            raise TypeError(
                f"warehouse_type must be WarehouseType enum, got {type(warehouse_type)}"
            )

        if not isinstance(client_class, type) or not issubclass(
            client_class, WarehouseClient
        ):
            raise ValueError(
                f"client_class must be a subclass of WarehouseClient, got {client_class!r}"
            )

        if warehouse_type in cls._clients:
            cls.logger.warning(
                "overwriting_existing_client",
                warehouse_type=warehouse_type.value,
                old_client=cls._clients[warehouse_type].__name__,
                new_client=client_class.__name__,
            )

        cls._clients[warehouse_type] = client_class
        cls.logger.info(
            "client_registered",
            warehouse_type=warehouse_type.value,
            client_class=client_class.__name__,
        )

    @classmethod
    def get_supported_types(cls) -> list[WarehouseType]:
        """Get list of supported warehouse types."""
        return list(cls._clients.keys())

    @classmethod
    def get_credentials_schema(cls, warehouse_type: WarehouseType) -> dict[str, Any]:
        """
        Get the JSON schema of a warehouse type's credentials.

        Raises:
            UnsupportedWarehouseError: If warehouse type is not supported
        """
        model = CREDENTIALS_MODEL_MAP.get(warehouse_type)
        if model is None:
            raise cls._unsupported(warehouse_type)
        return model.model_json_schema(by_alias=True)


def warehouse_client_from_credentials(
    credentials: BaseWarehouseCredentials | dict[str, Any],
) -> WarehouseClient:
    """Create the client matching a credentials model or mapping."""
    if isinstance(credentials, dict):
        return WarehouseClientFactory.create_client_from_dict(credentials)
    return WarehouseClientFactory.create_client(credentials)

from abc import abstractmethod
from typing import Any

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig


class SourceClientInterface(ClientInterface):
    """Record sources deliver raw table rows as ordered column -> value mappings.

    Sources talk to their backend through a database driver rather than the
    shared HTTP transport, so they manage their own connection lifecycle in
    boot() and close().
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "source"

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        # credentials are part of the connection descriptor
        return {}

    ################ ENDPOINTS ##################
    def _get_endpoint_healthcheck(self) -> str:
        return ""

    ##########################################
    ############### REQUESTS #################
    ##########################################

    @abstractmethod
    async def do_healthcheck(self) -> None:
        """Run a trivial query against the source.

        Raises:
            SourceFetchError: If the source cannot be reached.
        """
        pass

    @abstractmethod
    async def do_fetch_records(self, table_name: str, limit: int) -> list[dict[str, Any]]:
        """Fetch at most `limit` rows of a table in source order.

        Args:
            table_name (str): Table name, optionally schema-qualified ("dbo.Customers").
            limit (int): Maximum number of rows to return.

        Returns:
            list[dict[str, Any]]: One dict per row, keys in column order,
                values in their driver-native types.

        Raises:
            SourceFetchError: If the source is unreachable or the query is rejected.
        """
        pass

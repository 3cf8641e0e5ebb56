from shared.helper.HelperConfig import HelperConfig
from shared.clients.search.SearchClientInterface import SearchClientInterface


class SearchClientManager:
    """
    Manager class to handle every search backend the documents are published to.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.clients = self._initialize_clients()

    def _get_engines_from_env(self) -> list[str]:
        """
        Reads the list of search engines from SEARCH_ENGINES, e.g. "[azure,qdrant]".

        Returns:
            list[str]: Capitalised engine names.

        Raises:
            ValueError: If no search engine is configured.
        """
        engines = self.helper_config.get_list_val("SEARCH_ENGINES")
        if not engines:
            raise ValueError("No search engines specified in configuration (SEARCH_ENGINES).")
        return [engine.strip().lower().capitalize() for engine in engines]

    def _initialize_clients(self) -> list[SearchClientInterface]:
        """
        Imports shared.clients.search.<engine>.SearchClient<Engine> for each configured engine.

        Raises:
            ValueError: If any configured engine is unsupported.
        """
        clients = []
        for engine in self._get_engines_from_env():
            class_name = f"SearchClient{engine}"
            try:
                module = __import__(
                    f"shared.clients.search.{engine.lower()}.{class_name}",
                    fromlist=[class_name],
                )
                client_class = getattr(module, class_name)
            except (ImportError, AttributeError) as e:
                raise ValueError(f"Unsupported search engine specified: '{engine}'. Error: {e}")
            clients.append(client_class(helper_config=self.helper_config))
            self.logging.debug(f"Instantiated search client for engine: {engine}")
        return clients

    def get_clients(self) -> list[SearchClientInterface]:
        """
        Returns the list of instantiated search clients.
        """
        return self.clients

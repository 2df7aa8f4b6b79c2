from flask import current_app

from services.llm_client import LLMClient, build_summary_model
from services.storage_service import BlobStorage

EXTENSION_KEY = "offeriq"


class ServiceRegistry:
    """
    Process-wide vendor clients. Each one is built on first use and then
    reused; tests hand in fakes instead.
    """

    def __init__(self, config, llm=None, summary_model=None, storage=None):
        self.config = config
        self._llm = llm
        self._summary_model = summary_model
        self._storage = storage

    @property
    def llm(self) -> LLMClient:
        if self._llm is None:
            self._llm = LLMClient.from_config(self.config)
        return self._llm

    @property
    def summary_model(self):
        if self._summary_model is None:
            self._summary_model = build_summary_model(self.config)
        return self._summary_model

    @property
    def storage(self) -> BlobStorage:
        if self._storage is None:
            self._storage = BlobStorage.from_config(self.config)
        return self._storage


def get_services() -> ServiceRegistry:
    return current_app.extensions[EXTENSION_KEY]

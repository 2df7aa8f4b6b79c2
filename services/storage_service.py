import logging
import os
import secrets
import time
from datetime import datetime, timedelta, timezone

from azure.storage.blob import BlobServiceClient, BlobSasPermissions, ContentSettings, generate_blob_sas

logger = logging.getLogger(__name__)


def build_storage_path(workspace_id: str, offer_id: str, file_name: str) -> str:
    """<workspace>/<offer>/<ms timestamp>-<random>.<ext>"""
    _, ext = os.path.splitext(file_name)
    ext = ext.lstrip(".") or "bin"
    unique = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}"
    return f"{workspace_id}/{offer_id}/{unique}.{ext}"


class BlobStorage:
    """Offer file storage on an Azure Blob container."""

    def __init__(self, service_client: BlobServiceClient, container_name: str):
        self.service_client = service_client
        self.container_name = container_name
        self.container_client = service_client.get_container_client(container_name)

    @classmethod
    def from_config(cls, config) -> "BlobStorage":
        connection_string = config.get("AZURE_STORAGE_CONNECTION_STRING")
        if not connection_string:
            raise ValueError("AZURE_STORAGE_CONNECTION_STRING is not set.")
        service_client = BlobServiceClient.from_connection_string(connection_string)
        return cls(service_client, config.get("AZURE_STORAGE_CONTAINER_NAME"))

    def upload(self, blob_name: str, data: bytes, content_type: str = None) -> str:
        blob_client = self.container_client.get_blob_client(blob_name)
        settings = ContentSettings(content_type=content_type, cache_control="max-age=3600") if content_type else None
        blob_client.upload_blob(data, overwrite=False, content_settings=settings)
        logger.info(f"Uploaded blob: {blob_name}")
        return blob_name

    def download(self, blob_name: str) -> bytes:
        blob_client = self.container_client.get_blob_client(blob_name)
        return blob_client.download_blob().readall()

    def generate_signed_url(self, blob_name: str, expires_in: int = 3600) -> str:
        blob_client = self.container_client.get_blob_client(blob_name)
        sas_token = generate_blob_sas(
            account_name=self.service_client.account_name,
            container_name=self.container_name,
            blob_name=blob_name,
            account_key=self.service_client.credential.account_key,
            permission=BlobSasPermissions(read=True),
            expiry=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        )
        return f"{blob_client.url}?{sas_token}"

    def delete(self, blob_name: str) -> None:
        self.container_client.delete_blob(blob_name)
        logger.info(f"Deleted blob: {blob_name}")

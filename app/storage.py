# app/storage.py

import logging
import os
from datetime import datetime, timedelta, timezone
from typing import BinaryIO, Optional

from azure.core.exceptions import ResourceExistsError
from azure.storage.blob import (
    BlobSasPermissions,
    BlobServiceClient,
    ContentSettings,
    generate_blob_sas,
)

from .config import Settings

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")


class ImageStorage:
    """Uploads product images to an Azure Blob container and hands back SAS URLs."""

    def __init__(
        self,
        account_name: str,
        account_key: str,
        container_name: str,
        sas_expiry_hours: int = 24,
    ):
        self.account_name = account_name
        self.container_name = container_name
        self.sas_expiry_hours = sas_expiry_hours
        self._account_key = account_key
        self._client = BlobServiceClient(
            account_url=f"https://{account_name}.blob.core.windows.net",
            credential=account_key,
        )

    def ensure_container(self) -> None:
        try:
            self._client.get_container_client(self.container_name).create_container()
            logger.info(f"Admin Service: Azure container '{self.container_name}' created.")
        except ResourceExistsError:
            logger.info(f"Admin Service: Azure container '{self.container_name}' already exists.")

    def upload(self, product_id: str, filename: Optional[str], content_type: str, data: BinaryIO) -> str:
        extension = os.path.splitext(filename or "")[1] or ".jpg"
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
        blob_name = f"{product_id}/{timestamp}{extension}"

        blob_client = self._client.get_blob_client(container=self.container_name, blob=blob_name)
        logger.info(f"Admin Service: Uploading image '{filename}' for product {product_id} as '{blob_name}'.")
        blob_client.upload_blob(
            data,
            overwrite=True,
            content_settings=ContentSettings(content_type=content_type),
        )

        sas_token = generate_blob_sas(
            account_name=self.account_name,
            account_key=self._account_key,
            container_name=self.container_name,
            blob_name=blob_name,
            permission=BlobSasPermissions(read=True),
            expiry=datetime.now(timezone.utc) + timedelta(hours=self.sas_expiry_hours),
        )
        return f"{blob_client.url}?{sas_token}"


def build_image_storage(settings: Settings) -> Optional[ImageStorage]:
    if not settings.image_storage_enabled:
        logger.warning("Admin Service: Azure Storage credentials not found. Image uploads are disabled.")
        return None
    try:
        storage = ImageStorage(
            settings.azure_account_name,
            settings.azure_account_key,
            settings.azure_container_name,
            settings.azure_sas_expiry_hours,
        )
        storage.ensure_container()
    except Exception as e:
        logger.critical(
            f"Admin Service: Failed to initialize Azure Blob Storage. Image uploads are disabled. Error: {e}",
            exc_info=True,
        )
        return None
    logger.info("Admin Service: Azure BlobServiceClient initialized.")
    return storage

import os
import time
from functools import lru_cache

from azure.storage.blob import BlobServiceClient, ContentSettings

import config


@lru_cache(maxsize=1)
def get_blob_service() -> BlobServiceClient:
     if not config.AZURE_STORAGE_ACCOUNT or not config.AZURE_STORAGE_KEY:
          raise RuntimeError("AZURE_STORAGE_ACCOUNT / AZURE_STORAGE_KEY are not set")
     return BlobServiceClient.from_connection_string(
          f"DefaultEndpointsProtocol=https;"
          f"AccountName={config.AZURE_STORAGE_ACCOUNT};"
          f"AccountKey={config.AZURE_STORAGE_KEY};"
          f"EndpointSuffix=core.windows.net"
     )


def upload_contract(file, property_id: int, tenant_id: int, container: str = None) -> str:
     """
     Upload a signed contract and return its durable URL.

     Blob name: <property_id>_<tenant_id>_<epoch ms>.<ext>
     """
     container = container or config.CONTRACTS_CONTAINER
     ext = os.path.splitext(file.filename or "")[1] or ".pdf"
     filename = f"{property_id}_{tenant_id}_{int(time.time() * 1000)}{ext}"
     blob_client = get_blob_service().get_blob_client(container=container, blob=filename)
     blob_client.upload_blob(
          file.file,
          overwrite=False,
          content_settings=ContentSettings(content_type=file.content_type or "application/pdf"),
     )
     return f"https://{config.AZURE_STORAGE_ACCOUNT}.blob.core.windows.net/{container}/{filename}"


def delete_from_blob(blob_url: str):
     """
     Deletes a file from Azure Blob Storage using its full URL
     """
     parts = blob_url.split("/")
     container = parts[-2]
     blob_name = parts[-1]
     blob_client = get_blob_service().get_blob_client(
          container=container,
          blob=blob_name
     )
     blob_client.delete_blob()

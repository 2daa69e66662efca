# backend/services/file_storage.py
# Photo storage for SAM Climatiza: Azure Blob Storage or the local uploads folder

import os
import io
import logging
from typing import Optional, Tuple
from uuid import uuid4
from datetime import datetime
from azure.storage.blob import BlobServiceClient
from azure.core.exceptions import ResourceNotFoundError, AzureError
from werkzeug.utils import secure_filename
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'png': 'image/png',
    'gif': 'image/gif',
    'webp': 'image/webp',
}

# Pillow format name -> extension used for the stored file
PILLOW_FORMATS = {
    'JPEG': 'jpg',
    'PNG': 'png',
    'GIF': 'gif',
    'WEBP': 'webp',
}


class FileStorageService:
    """Stores uploaded photos in Azure Blob Storage when configured, else on local disk"""

    def __init__(self, app=None):
        self.container_name = 'uploads'
        self.upload_folder = 'uploads'
        self.blob_service_client = None
        self.container_client = None
        self.use_azure = False
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.upload_folder = app.config['UPLOAD_FOLDER']
        self.container_name = app.config.get('AZURE_STORAGE_CONTAINER_NAME', 'uploads')
        connection_string = app.config.get('AZURE_STORAGE_CONNECTION_STRING')

        os.makedirs(self.upload_folder, exist_ok=True)

        if not connection_string:
            logger.info("Azure Storage connection string not configured - using local storage")
            self.blob_service_client = None
            self.container_client = None
            self.use_azure = False
            return

        try:
            self.blob_service_client = BlobServiceClient.from_connection_string(connection_string)
            self.container_client = self.blob_service_client.get_container_client(self.container_name)
            self._ensure_container_exists()
            self.use_azure = True
            logger.info(f"Azure Blob Storage initialized - Container: {self.container_name}")
        except (AzureError, ValueError) as e:
            logger.error(f"Failed to initialize Azure Storage, falling back to local: {e}")
            self.blob_service_client = None
            self.container_client = None
            self.use_azure = False

    def _ensure_container_exists(self):
        try:
            self.container_client.get_container_properties()
        except ResourceNotFoundError:
            self.container_client.create_container()
            logger.info(f"Created container: {self.container_name}")

    def _get_blob_name(self, folder: str, extension: str) -> str:
        return f"{folder}/{uuid4().hex}.{extension}"

    def inspect_image(self, content: bytes, filename: str) -> Tuple[bool, str, Optional[str]]:
        """
        Check that the upload is an image we accept.

        Returns:
            Tuple of (valid, message, extension)
        """
        name = secure_filename(filename or '')
        extension = name.rsplit('.', 1)[-1].lower() if '.' in name else ''
        if extension not in ALLOWED_IMAGE_TYPES:
            return False, 'Only image files are allowed (jpg, png, gif, webp)', None

        try:
            with Image.open(io.BytesIO(content)) as img:
                detected = img.format
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError):
            return False, 'Uploaded file is not a valid image', None

        if detected not in PILLOW_FORMATS:
            return False, 'Only image files are allowed (jpg, png, gif, webp)', None

        return True, 'ok', PILLOW_FORMATS[detected]

    def upload_photo(self, content: bytes, filename: str, folder: str = "photos") -> Tuple[bool, str, Optional[str]]:
        """
        Validate and store a photo.

        Returns:
            Tuple of (success, message, file_url)
        """
        valid, message, extension = self.inspect_image(content, filename)
        if not valid:
            return False, message, None

        blob_name = self._get_blob_name(folder, extension)
        if self.use_azure:
            return self._upload_to_azure(content, blob_name, filename, extension)
        return self._upload_to_local(content, blob_name)

    def _upload_to_azure(self, content: bytes, blob_name: str, filename: str, extension: str):
        try:
            blob_client = self.blob_service_client.get_blob_client(
                container=self.container_name,
                blob=blob_name
            )
            blob_client.upload_blob(
                content,
                overwrite=True,
                content_type=ALLOWED_IMAGE_TYPES[extension],
                metadata={
                    'original_filename': secure_filename(filename),
                    'upload_timestamp': datetime.utcnow().isoformat(),
                }
            )
            logger.info(f"Uploaded to Azure: {blob_name}")
            return True, "File uploaded successfully", blob_client.url

        except AzureError as e:
            logger.error(f"Azure upload failed: {e}")
            return False, f"Azure upload failed: {str(e)}", None

    def _upload_to_local(self, content: bytes, blob_name: str):
        local_path = os.path.join(self.upload_folder, *blob_name.split('/'))
        try:
            os.makedirs(os.path.dirname(local_path), exist_ok=True)
            with open(local_path, 'wb') as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Local upload failed: {e}")
            return False, "Could not save the file", None

        logger.info(f"Uploaded locally: {local_path}")
        return True, "File uploaded successfully", f"/uploads/{blob_name}"

    def delete_file(self, file_url: Optional[str]) -> Tuple[bool, str]:
        """Remove a previously stored photo; missing files count as deleted"""
        if not file_url:
            return True, "Nothing to delete"
        if file_url.startswith('https://'):
            if not self.use_azure:
                return True, "Remote file left in place"
            return self._delete_from_azure(file_url)
        return self._delete_from_local(file_url)

    def _delete_from_azure(self, blob_url: str) -> Tuple[bool, str]:
        blob_name = blob_url.split(f'{self.container_name}/', 1)[-1]
        try:
            self.blob_service_client.get_blob_client(
                container=self.container_name,
                blob=blob_name
            ).delete_blob()
            logger.info(f"Deleted from Azure: {blob_name}")
            return True, "File deleted successfully"
        except ResourceNotFoundError:
            return True, "File not found (already deleted)"
        except AzureError as e:
            logger.error(f"Azure deletion failed: {e}")
            return False, f"Azure deletion failed: {str(e)}"

    def local_path_for(self, file_url: str) -> Optional[str]:
        """Map a /uploads/... URL to a path inside the upload folder, None if it escapes it"""
        if not file_url.startswith('/uploads/'):
            return None
        relative = file_url[len('/uploads/'):]
        root = os.path.abspath(self.upload_folder)
        path = os.path.abspath(os.path.join(root, *relative.split('/')))
        if not path.startswith(root + os.sep):
            return None
        return path

    def _delete_from_local(self, file_url: str) -> Tuple[bool, str]:
        local_path = self.local_path_for(file_url)
        if local_path is None:
            return True, "Not a local upload"

        if not os.path.exists(local_path):
            return True, "File not found (already deleted)"
        try:
            os.remove(local_path)
        except OSError as e:
            logger.error(f"Local deletion failed: {e}")
            return False, f"Local deletion failed: {str(e)}"

        logger.info(f"Deleted local file: {local_path}")
        return True, "File deleted successfully"


# Global instance, bound to the app in create_app
file_storage = FileStorageService()

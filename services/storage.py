import logging
import os
import secrets
import time
from dataclasses import dataclass

from werkzeug.security import safe_join

from utils.errors import NotFoundError

logger = logging.getLogger(__name__)

NAMESPACE_VISA = "visa"
NAMESPACE_GENERATED = "generated"
NAMESPACE_PAYSLIPS = "payslips"
NAMESPACES = (NAMESPACE_VISA, NAMESPACE_GENERATED, NAMESPACE_PAYSLIPS)


@dataclass
class StoredFile:
    namespace: str
    filename: str
    path: str
    url: str


class LocalFileStorage:
    """
    Filesystem storage sandboxed under one root folder.

    Stored names are generated here (millisecond timestamp + random suffix);
    client supplied filenames are never used to build paths.
    """

    def __init__(self, root, url_prefix="/files"):
        self.root = os.path.abspath(root)
        self.url_prefix = url_prefix.rstrip("/")
        for ns in NAMESPACES:
            os.makedirs(os.path.join(self.root, ns), exist_ok=True)

    def generate_name(self, extension=".pdf"):
        if extension and not extension.startswith("."):
            extension = "." + extension
        return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}{extension or ''}"

    def directory(self, namespace):
        if namespace not in NAMESPACES:
            raise NotFoundError("File not found")
        return os.path.join(self.root, namespace)

    def path_for(self, namespace, filename):
        path = safe_join(self.directory(namespace), filename or "")
        if path is None or os.path.basename(path) != filename:
            raise NotFoundError("File not found")
        return path

    def url_for(self, namespace, filename):
        return f"{self.url_prefix}/{namespace}/{filename}"

    def save(self, namespace, data, extension=".pdf"):
        """Persist bytes or an uploaded FileStorage; returns the StoredFile."""
        filename = self.generate_name(extension)
        path = self.path_for(namespace, filename)
        if hasattr(data, "save"):
            data.save(path)
        else:
            with open(path, "wb") as f:
                f.write(data)
        logger.info("Stored %s/%s", namespace, filename)
        return StoredFile(namespace=namespace, filename=filename, path=path, url=self.url_for(namespace, filename))

    def exists(self, namespace, filename):
        try:
            return os.path.isfile(self.path_for(namespace, filename))
        except NotFoundError:
            return False

    def read_bytes(self, namespace, filename):
        with open(self.path_for(namespace, filename), "rb") as f:
            return f.read()

    def delete(self, namespace, filename):
        """Best-effort removal; a leftover file is only an orphan."""
        try:
            os.remove(self.path_for(namespace, filename))
        except FileNotFoundError:
            pass
        except (OSError, NotFoundError):
            logger.warning("Could not remove %s/%s", namespace, filename, exc_info=True)

import os
import time
import logging

from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads/"


class UploadStore:
    """Uploaded images on local disk, referenced from records as '/uploads/<name>'."""

    def __init__(self, directory):
        self.directory = directory
        os.makedirs(directory, exist_ok=True)

    def save(self, upload) -> str:
        """Write a werkzeug FileStorage under a unique name and return its public path."""
        filename = secure_filename(upload.filename or "") or "upload"
        name, ext = os.path.splitext(f"{int(time.time() * 1000)}-{filename}")

        final = name + ext
        i = 1
        while os.path.exists(os.path.join(self.directory, final)):
            final = f"{name}-{i}{ext}"
            i += 1

        upload.save(os.path.join(self.directory, final))
        return URL_PREFIX + final

    def path_for(self, public_path):
        """Filesystem path of a stored upload, or None for paths this store does not own."""
        if not public_path or not public_path.startswith(URL_PREFIX):
            return None
        name = os.path.basename(public_path[len(URL_PREFIX):])
        if not name:
            return None
        return os.path.join(self.directory, name)

    def remove(self, public_path) -> None:
        """Delete the file behind public_path if it exists. Never raises."""
        target = self.path_for(public_path)
        if target is None or not os.path.exists(target):
            return
        try:
            os.remove(target)
        except OSError as e:
            logger.warning("Could not remove upload %s: %s", target, e)

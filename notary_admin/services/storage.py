"""
Upload des images de couverture vers le bucket Supabase `blog-images`.
"""
import logging
import time
from typing import Callable, Optional

from notary_admin import config
from notary_admin.exceptions import UploadError

logger = logging.getLogger(__name__)


class ImageUploader:
    def __init__(
        self,
        storage,
        bucket: str = config.BLOG_IMAGES_BUCKET,
        max_bytes: int = config.MAX_IMAGE_SIZE_BYTES,
        clock: Callable[[], float] = time.time,
    ):
        self.storage = storage
        self.bucket = bucket
        self.max_bytes = max_bytes
        self._clock = clock

    def validate(self, filename: Optional[str], content_type: Optional[str], size: int) -> None:
        """Refuse le fichier avant tout envoi (type non image, > 5MB)"""
        if not filename:
            raise UploadError("Aucun fichier sélectionné")
        if not content_type or not content_type.startswith("image/"):
            raise UploadError("Veuillez sélectionner une image valide")
        if size > self.max_bytes:
            raise UploadError(f"L'image ne doit pas dépasser {self.max_bytes // (1024 * 1024)}MB")

    def build_path(self, filename: str) -> str:
        extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else "jpg"
        return f"blog-images/cover_{int(self._clock() * 1000)}.{extension}"

    def upload_cover_image(self, filename: str, data: bytes, content_type: str) -> str:
        """
        Envoie l'image et retourne son URL publique.
        Un fichier existant n'est jamais écrasé.
        """
        self.validate(filename, content_type, len(data))
        path = self.build_path(filename)
        bucket = self.storage.from_(self.bucket)
        try:
            bucket.upload(
                path,
                data,
                {"cache-control": "3600", "upsert": "false", "content-type": content_type},
            )
            public_url = bucket.get_public_url(path)
        except Exception as exc:
            logger.error(f"Image upload failed ({path}): {str(exc)}")
            raise UploadError(f"Erreur lors de l'upload de l'image : {exc}") from exc
        logger.info(f"✅ Cover image uploaded: {path}")
        return public_url

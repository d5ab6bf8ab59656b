import logging
import os
import tempfile

from sitemapcrawl.domain.document import SerializedDocument
from sitemapcrawl.exceptions import DocumentWriteError, OutputDirError

logger = logging.getLogger(__name__)


class DocumentFileStore:
    """Filesystem IO for assembled documents.

    Responsibility: own the output directory and write one file per URL.
    Writes go to a temp file in the same directory and are moved into place,
    so concurrent writers never see each other's partial files.
    """

    def __init__(self, *, output_dir: str):
        self.output_dir = os.path.abspath(output_dir)

    def ensure_output_dir(self) -> str:
        try:
            os.makedirs(self.output_dir, exist_ok=True)
        except OSError as e:
            raise OutputDirError(self.output_dir, e) from e
        if not os.path.isdir(self.output_dir):
            raise OutputDirError(self.output_dir, NotADirectoryError(self.output_dir))
        return self.output_dir

    def path_for(self, filename: str) -> str:
        return os.path.join(self.output_dir, filename)

    def write(self, serialized: SerializedDocument) -> str:
        """Write `serialized` and return the final file path."""
        path = self.path_for(serialized.filename)
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.output_dir, prefix=".", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(serialized.text)
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    logger.warning("Could not remove temp file %s", tmp_path)
            raise DocumentWriteError(serialized.document.url, path, e) from e
        logger.debug("Wrote %s bytes to %s", len(serialized.text), path)
        return path

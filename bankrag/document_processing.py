"""Policy files on disk: discovery, text extraction and chunking."""

from pathlib import Path

import pypdf

from .config import config
from .models import POLICY, EmbeddedDocument

logger = config.get_logger(__name__)

SUPPORTED_EXTENSIONS = (".pdf", ".txt")


def _read_pdf(path: Path) -> str:
    with path.open("rb") as file:
        reader = pypdf.PdfReader(file)
        return "".join(
            f"\n--- Page {number} ---\n{page.extract_text()}\n"
            for number, page in enumerate(reader.pages, start=1)
        )


def _read_txt(path: Path) -> str:
    return path.read_text(encoding="utf-8")


_READERS = {".pdf": _read_pdf, ".txt": _read_txt}


class DocumentLoader:
    """Reads extra policy documents kept as PDF or plain text."""

    @staticmethod
    def load_document(file_path: Path) -> str:
        """Return the text of a policy file.

        PDF pages are separated by ``--- Page N ---`` markers.

        Raises:
            ValueError: If the extension is neither ``.pdf`` nor ``.txt``.
        """  # noqa: DOC201
        suffix = file_path.suffix.lower()
        reader = _READERS.get(suffix)
        if reader is None:
            msg = f"Unsupported file type: {suffix}"
            raise ValueError(msg)
        try:
            text = reader(file_path)
        except Exception:
            logger.exception("Could not read policy file %s", file_path)
            raise
        logger.info("Loaded policy file %s (%d chars)", file_path.name, len(text))
        return text

    @staticmethod
    def list_documents(directory: Path) -> list[Path]:
        """List supported files in a directory.

        Returns:
            Sorted PDF and TXT paths; empty if the directory is missing.
        """
        if not directory.is_dir():
            logger.warning("Policy directory not found: %s", directory)
            return []
        return sorted(
            path
            for path in directory.iterdir()
            if path.is_file() and path.suffix.lower() in SUPPORTED_EXTENSIONS
        )


class TextChunker:
    """Cuts long policy text into overlapping windows that end on a space."""

    def __init__(self, chunk_size: int = 1000, overlap: int = 200) -> None:
        if overlap >= chunk_size:
            msg = "overlap must be smaller than chunk_size"
            raise ValueError(msg)
        self.chunk_size = chunk_size
        self.overlap = overlap

    def _window_end(self, text: str, start: int) -> int:
        end = start + self.chunk_size
        if end >= len(text) or text[end - 1] == " ":
            return end
        last_space = text.rfind(" ", start, end)
        # Only pull back when the window keeps more than half its length.
        if last_space - start > self.chunk_size // 2:
            return last_space
        return end

    def chunk_text(
        self,
        text: str,
        source: str = "document",
        source_type: str = POLICY,
    ) -> list[EmbeddedDocument]:
        """Split text into documents with ids ``<source>#<n>`` and no embeddings.

        Returns:
            Chunks in reading order; blank windows are skipped.
        """
        chunks: list[EmbeddedDocument] = []
        start = 0

        while start < len(text):
            end = self._window_end(text, start)
            content = text[start:end].strip()
            if content:
                index = len(chunks)
                chunks.append(
                    EmbeddedDocument(
                        content=content,
                        source_type=source_type,
                        source_id=f"{source}#{index}",
                        metadata={
                            "source": source,
                            "chunk_id": index,
                            "start_char": start,
                            "end_char": end,
                            "length": len(content),
                        },
                    )
                )
            if end >= len(text):
                break
            start = max(end - self.overlap, start + 1)

        logger.info("Split %s into %d chunks", source, len(chunks))
        return chunks

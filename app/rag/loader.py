from datetime import datetime
from pathlib import Path
from typing import List, Dict, Union

from loguru import logger
from pypdf import PdfReader


SUPPORTED_EXTENSIONS = (".pdf", ".txt")


class LegalDocumentLoader:
    """
    Reads statutes and contracts into {"text", "metadata"} documents.

    Pages of a PDF are joined into one text so articles spanning a page
    break stay in one piece.
    """

    def __init__(self, documents_dir: Union[str, Path]):
        self.documents_dir = Path(documents_dir)

        if not self.documents_dir.exists():
            raise FileNotFoundError(
                f"Documents directory not found: {self.documents_dir}"
            )

    def load_all(self) -> List[Dict]:
        documents = []

        files = sorted(
            path for path in self.documents_dir.iterdir()
            if path.suffix.lower() in SUPPORTED_EXTENSIONS
        )
        if not files:
            raise ValueError("No PDF or TXT files found in documents directory")

        for path in files:
            documents.append(load_file(path))

        return documents


def load_file(path: Union[str, Path]) -> Dict:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Document not found: {path}")

    suffix = path.suffix.lower()
    metadata = {
        "original_filename": path.name,
        "source": str(path),
        "indexed_at": datetime.now().isoformat(),
    }

    if suffix == ".pdf":
        reader = PdfReader(path)
        pages = [(page.extract_text() or "").strip() for page in reader.pages]
        text = "\n".join(page for page in pages if page)
        metadata["page_count"] = len(reader.pages)
    elif suffix == ".txt":
        text = path.read_text(encoding="utf-8")
    else:
        raise ValueError(f"Unsupported file type: {path.suffix}")

    logger.debug(f"Loaded {path.name}: {len(text)} characters")
    return {"text": text, "metadata": metadata}

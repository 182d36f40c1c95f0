# file_organizer/core/classifier.py

import logging
from enum import Enum
from pathlib import Path, PurePath
from types import MappingProxyType
from typing import Dict, List, Mapping

logger = logging.getLogger(__name__)


class Category(str, Enum):
    """
    The fixed set of labels a file can be sorted into.

    The value of each member doubles as the name of the sub-directory
    the file is moved into.
    """
    IMAGES = "Images"
    DOCUMENTS = "Documents"
    AUDIO = "Audio"
    VIDEO = "Video"
    ARCHIVES = "Archives"
    CODE = "Code"
    EXECUTABLES = "Executables"
    FONTS = "Fonts"
    OTHERS = "Others"


DEFAULT_UNKNOWN_CATEGORY = Category.OTHERS

# The built-in knowledge base: which extensions belong to which category.
# Anything not listed here falls through to DEFAULT_UNKNOWN_CATEGORY.
DEFAULT_MAPPINGS: Dict[Category, List[str]] = {
    Category.IMAGES: [".jpg", ".jpeg", ".png", ".gif", ".bmp", ".svg", ".webp", ".tiff", ".ico", ".raw", ".heic"],
    Category.DOCUMENTS: [".pdf", ".doc", ".docx", ".txt", ".rtf", ".odt", ".xls", ".xlsx", ".ppt", ".pptx", ".csv",
                         ".md", ".epub"],
    Category.AUDIO: [".mp3", ".wav", ".flac", ".aac", ".ogg", ".m4a", ".wma", ".aiff"],
    Category.VIDEO: [".mp4", ".avi", ".mkv", ".mov", ".wmv", ".flv", ".webm", ".m4v", ".mpeg", ".mpg"],
    Category.ARCHIVES: [".zip", ".rar", ".7z", ".tar", ".gz", ".bz2", ".xz", ".iso", ".tgz"],
    Category.CODE: [".go", ".py", ".js", ".html", ".css", ".java", ".cpp", ".c", ".h", ".ts", ".json", ".xml", ".sql",
                    ".sh", ".bat", ".php", ".rb", ".pl"],
    Category.EXECUTABLES: [".exe", ".msi", ".apk", ".app", ".dmg", ".deb", ".rpm", ".bin", ".jar"],
    Category.FONTS: [".ttf", ".otf", ".woff", ".woff2"],
}


def build_extension_table(mappings: Mapping[Category, List[str]]) -> Mapping[str, Category]:
    """
    Flattens a category -> extensions mapping into a read-only
    extension -> category lookup table.

    Extensions are lower-cased so lookups can be case-insensitive. An
    extension claimed by two different categories is rejected, since the
    classifier has no way to choose between them.

    Raises:
        ValueError: if an extension appears under more than one category.
    """
    table: Dict[str, Category] = {}
    for category, extensions in mappings.items():
        for ext in extensions:
            ext_lower = ext.lower()
            existing = table.get(ext_lower)
            if existing is not None and existing != category:
                raise ValueError(
                    f"Extension '{ext_lower}' is mapped to both '{existing.value}' and '{category.value}'.")
            table[ext_lower] = category

    # The table is shared by every worker thread, so we hand out a view that
    # cannot be mutated after construction.
    return MappingProxyType(table)


class Classifier:
    """Maps file names to a Category by looking at their extension."""

    def __init__(self, mappings: Mapping[Category, List[str]] | None = None):
        self.extension_map = build_extension_table(mappings if mappings is not None else DEFAULT_MAPPINGS)
        logger.debug(f"Classifier loaded {len(self.extension_map)} extensions.")

    def classify(self, filename: str) -> Category:
        """
        Returns the category for a file name.

        Only the last suffix is considered ('archive.tar.gz' -> '.gz').
        Names without an extension, dot-files such as '.gitignore' and
        unknown extensions all fall back to Others.
        """
        ext_lower = PurePath(filename).suffix.lower()
        if not ext_lower:
            return DEFAULT_UNKNOWN_CATEGORY
        return self.extension_map.get(ext_lower, DEFAULT_UNKNOWN_CATEGORY)

    def destination_for(self, source_dir: Path, filename: str) -> Path:
        """The category sub-directory of source_dir that filename belongs in."""
        return source_dir / self.classify(filename).value

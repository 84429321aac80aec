import os
from pathlib import Path
from typing import Iterable, List

from docextract.models.batch import BatchConfig, UnitOfWork
from docextract.observability.logging import get_logger

logger = get_logger("document_enumerator")


def _raise_walk_error(error: OSError) -> None:
    raise error


class DocumentEnumerator:
    """Discover documents to process under an input root.

    Traversal is recursive and sorted, so two runs over an unchanged tree
    yield the same units in the same order. Extension matching is
    case-insensitive.
    """

    def __init__(
        self,
        input_root: Path,
        output_root: Path,
        extensions: Iterable[str] = ("pdf",),
        output_extension: str = "json",
    ):
        self.input_root = Path(input_root)
        self.output_root = Path(output_root)
        self.extensions = {ext.lower().lstrip(".") for ext in extensions}
        self.output_extension = output_extension

    @classmethod
    def from_config(cls, config: BatchConfig) -> "DocumentEnumerator":
        return cls(
            input_root=config.input_dir,
            output_root=config.output_dir,
            extensions=config.extensions,
            output_extension=config.output_extension,
        )

    def matches(self, path: Path) -> bool:
        return path.suffix.lower().lstrip(".") in self.extensions

    def enumerate(self) -> List[UnitOfWork]:
        """Walk the input root and return one unit per matching file.

        Raises:
            FileNotFoundError: If the input root does not exist
            NotADirectoryError: If the input root is a file
            OSError: If a directory in the tree cannot be read
        """
        if not self.input_root.exists():
            raise FileNotFoundError(f"Input directory not found: {self.input_root}")
        if not self.input_root.is_dir():
            raise NotADirectoryError(f"Input path is not a directory: {self.input_root}")

        units: List[UnitOfWork] = []
        for dirpath, dirnames, filenames in os.walk(
            self.input_root, onerror=_raise_walk_error
        ):
            dirnames.sort()
            for name in sorted(filenames):
                path = Path(dirpath) / name
                if not self.matches(path):
                    continue
                units.append(
                    UnitOfWork(
                        source_path=path,
                        input_root=self.input_root,
                        output_root=self.output_root,
                        output_extension=self.output_extension,
                    )
                )

        logger.info(
            "documents_discovered",
            input_root=str(self.input_root),
            extensions=sorted(self.extensions),
            count=len(units),
        )
        return units

"""Reading and parsing of the XML configuration document."""

import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from .errors import ErrorKind, LoadError


@dataclass
class Diagnostics:
    """Collects parser messages for a single parse call."""

    messages: list[str] = field(default_factory=list)

    def report(self, message: str) -> None:
        self.messages.append(message)

    def __bool__(self) -> bool:
        return bool(self.messages)

    def __str__(self) -> str:
        return "\n".join(self.messages)


@dataclass(frozen=True)
class RawDocument:
    """Parsed configuration tree plus the file it came from.

    The tree is never modified after parsing, so it can be read from several
    threads at once.

    Attributes:
        root: Root element of the document
        path: Absolute path of the configuration file
    """

    root: ET.Element
    path: str

    @property
    def base_dir(self) -> str:
        """Directory relative paths in the document are anchored at."""
        return os.path.dirname(self.path)


def parse_document(contents: bytes, diagnostics: Diagnostics) -> ET.Element | None:
    """Parse XML content, reporting problems to ``diagnostics``.

    Returns:
        The root element, or None if the content is not well-formed
    """
    parser = ET.XMLParser()
    try:
        parser.feed(contents)
        return parser.close()
    except ET.ParseError as e:
        diagnostics.report(str(e))
    return None


def load_document(path: str | os.PathLike) -> RawDocument:
    """Load the configuration file.

    Args:
        path: Path to the XML configuration file

    Returns:
        The parsed document

    Raises:
        LoadError: If the file cannot be read or is not well-formed XML
    """
    filename = os.path.abspath(os.fspath(path))

    try:
        with open(filename, "rb") as f:
            contents = f.read()
    except OSError as e:
        raise LoadError(
            f'Could not read "{filename}".', ErrorKind.UNREADABLE, filename, str(e)
        ) from e

    diagnostics = Diagnostics()
    root = parse_document(contents, diagnostics)

    if root is None or diagnostics:
        details = str(diagnostics)
        raise LoadError(
            f'Error loading file "{filename}".\n{details}',
            ErrorKind.MALFORMED,
            filename,
            details,
        )

    return RawDocument(root=root, path=filename)

"""Abstract document sink.

A sink is a write-only, append-only document builder. Callers open a
structure, write into it, and close it again, strictly in order::

    sink.paragraph()
    sink.text("Hello")
    sink.paragraph_end()

Rendering (HTML, XML, plain text...) is left to concrete implementations.
"""

from abc import ABC, abstractmethod


class Sink(ABC):
    """Structured document writer used by the report generators."""

    # ------------------------------------------------------------------
    # Document structure
    # ------------------------------------------------------------------

    @abstractmethod
    def head(self) -> None: ...

    @abstractmethod
    def head_end(self) -> None: ...

    @abstractmethod
    def title(self) -> None: ...

    @abstractmethod
    def title_end(self) -> None: ...

    @abstractmethod
    def body(self) -> None: ...

    @abstractmethod
    def body_end(self) -> None: ...

    @abstractmethod
    def section(self) -> None: ...

    @abstractmethod
    def section_end(self) -> None: ...

    @abstractmethod
    def section_title(self) -> None: ...

    @abstractmethod
    def section_title_end(self) -> None: ...

    @abstractmethod
    def paragraph(self) -> None: ...

    @abstractmethod
    def paragraph_end(self) -> None: ...

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    @abstractmethod
    def table(self) -> None: ...

    @abstractmethod
    def table_end(self) -> None: ...

    @abstractmethod
    def table_row(self) -> None: ...

    @abstractmethod
    def table_row_end(self) -> None: ...

    @abstractmethod
    def table_header_cell(self) -> None: ...

    @abstractmethod
    def table_header_cell_end(self) -> None: ...

    @abstractmethod
    def table_cell(self, colspan: int | None = None) -> None:
        """Open a data cell, spanning *colspan* columns when given."""

    @abstractmethod
    def table_cell_end(self) -> None: ...

    # ------------------------------------------------------------------
    # Inline content
    # ------------------------------------------------------------------

    @abstractmethod
    def link(self, href: str) -> None: ...

    @abstractmethod
    def link_end(self) -> None: ...

    @abstractmethod
    def verbatim(self) -> None:
        """Open a preformatted block. Text written inside is kept as-is."""

    @abstractmethod
    def verbatim_end(self) -> None: ...

    @abstractmethod
    def text(self, text: str) -> None:
        """Write *text*. Escaping is the sink's job."""

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @abstractmethod
    def flush(self) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

"""Domain-specific exceptions for retail_ingest.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from RetailIngestError for easy catching.
"""


class RetailIngestError(Exception):
    """Base exception for all retail_ingest errors.

    Users can catch this exception to handle any conversion, configuration
    or archive error raised by the package.
    """

    pass


class ConfigError(RetailIngestError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Unknown side-table names are passed as generation options
    - No spreadsheet files are found under an input directory
    - Command line values cannot be interpreted
    """

    pass


class ConversionError(RetailIngestError):
    """Raised when converting a single spreadsheet file fails.

    A conversion error aborts processing of that file only; sibling files
    in a batch are unaffected.
    """

    pass


class WorkbookReadError(ConversionError):
    """Raised when the input bytes cannot be parsed as a spreadsheet."""

    pass


class UnknownFormatError(ConversionError):
    """Raised when no file type fingerprint matches any sheet."""

    pass


class MissingSheetError(ConversionError):
    """Raised when the detected sheet is not present in the workbook."""

    pass


class HeaderNotFoundError(ConversionError):
    """Raised when the header row cannot be located in the detected sheet."""

    pass


class UnsupportedFileTypeError(ConversionError):
    """Raised for file types that are recognized but have no extractor (STOCK, PRICE)."""

    pass


class ArchiveError(RetailIngestError):
    """Raised when the output archive cannot be assembled or written.

    Tables extracted before the failure remain valid; only the archive is lost.
    """

    pass

PDF_MAGIC = b"%PDF"


def validate_pdf(data: bytes | bytearray | memoryview | None) -> bool:
    """Cheap header check run before extraction. Does not prove the PDF is well-formed."""
    if not data:
        return False
    return bytes(data[:4]) == PDF_MAGIC


class PDFFormatValidator:
    """Format check for the document profile."""

    def validate(self, data: bytes | bytearray | memoryview | None) -> bool:
        return validate_pdf(data)

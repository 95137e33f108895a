from __future__ import annotations


class FakeBackend:
    """Stands in for an OCR or PDF engine."""

    def __init__(self, name: str, text: str = "", error: Exception | None = None) -> None:
        self.name = name
        self.text = text
        self.error = error
        self.calls: list[bytes] = []

    def extract_text(self, data: bytes) -> str:
        self.calls.append(data)
        if self.error is not None:
            raise self.error
        return self.text

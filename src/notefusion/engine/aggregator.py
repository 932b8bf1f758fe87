from collections.abc import Callable


class StreamAggregator:
    """Append-only buffer of everything a stream has delivered.

    Each ``append`` triggers ``on_append`` once, however long the chunk.
    """

    def __init__(self, on_append: Callable[[], None] | None = None) -> None:
        self._parts: list[str] = []
        self._size = 0
        self._chunks = 0
        self.on_append = on_append

    def append(self, text: str) -> None:
        self._parts.append(text)
        self._size += len(text)
        self._chunks += 1
        if self.on_append is not None:
            self.on_append()

    @property
    def raw(self) -> str:
        """The raw buffer, directives included."""
        if len(self._parts) > 1:
            self._parts = ["".join(self._parts)]
        return self._parts[0] if self._parts else ""

    @property
    def chunk_count(self) -> int:
        return self._chunks

    def __len__(self) -> int:
        return self._size

from __future__ import annotations

from typing import Protocol

from rich.console import ConsoleRenderable


class ConsoleLike(Protocol):
    def print(self, msg: ConsoleRenderable | str | None = None) -> None: ...

    def info(self, msg: str) -> None: ...

    def warn(self, msg: str) -> None: ...

    def error(self, msg: str) -> None: ...

    def ok(self, msg: str) -> None: ...

    def block(self, title: str, body: str, empty: str = "No logs available") -> None: ...


class StdoutConsole:
    """Plain-text console.

    Lets the build and deploy pipeline run without the Rich CLI console,
    e.g. when driven from a script.
    """

    def print(self, msg: ConsoleRenderable | str | None = None) -> None:
        print("" if msg is None else msg)

    def info(self, msg: str) -> None:
        print(msg)

    def warn(self, msg: str) -> None:
        print(f"Warning: {msg}")

    def error(self, msg: str) -> None:
        print(msg)

    def ok(self, msg: str) -> None:
        print(msg)

    def block(self, title: str, body: str, empty: str = "No logs available") -> None:
        print(f"\n{title}")
        print("=" * 16)
        print(body if body.strip() else empty)
        print("=" * 16)


def coalesce_console(console: ConsoleLike | None) -> ConsoleLike:
    return console if console is not None else StdoutConsole()

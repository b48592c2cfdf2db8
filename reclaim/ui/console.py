"""reclaim console - themed console singleton with semantic message methods."""

from typing import Optional

from rich.console import Console as RichConsole

from .theme import RECLAIM_THEME, SYMBOLS


class ReclaimConsole:
    """Themed console with semantic message methods."""

    _instance: Optional["ReclaimConsole"] = None

    def __new__(cls) -> "ReclaimConsole":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._console = RichConsole(theme=RECLAIM_THEME)
            cls._instance._stderr = RichConsole(theme=RECLAIM_THEME, stderr=True)
        return cls._instance

    @property
    def rich(self) -> RichConsole:
        return self._console

    def print(self, *args, **kwargs) -> None:
        self._console.print(*args, **kwargs)

    def success(self, message: str) -> None:
        self._console.print(f"[success]{SYMBOLS['success']} {message}[/]")

    def error(self, message: str, details: Optional[str] = None) -> None:
        self._stderr.print(f"[error]{SYMBOLS['error']} {message}[/]")
        if details:
            self._stderr.print(f"  [secondary]{details}[/]")

    def warning(self, message: str) -> None:
        self._console.print(f"[warning]{SYMBOLS['warning']}  {message}[/]")

    def info(self, message: str) -> None:
        self._console.print(f"[info]{SYMBOLS['info']} {message}[/]")

    def blank(self) -> None:
        self._console.print()


console = ReclaimConsole()

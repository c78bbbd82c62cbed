from .bootstrap import TerminalBootstrap

__all__ = ["TerminalBootstrap"]

from __future__ import annotations

from typing import Protocol

from loguru import logger

from localization import Translator, translator as default_translator

LEVELS = ("success", "info", "warning", "danger")


class Notifier(Protocol):
    """Capability for surfacing messages to the user."""

    def show(self, level: str, message: str) -> None: ...


class LoggingNotifier:
    """Notifier that translates messages and writes them to the log."""

    def __init__(self, translator: Translator | None = None) -> None:
        self.translator = translator or default_translator

    def show(self, level: str, message: str) -> None:
        if level not in LEVELS:
            raise ValueError(f"unknown notification level: {level}")
        text = self.translator.gettext(message)
        if level == "danger":
            logger.error(text)
        elif level == "warning":
            logger.warning(text)
        else:
            logger.info(text)

# vine_ui/app.py
from __future__ import annotations

import logging
import sys
from typing import Optional

from PyQt5.QtWidgets import QApplication

from .main_window import AppShell
from .persistence import load_config
from .routing import NavigationRouter, tab_positions
from .services import build_services
from .widgets.geo_gate import GeoBlockingGate


LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
LOG_DATEFMT = "%H:%M:%S"

logger = logging.getLogger("vine_ui.app")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT, datefmt=LOG_DATEFMT)


def run_app(config_dir: Optional[str] = None) -> int:
    app = QApplication(sys.argv)

    cfg = load_config(config_dir)
    configure_logging(cfg.log_level)
    logger.info("Config dir: %s", cfg.config_dir)

    services = build_services(cfg)

    router = NavigationRouter("/home/0", memory=tab_positions)
    shell = AppShell(router, current_npub=cfg.current_npub, memory=tab_positions, profiles=services.profiles)

    gate = GeoBlockingGate(services.geo, shell)
    gate.setWindowTitle("diVine")
    gate.resize(shell.size())
    gate.show()

    return app.exec_()

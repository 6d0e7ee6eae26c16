# -*- coding: utf-8 -*-
from __future__ import annotations
import logging
import os
from typing import Optional

from torch.utils.tensorboard import SummaryWriter

LOGGER_NAME = "PolicySimLogger"


class LoggerManager:
    """
    统一管理 logging 与 tensorboard writer。
    每个 log_dir 至多一个文件 handler（同目录重建时替换旧的），控制台 handler 全进程共享一个；
    后建的 manager 不会摘掉先建者的 run.log；共享同一个命名 logger，各文件都收到全部消息。
    """
    def __init__(self, log_dir: str = "logs/", use_tensorboard: bool = True):
        os.makedirs(log_dir, exist_ok=True)
        self.log_dir = os.path.abspath(log_dir)

        # ---- Python logging ----
        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(logging.INFO)
        for h in list(self.logger.handlers):
            if getattr(h, "_policy_sim_dir", None) == self.log_dir:
                self.logger.removeHandler(h)
                h.close()

        fmt = logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(module)s - %(funcName)s: %(message)s",
            datefmt="%m/%d/%Y %I:%M:%S %p",
        )

        file_handler = logging.FileHandler(os.path.join(log_dir, "run.log"), mode="w", encoding="utf-8")
        file_handler.setFormatter(fmt)
        file_handler._policy_sim_dir = self.log_dir
        self.logger.addHandler(file_handler)
        self._handlers = [file_handler]

        if not any(getattr(h, "_policy_sim_console", False) for h in self.logger.handlers):
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(fmt)
            console_handler._policy_sim_console = True
            self.logger.addHandler(console_handler)

        # ---- Tensorboard Writer ----
        self.writer: Optional[SummaryWriter] = SummaryWriter(log_dir) if use_tensorboard else None

    def log(self, msg: str):
        self.logger.info(msg)

    def info(self, msg: str):
        self.logger.info(msg)

    def warning(self, msg: str):
        self.logger.warning(msg)

    def debug(self, msg: str):
        self.logger.debug(msg)

    def error(self, msg: str):
        self.logger.error(msg)

    def add_scalar(self, tag: str, value: float, step: int):
        if self.writer is not None:
            self.writer.add_scalar(tag, value, step)

    def close(self):
        if self.writer is not None:
            self.writer.close()
            self.writer = None
        for h in self._handlers:
            self.logger.removeHandler(h)
            h.close()
        self._handlers = []

import os
import time
import threading
from datetime import datetime

class Logger:
    def __init__(self, thread_name="proxy", output_levels=("INFO", "WARN", "ERROR"), log_to_file=True, logs_folder="logs", parent_logger=None):
        self.thread_name = thread_name
        self.output_levels = set(level.upper() for level in output_levels)
        self.log_to_file = log_to_file
        self.logs_folder = logs_folder
        self.parent_logger = parent_logger  # Root logger owns the file and the printer
        self.log_file = None
        self._file = None
        self.printer = print
        self._lock = threading.Lock()

        if self.parent_logger is None and self.log_to_file:
            self._setup_logs_folder()

    def _setup_logs_folder(self):
        if not os.path.exists(self.logs_folder):
            os.makedirs(self.logs_folder)

        latest_log = os.path.join(self.logs_folder, "latest.log")

        if os.path.exists(latest_log):
            date_str = datetime.now().strftime("%Y-%m-%d")
            idx = 1
            while True:
                rotated_log = os.path.join(self.logs_folder, f"proxy-{date_str}-{idx}.log")
                if not os.path.exists(rotated_log):
                    os.rename(latest_log, rotated_log)
                    break
                idx += 1

        self.log_file = latest_log
        # Line buffered, held open until close()
        self._file = open(self.log_file, 'w', encoding='utf-8', buffering=1)

    @property
    def root(self) -> "Logger":
        return self.parent_logger or self

    def _current_time(self):
        return time.strftime("%H:%M:%S")

    def _format_message(self, level, *args):
        timestamp = self._current_time()
        return f"[{timestamp}] [{self.thread_name}/{level.upper()}]: " + ' '.join(str(arg) for arg in args)

    def _write(self, message):
        root = self.root
        with root._lock:
            if root._file is not None:
                root._file.write(message + '\n')

    def enabled(self, level) -> bool:
        return level.upper() in self.output_levels or "ALL" in self.output_levels

    def log(self, level, *args):
        level = level.upper()
        message = self._format_message(level, *args)

        # Console: filtered by this logger's levels. File: everything.
        if self.enabled(level):
            self.root.printer(message)
        self._write(message)

    def info(self, *args):
        self.log("INFO", *args)

    def warn(self, *args):
        self.log("WARN", *args)

    def error(self, *args):
        self.log("ERROR", *args)

    def debug(self, *args):
        self.log("DEBUG", *args)

    def set_printer(self, printer):
        """Routes console output through e.g. the interactive prompt."""
        self.root.printer = printer

    def close(self):
        root = self.root
        with root._lock:
            if root._file is not None:
                root._file.close()
                root._file = None

    def create_sub_logger(self, thread_name, output_levels=None):
        return Logger(
            thread_name=thread_name,
            output_levels=output_levels or self.output_levels,
            log_to_file=self.log_to_file,
            logs_folder=self.logs_folder,
            parent_logger=self.root
        )

logger = Logger(thread_name="main", output_levels=("INFO", "WARN", "ERROR"), log_to_file=False)

import asyncio
import json
import os
import sys
import threading
from enum import IntEnum
from utils.timestamp import format_timestamp


class LogLevel(IntEnum):
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40


_root = None
_root_lock = threading.Lock()


class StructuredLogger:
    """One JSON record per line on stderr."""

    def __init__(self, level=LogLevel.INFO, component=None, stream=None):
        self.level = level
        self.component = component
        self.stream = stream

    def child(self, component):
        return StructuredLogger(self.level, component, self.stream)

    def _emit(self, level, message, error=None, **kwargs):
        if level < self.level:
            return
        record = {"timestamp": format_timestamp(), "level": level.name, "msg": message}
        if self.component:
            record["component"] = self.component
        record.update(kwargs)
        if error is not None:
            record["err"] = str(error)
        try:
            print(json.dumps(record, default=str), file=self.stream or sys.stderr, flush=True)
        except (OSError, ValueError):
            # closed stream during interpreter shutdown
            pass

    def debug(self, message, **kwargs):
        self._emit(LogLevel.DEBUG, message, **kwargs)

    def info(self, message, **kwargs):
        self._emit(LogLevel.INFO, message, **kwargs)

    def warn(self, message, error=None, **kwargs):
        self._emit(LogLevel.WARN, message, error, **kwargs)

    def error(self, message, error=None, **kwargs):
        self._emit(LogLevel.ERROR, message, error, **kwargs)

    @classmethod
    def configure(cls, min_level=LogLevel.INFO):
        global _root
        with _root_lock:
            _root = cls(min_level)


def get_logger(component=None):
    global _root
    if _root is None:
        with _root_lock:
            if _root is None:
                _root = StructuredLogger()
    return _root.child(component) if component else _root


class AsyncFileLogger:
    """Bounded queue of event records drained to a JSON-lines file."""

    def __init__(self, file_path, queue_size=1000):
        self.path = file_path
        self.queue = asyncio.Queue(maxsize=queue_size)
        self._task = None
        self._stop = asyncio.Event()
        self._missing_reported = False
        self.written = 0
        self.dropped = 0

    def try_log(self, kind, data):
        try:
            self.queue.put_nowait({"timestamp": format_timestamp(), "kind": kind, "data": data})
        except asyncio.QueueFull:
            self.dropped += 1
            return False
        return True

    async def start(self):
        if self._task:
            return
        dir_path = os.path.dirname(self.path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)
        self._stop.clear()
        self._task = asyncio.create_task(self._run())

    async def stop(self):
        self._stop.set()
        if self._task:
            await self._task
            self._task = None

    def get_stats(self):
        return {
            "queued": self.queue.qsize(),
            "written": self.written,
            "dropped": self.dropped,
        }

    def _write(self, file, record):
        file.write(json.dumps(record, default=str) + "\n")
        self.written += 1

    async def _next_record(self):
        try:
            return await asyncio.wait_for(self.queue.get(), timeout=0.5)
        except asyncio.TimeoutError:
            return None

    async def _run(self):
        with open(self.path, "a") as file:
            while not self._stop.is_set():
                record = await self._next_record()
                if record is None:
                    continue
                if not os.path.exists(self.path):
                    # log file removed underneath us: keep draining so the queue never fills
                    if not self._missing_reported:
                        get_logger("file-log").warn("log file deleted, records dropped", path=self.path)
                        self._missing_reported = True
                    self.dropped += 1
                    continue
                try:
                    self._write(file, record)
                    file.flush()
                except OSError as exc:
                    self.dropped += 1
                    get_logger("file-log").warn("log write failed", error=exc, path=self.path)
            while not self.queue.empty():
                self._write(file, self.queue.get_nowait())
            file.flush()

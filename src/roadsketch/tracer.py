"""
Hierarchical runtime tracing for the road sketch engine.

Nested spans with timing plus one-off events, written to stderr and
optionally to a file. The engine stays silent until the tracer is enabled.
"""

import functools
import json
import sys
import time
from contextlib import contextmanager
from datetime import datetime


class TracerConfig:
    """Output settings for the tracer."""

    def __init__(self):
        self.enabled = False
        self.level = "INFO"
        self.file_path = None
        self.json_output = False
        self._file_handle = None

    def configure(self, enabled=False, level="INFO", file_path=None, json_output=False):
        """Apply settings, reopening the trace file if one is requested."""
        self.enabled = enabled
        self.level = level.upper()
        self.file_path = file_path
        self.json_output = json_output

        self.close()
        if file_path and enabled:
            self._file_handle = open(file_path, "w", encoding="utf-8")

    def close(self):
        """Close the trace file if open."""
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None


class Tracer:
    """
    Span-based tracer.

    Spans nest; each line is indented by the current depth so a path
    insertion reads as a tree of split decisions.
    """

    LEVELS = {"ERROR": 0, "WARN": 1, "INFO": 2, "DEBUG": 3}

    def __init__(self):
        self.config = TracerConfig()
        self._depth = 0
        self._span_stack = []

    def is_enabled_for(self, level):
        """True if a line at this level would be written."""
        if not self.config.enabled:
            return False
        return self.LEVELS.get(level, 2) <= self.LEVELS.get(self.config.level, 2)

    def _timestamp(self):
        now = datetime.now()
        return now.strftime("%H:%M:%S.") + f"{now.microsecond // 1000:03d}"

    def _write(self, level, module, func, message, meta=None):
        if not self.is_enabled_for(level):
            return

        timestamp = self._timestamp()
        location = f"{module}:{func}" if func else module
        text_line = f"{timestamp} {level:<5} {'  ' * self._depth}{location}  {message}"
        lines = [text_line]

        if self.config.json_output:
            lines.append(json.dumps({
                "timestamp": timestamp,
                "level": level,
                "depth": self._depth,
                "module": module,
                "function": func,
                "message": message,
                "meta": {k: summarize(v) for k, v in (meta or {}).items()},
            }))

        for line in lines:
            print(line, file=sys.stderr)
            if self.config._file_handle:
                self.config._file_handle.write(line + "\n")
                self.config._file_handle.flush()

    @contextmanager
    def span(self, name, module="", **meta):
        """
        Context manager for a traced span.

        Logs start and end with elapsed time; an exception is logged at
        ERROR and re-raised.
        """
        if not self.config.enabled:
            yield
            return

        start_time = time.perf_counter()
        meta_str = " ".join(f"{k}={summarize(v)}" for k, v in meta.items())
        self._write("INFO", module, name, f"start {meta_str}".strip())
        self._depth += 1
        self._span_stack.append((name, module))

        try:
            yield
        except Exception as e:
            elapsed = (time.perf_counter() - start_time) * 1000
            self._depth -= 1
            self._span_stack.pop()
            self._write("ERROR", module, name, f"failed dt={elapsed:.1f}ms error={type(e).__name__}: {str(e)[:100]}")
            raise

        elapsed = (time.perf_counter() - start_time) * 1000
        self._depth -= 1
        self._span_stack.pop()
        self._write("INFO", module, name, f"end ok dt={elapsed:.1f}ms")

    def event(self, message, level="INFO", **meta):
        """Log a one-off event within the current span."""
        if not self.is_enabled_for(level):
            return

        func, module = self._span_stack[-1] if self._span_stack else ("", "")
        meta_str = " ".join(f"{k}={summarize(v)}" for k, v in meta.items())
        self._write(level, module, func, f"{message} {meta_str}".strip(), meta)


def summarize(obj, max_len=200):
    """
    Summarize an object for a trace line.

    Never raises and never exceeds max_len characters. Knows about numpy
    arrays, spatial and networkx graphs, pydantic models and shapely
    geometries.
    """
    try:
        result = _summarize_impl(obj)
    except Exception:
        result = f"<{type(obj).__name__}>"
    if len(result) > max_len:
        return result[:max_len - 3] + "..."
    return result


def _summarize_impl(obj):
    if obj is None:
        return "None"

    type_name = type(obj).__name__

    import numpy as np
    if isinstance(obj, np.ndarray):
        if obj.ndim == 1 and obj.size <= 3:
            return "(" + ", ".join(f"{v:.4f}" for v in obj) + ")"
        shape_str = "x".join(str(s) for s in obj.shape)
        return f"ndarray({obj.dtype},{shape_str})"

    from shapely.geometry.base import BaseGeometry
    if isinstance(obj, BaseGeometry):
        bounds_str = ",".join(f"{b:.1f}" for b in obj.bounds)
        return f"{obj.geom_type}(bounds=[{bounds_str}])"

    # SpatialGraph and networkx graphs share this interface
    if hasattr(obj, "number_of_nodes") and hasattr(obj, "number_of_edges"):
        return f"{type_name}(nodes={obj.number_of_nodes()},edges={obj.number_of_edges()})"

    from pydantic import BaseModel
    if isinstance(obj, BaseModel):
        fields = list(type(obj).model_fields.keys())[:3]
        return f"{type_name}(fields={fields}...)"

    if isinstance(obj, str):
        if len(obj) > 50:
            return f"str(len={len(obj)})"
        return repr(obj)

    if isinstance(obj, (list, tuple, set, frozenset)):
        if len(obj) <= 4 and all(isinstance(v, (int, float)) for v in obj):
            return repr(obj)
        return f"{type_name}(len={len(obj)})"

    if isinstance(obj, dict):
        keys_str = ",".join(str(k) for k in list(obj.keys())[:5])
        return f"dict(len={len(obj)},keys=[{keys_str}])"

    if isinstance(obj, (int, float)):
        return str(obj)

    return f"<{type_name}>"


def trace(label=None):
    """
    Decorator wrapping a function in a span.

    Costs one attribute check when tracing is disabled.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not _tracer.config.enabled:
                return func(*args, **kwargs)

            module = func.__module__.split(".")[-1] if func.__module__ else ""
            with _tracer.span(label or func.__name__, module=module):
                return func(*args, **kwargs)

        return wrapper
    return decorator


_tracer = Tracer()


def get_tracer():
    """Get the global tracer instance."""
    return _tracer


def configure_tracer(enabled=False, level="INFO", file_path=None, json_output=False):
    """Configure the global tracer."""
    _tracer.config.configure(
        enabled=enabled,
        level=level,
        file_path=file_path,
        json_output=json_output,
    )

"""Simple, minimal tracing decorator for the page agent."""

from __future__ import annotations

from functools import wraps
from inspect import iscoroutinefunction, signature
from typing import Any, Callable, Optional
import json
import time


def observe(_fn: Optional[Callable[..., Any]] = None, *, llm: bool = False) -> Callable[..., Any]:
    """Minimal tracing decorator.

    Usage:
        @observe
        async def run(): ...

        @observe(llm=True)
        async def complete(messages): ...

    - Auto-names spans from function module.qualname
    - Records timing, exceptions, basic I/O
    - Works for plain functions and coroutine functions
    - No-op if OpenTelemetry unavailable
    """

    def _decorate(fn: Callable[..., Any]) -> Callable[..., Any]:
        module = getattr(fn, "__module__", "") or ""
        qualname = getattr(fn, "__qualname__", fn.__name__)
        span_name = f"{module}.{qualname}" if module else qualname

        if iscoroutinefunction(fn):
            @wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                tracer = _get_tracer()
                if tracer is None:
                    return await fn(*args, **kwargs)

                start_time = time.perf_counter()
                with tracer.start_as_current_span(span_name) as span:
                    try:
                        _capture_input(span, fn, args, kwargs, llm)
                        result = await fn(*args, **kwargs)
                        _capture_output(span, result)
                        return result
                    except Exception as e:
                        _record_error(span, e)
                        raise
                    finally:
                        span.set_attribute("duration_ms", int((time.perf_counter() - start_time) * 1000))

            return async_wrapper

        @wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            tracer = _get_tracer()
            if tracer is None:
                return fn(*args, **kwargs)

            start_time = time.perf_counter()
            with tracer.start_as_current_span(span_name) as span:
                try:
                    _capture_input(span, fn, args, kwargs, llm)
                    result = fn(*args, **kwargs)
                    _capture_output(span, result)
                    return result
                except Exception as e:
                    _record_error(span, e)
                    raise
                finally:
                    span.set_attribute("duration_ms", int((time.perf_counter() - start_time) * 1000))

        return wrapper

    # Support both @observe and @observe() forms
    if callable(_fn):
        return _decorate(_fn)
    return _decorate


def _get_tracer() -> Any:
    try:
        from opentelemetry import trace
    except ImportError:
        return None
    return trace.get_tracer("page-agent")


def _record_error(span: Any, exc: Exception) -> None:
    from opentelemetry import trace

    span.record_exception(exc)
    span.set_status(trace.Status(trace.StatusCode.ERROR))


def _capture_input(span: Any, fn: Callable, args: tuple, kwargs: dict, llm: bool) -> None:
    """Capture function inputs as a JSON preview."""
    bound = signature(fn).bind_partial(*args, **kwargs)

    # LLM path: capture messages only (longer cap for prompt visibility)
    if llm:
        messages = bound.arguments.get("messages")
        if messages:
            msg_str = json.dumps(messages, ensure_ascii=False, separators=(",", ":"), default=str)
            span.set_attribute("input", msg_str[:12288])
        return

    inputs = {name: value for name, value in bound.arguments.items() if name not in {"self", "cls"}}
    input_str = json.dumps(inputs, ensure_ascii=False, separators=(",", ":"), default=repr)
    span.set_attribute("input", input_str[:6144] + ("..." if len(input_str) > 6144 else ""))


def _capture_output(span: Any, result: Any) -> None:
    """Capture outputs; ReasoningResult-like objects get structured fields."""
    if hasattr(result, "final_answer"):
        span.set_attribute("output", str(result.final_answer or getattr(result, "transcript", ""))[:8192])
        if hasattr(result, "success"):
            span.set_attribute("result_success", bool(result.success))
        if hasattr(result, "iterations"):
            span.set_attribute("total_iterations", int(result.iterations))
    else:
        span.set_attribute("output", str(result)[:8192])

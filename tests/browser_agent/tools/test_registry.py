import pytest

from browser_agent.tools.browser import BROWSER_TOOLS, default_registry, stub_registry
from browser_agent.tools.exceptions import DuplicateToolError, ToolNotFoundError
from browser_agent.tools.registry import Capability, ExecutionKind, ToolRegistry


def test_resolve_returns_capability():
    registry = default_registry()
    capability = registry.resolve("search_dom")
    assert capability.name == "search_dom"
    assert capability.is_remote
    assert capability.argument == "keyword"


def test_resolve_unknown_tool_raises_not_found():
    registry = default_registry()
    with pytest.raises(ToolNotFoundError) as exc:
        registry.resolve("unknown_tool")
    assert str(exc.value) == 'Tool "unknown_tool" not found'
    assert exc.value.tool_name == "unknown_tool"


def test_duplicate_names_fail_at_construction():
    with pytest.raises(DuplicateToolError):
        ToolRegistry([Capability("scrape_table", "a"), Capability("scrape_table", "b")])


def test_registry_is_read_only():
    registry = default_registry()
    with pytest.raises(TypeError):
        registry._tools["extra"] = Capability("extra", "x")  # type: ignore[index]
    assert len(registry) == len(BROWSER_TOOLS)
    assert "extra" not in registry


def test_local_capability_requires_handler():
    with pytest.raises(ValueError):
        Capability("echo", "echo input", kind=ExecutionKind.LOCAL)


def test_remote_capability_rejects_handler():
    with pytest.raises(ValueError):
        Capability("echo", "echo input", handler=lambda arg: arg or "")


def test_describe_lists_signatures():
    listing = default_registry().describe()
    assert "- extract_prices: Extract all prices from the current page" in listing
    assert "- search_dom(keyword): Find text matching a pattern and return context" in listing


def test_stub_registry_acknowledges_requests():
    registry = stub_registry()
    capability = registry.resolve("search_dom")
    assert capability.kind is ExecutionKind.STUB
    assert capability.handler("contact") == 'search_dom for "contact" requested - waiting for page execution'
    assert registry.resolve("scrape_table").handler(None) == "scrape_table requested - waiting for page execution"

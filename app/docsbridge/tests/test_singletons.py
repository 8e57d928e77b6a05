"""Tests for the singleton registry."""

from __future__ import annotations

from app.docsbridge.util.singletons import _reset_fns, register_singleton, reset_all_singletons


class TestSingletonRegistry:
    def setup_method(self) -> None:
        self._original = dict(_reset_fns)

    def teardown_method(self) -> None:
        _reset_fns.clear()
        _reset_fns.update(self._original)

    def test_register_adds_function(self) -> None:
        def _reset() -> None:
            pass

        register_singleton("test-a", _reset)
        assert _reset_fns["test-a"] is _reset

    def test_reregister_replaces(self) -> None:
        calls: list[int] = []
        register_singleton("test-b", lambda: calls.append(1))
        register_singleton("test-b", lambda: calls.append(2))
        reset_all_singletons()
        assert calls == [2]

    def test_reset_all_returns_names(self) -> None:
        register_singleton("test-c", lambda: None)
        names = reset_all_singletons()
        assert "test-c" in names
        assert "settings" in names

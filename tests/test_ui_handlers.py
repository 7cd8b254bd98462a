"""
Tests that view actions turn core failures into message boxes.

The views need a display to construct, so the handlers are checked from source.
"""
import ast
import os
import pytest

VIEWS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
                         "aegis_suite", "ui", "views")


def _method(module, cls_name, name):
    with open(os.path.join(VIEWS_DIR, module), encoding="utf-8") as f:
        tree = ast.parse(f.read())
    cls = next(n for n in tree.body if isinstance(n, ast.ClassDef) and n.name == cls_name)
    return next(n for n in cls.body if isinstance(n, ast.FunctionDef) and n.name == name)


def _caught(func):
    out = set()
    for t in ast.walk(func):
        if isinstance(t, ast.ExceptHandler) and t.type is not None:
            names = t.type.elts if isinstance(t.type, ast.Tuple) else [t.type]
            out.update(n.id for n in names if isinstance(n, ast.Name))
    return out


@pytest.mark.unit
class TestViewErrorHandling:
    """Tests for the except clauses around core calls."""

    @pytest.mark.parametrize("module,cls_name,name", [
        ("settings_view.py", "SettingsView", "on_restore"),
        ("history_view.py", "HistoryView", "_export_pdf"),
        ("history_view.py", "HistoryView", "on_export_history"),
        ("history_view.py", "HistoryView", "on_export_csv"),
        ("recommendation_view.py", "RecommendationView", "on_save"),
        ("recommendation_view.py", "RecommendationView", "on_next"),
    ])
    def test_domain_and_os_errors_caught(self, module, cls_name, name):
        assert {"AegisError", "OSError"} <= _caught(_method(module, cls_name, name))

    def test_settings_save_checks_colours(self):
        func = _method("settings_view.py", "SettingsView", "on_save")
        called = {n.func.id for n in ast.walk(func) if isinstance(n, ast.Call) and isinstance(n.func, ast.Name)}
        assert "invalid_colors" in called

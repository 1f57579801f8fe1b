"""Tests for knead.dev.error_page — dev build error and not-found pages."""

from __future__ import annotations

from pathlib import Path

from knead._errors import CompileError, ConfigError, TemplateError
from knead.dev.error_page import render_error_page, render_not_found_page


class TestRenderErrorPage:
    """render_error_page — every error listed with source context."""

    def test_lists_all_errors(self, make_config) -> None:
        errors = [
            TemplateError("/a", "first problem"),
            ConfigError("second problem"),
        ]
        page = render_error_page(errors, make_config(), path="/a")
        assert "2 errors" in page
        assert "first problem" in page
        assert "second problem" in page
        assert "TemplateError" in page
        assert "ConfigError" in page

    def test_template_source_context(self, tmp_path: Path, make_config, write_templates) -> None:
        write_templates(tmp_path, page="line one\nline two\n{{ broken }}\nline four\n")
        error = TemplateError("/", "undefined 'broken'", template="page.html", lineno=3)
        page = render_error_page([error], make_config(), path="/")
        assert '<span class="line error-line"><span class="num">3</span>{{ broken }}' in page
        assert "line one" in page
        assert "page.html:3" in page

    def test_style_source_context(self, tmp_path: Path, make_config) -> None:
        source = tmp_path / "main.scss"
        source.write_text("body {\n  color: $nope;\n}\n")
        error = CompileError(source, "Undefined variable", line=2, column=10)
        page = render_error_page([error], make_config(), path="/styles/main.css")
        assert "color: $nope;" in page
        assert f"{source}:2" in page

    def test_escapes_message_and_path(self, make_config) -> None:
        page = render_error_page(
            [TemplateError("/x", "<script>alert(1)</script>")], make_config(), path="/<x>",
        )
        assert "<script>alert(1)</script>" not in page
        assert "&lt;script&gt;" in page
        assert "/&lt;x&gt;" in page

    def test_no_context_without_line(self, make_config) -> None:
        page = render_error_page([TemplateError("/", "boom")], make_config())
        assert '<div class="source">' not in page

    def test_missing_source_file(self, make_config) -> None:
        error = TemplateError("/", "boom", template="gone.html", lineno=4)
        page = render_error_page([error], make_config())
        assert '<div class="source">' not in page

    def test_reflects_edited_source(self, tmp_path: Path, make_config, write_templates) -> None:
        write_templates(tmp_path, page="old line\n")
        error = TemplateError("/", "boom", template="page.html", lineno=1)
        assert "old line" in render_error_page([error], make_config())
        write_templates(tmp_path, page="new line, longer than before\n")
        assert "new line" in render_error_page([error], make_config())


class TestRenderNotFoundPage:
    """render_not_found_page — fallback 404."""

    def test_names_path(self) -> None:
        page = render_not_found_page("/missing")
        assert "404 Not Found" in page
        assert "<code>/missing</code>" in page

    def test_escapes_path(self) -> None:
        page = render_not_found_page("/<b>")
        assert "<code>/&lt;b&gt;</code>" in page

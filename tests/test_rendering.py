"""Tests for knead.rendering — context merging, template rendering, style compilation."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from knead._errors import CompileError, TemplateError
from knead.rendering import (
    TemplateRenderer,
    compile_source,
    merge_context,
    render_style,
    validate_context,
)
from knead.rendering.templates import DEV_WARNING_SCRIPT
from knead.site import Route, StyleEntry


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


class TestMergeContext:
    """merge_context — shallow merge, route keys win."""

    def test_route_overrides_global(self) -> None:
        merged = merge_context({"title": "Site", "nav": [1]}, {"title": "Page"})
        assert merged == {"title": "Page", "nav": [1]}

    def test_inputs_untouched(self) -> None:
        global_data = {"a": 1}
        merge_context(global_data, {"a": 2})
        assert global_data == {"a": 1}


class TestValidateContext:
    """validate_context — JSON-like values only."""

    def test_nested_json_accepted(self) -> None:
        validate_context("/", {"a": [1, 2.5, None, {"b": True, "c": "x"}]})

    def test_object_rejected_with_key_path(self) -> None:
        with pytest.raises(TemplateError, match=r"'items\[1\]'") as exc_info:
            validate_context("/list", {"items": [1, object()]})
        assert exc_info.value.route_path == "/list"

    def test_nested_key_path(self) -> None:
        with pytest.raises(TemplateError, match=r"'meta\.when'"):
            validate_context("/", {"meta": {"when": {1, 2}}})

    def test_nested_value_type_named(self) -> None:
        with pytest.raises(TemplateError, match=r"'meta\.when' is not JSON-like \(got date\)"):
            validate_context("/", {"meta": {"when": date(2024, 1, 1)}})


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


class TestTemplateRenderer:
    """TemplateRenderer.render_route — one RenderResult per route."""

    def test_renders_with_merged_data(self, tmp_path, make_config, write_templates) -> None:
        write_templates(tmp_path, page="<h1>{{ title }}</h1><p>{{ site }}</p>")
        renderer = TemplateRenderer(make_config())
        result = renderer.render_route(
            Route("about", "page", {"title": "About"}), {"title": "Site", "site": "S"},
        )
        assert result.ok
        assert result.kind == "page"
        assert result.output_path == "about.html"
        assert result.text == "<h1>About</h1><p>S</p>"

    def test_autoescape(self, tmp_path, make_config, write_templates) -> None:
        write_templates(tmp_path, page="{{ body }}")
        renderer = TemplateRenderer(make_config())
        result = renderer.render_route(Route("/", "page", {"body": "<b>"}), {})
        assert result.text == "&lt;b&gt;"

    def test_explicit_extension_kept(self, tmp_path, make_config, write_templates) -> None:
        write_templates(tmp_path, page="ok")
        renderer = TemplateRenderer(make_config())
        assert renderer.template_name("page.html") == "page.html"
        assert renderer.template_name("page") == "page.html"
        assert renderer.render_route(Route("/", "page.html"), {}).text == "ok"

    def test_custom_template_ext(self, tmp_path, make_config) -> None:
        templates = tmp_path / "templates"
        templates.mkdir()
        (templates / "page.kida").write_text("kida")
        renderer = TemplateRenderer(make_config(template_ext=".kida"))
        assert renderer.render_route(Route("/", "page"), {}).text == "kida"

    def test_plain_route_skips_templates(self, tmp_path, make_config) -> None:
        renderer = TemplateRenderer(make_config())
        result = renderer.render_route(Route("raw", "", content="{{ left alone }}"), {"x": 1})
        assert result.ok
        assert result.output_path == "raw.html"
        assert result.text == "{{ left alone }}"

    def test_render_to_string(self, tmp_path, make_config, write_templates) -> None:
        write_templates(tmp_path, greet="{{ msg }} from {{ site }}")
        renderer = TemplateRenderer(make_config())
        text = renderer.render("greet", {"msg": "Hello!"}, {"site": "S", "msg": "x"})
        assert text == "Hello! from S"

    def test_includes_resolve(self, tmp_path, make_config, write_templates) -> None:
        write_templates(
            tmp_path,
            page='{% include "partial.html" %}',
            partial="<nav>{{ title }}</nav>",
        )
        renderer = TemplateRenderer(make_config())
        result = renderer.render_route(Route("/", "page", {"title": "T"}), {})
        assert result.text == "<nav>T</nav>"


class TestTemplateRendererFailures:
    """Failures come back as TemplateError values instead of raising."""

    def test_missing_template(self, tmp_path, make_config, write_templates) -> None:
        write_templates(tmp_path, other="x")
        renderer = TemplateRenderer(make_config())
        result = renderer.render_route(Route("about", "missing"), {})
        assert not result.ok
        assert result.text is None
        assert isinstance(result.error, TemplateError)
        assert result.error.route_path == "about"
        assert result.output_path == "about.html"

    def test_undefined_variable(self, tmp_path, make_config, write_templates) -> None:
        write_templates(tmp_path, page="<p>{{ nope }}</p>")
        renderer = TemplateRenderer(make_config())
        result = renderer.render_route(Route("/", "page"), {})
        assert not result.ok
        assert isinstance(result.error, TemplateError)
        assert "nope" in result.error.message

    def test_syntax_error(self, tmp_path, make_config, write_templates) -> None:
        write_templates(tmp_path, page="{% if title %}never closed")
        renderer = TemplateRenderer(make_config())
        result = renderer.render_route(Route("/", "page", {"title": "x"}), {})
        assert not result.ok
        assert isinstance(result.error, TemplateError)
        assert result.error.template is not None

    def test_non_json_data(self, tmp_path, make_config, write_templates) -> None:
        write_templates(tmp_path, page="{{ title }}")
        renderer = TemplateRenderer(make_config())
        result = renderer.render_route(Route("/", "page"), {"title": object()})
        assert not result.ok
        assert result.error.template == "page.html"
        assert "title" in result.error.message

    def test_render_to_string_raises(self, tmp_path, make_config, write_templates) -> None:
        write_templates(tmp_path, page="{{ nope }}")
        renderer = TemplateRenderer(make_config())
        with pytest.raises(TemplateError) as exc_info:
            renderer.render("page")
        assert exc_info.value.template == "page.html"

    def test_timing_recorded(self, tmp_path, make_config, write_templates) -> None:
        write_templates(tmp_path, page="{{ nope }}")
        renderer = TemplateRenderer(make_config())
        assert renderer.render_route(Route("/", "page"), {}).duration_ms >= 0


class TestTemplateGlobals:
    """URL, DEV_SCRIPT, link() and style_href() available in every template."""

    def _render(self, tmp_path, make_config, write_templates, source, *, dev, **kw):
        write_templates(tmp_path, page=source)
        renderer = TemplateRenderer(make_config(**kw), dev=dev)
        result = renderer.render_route(Route("/", "page"), {})
        assert result.ok, result.error
        return result.text

    def test_url_in_build(self, tmp_path, make_config, write_templates) -> None:
        text = self._render(
            tmp_path, make_config, write_templates, "{{ URL }}",
            dev=False, base_url="https://example.com/",
        )
        assert text == "https://example.com"

    def test_url_in_dev(self, tmp_path, make_config, write_templates) -> None:
        text = self._render(
            tmp_path, make_config, write_templates, "{{ URL }}",
            dev=True, base_url="https://example.com", port=9123,
        )
        assert text == "http://127.0.0.1:9123"

    def test_dev_script_only_in_dev(self, tmp_path, make_config, write_templates) -> None:
        built = self._render(
            tmp_path, make_config, write_templates, "[{{ DEV_SCRIPT }}]", dev=False,
        )
        assert built == "[]"
        dev = self._render(
            tmp_path, make_config, write_templates, "[{{ DEV_SCRIPT }}]", dev=True,
        )
        assert dev == f"[{DEV_WARNING_SCRIPT}]"

    def test_dev_script_disabled(self, tmp_path, make_config, write_templates) -> None:
        text = self._render(
            tmp_path, make_config, write_templates, "[{{ DEV_SCRIPT }}]",
            dev=True, dev_warning=False,
        )
        assert text == "[]"

    def test_link(self, tmp_path, make_config, write_templates) -> None:
        text = self._render(
            tmp_path, make_config, write_templates,
            '{{ link("about") }} {{ link("/") }} {{ link("docs/") }}', dev=False,
        )
        assert text == "/about / /docs/"

    def test_style_href(self, tmp_path, make_config, write_templates) -> None:
        text = self._render(
            tmp_path, make_config, write_templates,
            '{{ style_href("main") }} {{ style_href("print.css") }}', dev=False,
        )
        assert text == "/styles/main.css /styles/print.css"


# ---------------------------------------------------------------------------
# Styles
# ---------------------------------------------------------------------------


class TestCompileSource:
    """compile_source — libsass for SCSS/Sass, plain CSS read verbatim."""

    def test_scss_with_partial(self, tmp_site: Path, make_config) -> None:
        config = make_config(tmp_site)
        entry = StyleEntry(tmp_site / "styles" / "main.scss", "styles/main.css")
        css = compile_source(entry, config)
        assert "color: #ff0000" in css
        assert "$accent" not in css

    def test_plain_css_verbatim(self, tmp_path: Path, make_config) -> None:
        source = tmp_path / "plain.css"
        source.write_text("a { color: blue; }\n")
        entry = StyleEntry(source, "plain.css")
        assert compile_source(entry, make_config()) == "a { color: blue; }\n"

    def test_missing_source(self, tmp_path: Path, make_config) -> None:
        entry = StyleEntry(tmp_path / "gone.scss", "gone.css")
        with pytest.raises(CompileError, match="not found"):
            compile_source(entry, make_config())

    def test_error_position(self, tmp_path: Path, make_config) -> None:
        source = tmp_path / "broken.scss"
        source.write_text("body {\n  color: $missing;\n}\n")
        entry = StyleEntry(source, "broken.css")
        with pytest.raises(CompileError) as exc_info:
            compile_source(entry, make_config())
        assert exc_info.value.line == 2
        assert exc_info.value.column is not None
        assert exc_info.value.source == source


class TestRenderStyle:
    """render_style — never raises."""

    def test_success(self, tmp_site: Path, make_config) -> None:
        entry = StyleEntry(tmp_site / "styles" / "main.scss", "css/site.css")
        result = render_style(entry, make_config(tmp_site))
        assert result.ok
        assert result.kind == "style"
        assert result.output_path == "css/site.css"

    def test_failure(self, tmp_path: Path, make_config) -> None:
        source = tmp_path / "broken.scss"
        source.write_text("body { color: ; \n")
        result = render_style(StyleEntry(source, "broken.css"), make_config())
        assert not result.ok
        assert result.text is None
        assert isinstance(result.error, CompileError)

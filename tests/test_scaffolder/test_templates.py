"""Unit tests for the Jinja2 template renderer (nodeforge.scaffolder.templates).

Covers:
- Rendering from a custom template directory
- StrictUndefined behaviour
- render_to_file parent creation
- Every bundled backend template renders for both languages
"""

from __future__ import annotations

from pathlib import Path

import pytest
from jinja2 import TemplateNotFound, UndefinedError

from nodeforge.scaffolder.backend import SOURCE_FILES, build_context
from nodeforge.scaffolder.templates import TemplateRenderer

pytestmark = pytest.mark.unit


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    root = tmp_path / "templates"
    (root / "sub").mkdir(parents=True)
    (root / "hello.txt.j2").write_text("Hello {{ name }}!\n", encoding="utf-8")
    (root / "sub" / "block.j2").write_text(
        "start\n{% if flag %}\nflagged\n{% endif %}\nend\n", encoding="utf-8"
    )
    (root / "plain.txt").write_text("not a template", encoding="utf-8")
    return root


class TestRender:
    def test_render(self, template_dir: Path):
        renderer = TemplateRenderer(template_dir)
        assert renderer.render("hello.txt.j2", {"name": "forge"}) == "Hello forge!\n"

    def test_trim_blocks(self, template_dir: Path):
        renderer = TemplateRenderer(template_dir)
        assert renderer.render("sub/block.j2", {"flag": True}) == "start\nflagged\nend\n"
        assert renderer.render("sub/block.j2", {"flag": False}) == "start\nend\n"

    def test_undefined_raises(self, template_dir: Path):
        with pytest.raises(UndefinedError):
            TemplateRenderer(template_dir).render("hello.txt.j2", {})

    def test_missing_template(self, template_dir: Path):
        with pytest.raises(TemplateNotFound):
            TemplateRenderer(template_dir).render("missing.j2", {})

    def test_no_html_escaping(self, template_dir: Path):
        out = TemplateRenderer(template_dir).render("hello.txt.j2", {"name": "<b>&"})
        assert out == "Hello <b>&!\n"

    async def test_render_to_file(self, template_dir: Path, tmp_path: Path):
        target = tmp_path / "out" / "deep" / "hello.txt"
        written = await TemplateRenderer(template_dir).render_to_file(
            "hello.txt.j2", target, {"name": "file"}
        )
        assert written == target
        assert target.read_text(encoding="utf-8") == "Hello file!\n"


class TestBundledTemplates:
    @pytest.mark.parametrize(
        "name",
        ["backend/ts/src/server.ts.j2", "backend/js/src/server.js.j2", "docker/Dockerfile.j2", "root/ci.yml.j2"],
    )
    def test_present(self, name):
        assert (TemplateRenderer().template_dir / name).is_file()


class TestBundledBackendTemplates:
    @pytest.mark.parametrize("lang", ["TypeScript", "JavaScript"])
    def test_all_render_with_everything_enabled(self, make_config, lang):
        config = make_config(
            backend_lang=lang,
            frontend="vanilla",
            database="postgres",
            features=[
                "auth", "logging", "validation", "rateLimit", "docs", "testing",
                "graceful-shutdown", "healthcheck", "metrics", "opentelemetry",
            ],
        )
        renderer = TemplateRenderer()
        context = build_context(config)
        backend_dir = renderer.template_dir / "backend" / config.ext
        names = sorted(p.relative_to(renderer.template_dir).as_posix() for p in backend_dir.rglob("*.j2"))
        assert names
        for name in names:
            assert renderer.render(name, context).strip(), name

    @pytest.mark.parametrize("lang", ["TypeScript", "JavaScript"])
    def test_enabled_sources_render_with_nothing_enabled(self, make_config, lang):
        config = make_config(backend_lang=lang)
        renderer = TemplateRenderer()
        context = build_context(config)
        ext = config.ext
        for source in SOURCE_FILES:
            if source.when(config):
                assert renderer.render(f"backend/{ext}/{source.stem}.{ext}.j2", context).strip()

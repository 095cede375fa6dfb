from dataclasses import replace
from pathlib import Path, PurePosixPath

import pytest

from neur.assets import AssetTransformer, CssSyntaxError, check_css_syntax, transform_css
from neur.build import BuildResult, build_site
from neur.errors import AssetError, CollisionError, FrontmatterError, OutputError, RenderError
from neur.output import Artifact, OutputWriter, check_collisions, output_path_for
from neur.scanner import SourceEntry, SourceKind

CSS = """/* main styles */
body {
    color: #ff0000;
    margin: 0px;
}

a:hover { text-decoration: underline; }
"""


def create_site(write):
    write("_base.html", "<html><body>{% block body %}{% endblock %}</body></html>")
    write("index.html", '{% extends "_base.html" %}{% block body %}<p>home</p>{% endblock %}')
    write("posts/_template.html", "<article><h2>{{ title }}</h2>{{ content }}</article>")
    write("posts/hello.md", "---\ntitle: Hi\n---\n# Hi\n")
    write("notes/plain.markdown", "Just *text*.")
    write("css/site.css", CSS)
    write("files/data.bin", "")
    write(".hidden/secret.md", "# no")


def test_transform_css_minify_is_not_longer():
    plain = transform_css(CSS, minify=False)
    minified = transform_css(CSS, minify=True)
    assert plain == CSS
    assert len(minified) < len(plain)
    assert "body{" in minified
    assert "/* main styles */" not in minified


@pytest.mark.parametrize(
    "css, problem",
    [
        ("body { color: red;", "unclosed"),
        ("body { color: red; }}", "unexpected"),
        ("/* never closed", "unterminated comment"),
        ('a::after { content: "oops }', "unterminated string"),
    ],
)
def test_css_syntax_errors(css, problem):
    with pytest.raises(CssSyntaxError, match=problem):
        check_css_syntax(css)


def test_css_syntax_ignores_braces_in_comments_and_strings():
    check_css_syntax('/* { */ a::before { content: "}"; }\n')


def test_asset_transformer_wraps_errors(site):
    config, write = site
    path = write("bad.css", "a {\n  color: red;\n")
    entry = SourceEntry(PurePosixPath("bad.css"), SourceKind.STYLESHEET, config.source)

    with pytest.raises(AssetError) as info:
        AssetTransformer(config).transform_entry(entry, path.read_text())
    assert info.value.source_path == path
    assert "line 1" in info.value.message

    minifying = AssetTransformer(replace(config, minify=True))
    good = SourceEntry(PurePosixPath("good.css"), SourceKind.STYLESHEET, config.source)
    assert minifying.transform_entry(good, CSS) == transform_css(CSS, minify=True)

    with pytest.raises(ValueError):
        minifying.transform_entry(SourceEntry(PurePosixPath("a.md"), SourceKind.MARKDOWN), "")


def test_output_path_mapping():
    def mapped(rel, kind):
        return output_path_for(SourceEntry(PurePosixPath(rel), kind)).as_posix()

    assert mapped("posts/hello.md", SourceKind.MARKDOWN) == "posts/hello.html"
    assert mapped("notes/x.MARKDOWN", SourceKind.MARKDOWN) == "notes/x.html"
    assert mapped("index.html", SourceKind.HTML_PAGE) == "index.html"
    assert mapped("css/site.css", SourceKind.STYLESHEET) == "css/site.css"
    assert mapped("img/a.md.png", SourceKind.OTHER) == "img/a.md.png"


def test_check_collisions_is_case_insensitive():
    a = SourceEntry(PurePosixPath("About.md"), SourceKind.MARKDOWN, Path("src"))
    b = SourceEntry(PurePosixPath("about.html"), SourceKind.HTML_PAGE, Path("src"))
    artifacts = [
        Artifact(a, output_path_for(a), "a"),
        Artifact(b, output_path_for(b), "b"),
    ]
    with pytest.raises(CollisionError) as info:
        check_collisions(artifacts)
    assert set(info.value.sources) == {Path("src/About.md"), Path("src/about.html")}


def test_writer_overwrites_and_keeps_unrelated_files(site):
    config, _ = site
    config.output.mkdir()
    (config.output / "stale.txt").write_text("keep", encoding="utf-8")
    (config.output / "page.html").write_text("old", encoding="utf-8")
    entry = SourceEntry(PurePosixPath("page.html"), SourceKind.HTML_PAGE, config.source)
    img = SourceEntry(PurePosixPath("deep/dir/img.bin"), SourceKind.OTHER, config.source)

    written = OutputWriter(config).write(
        [Artifact(entry, PurePosixPath("page.html"), "new"), Artifact(img, img.relative_path, b"\x00\xff")]
    )

    assert written == [config.output / "page.html", config.output / "deep/dir/img.bin"]
    assert (config.output / "page.html").read_text() == "new"
    assert (config.output / "deep/dir/img.bin").read_bytes() == b"\x00\xff"
    assert (config.output / "stale.txt").read_text() == "keep"


def test_writer_failure_names_source_and_target(site):
    config, _ = site
    config.output.mkdir()
    (config.output / "posts").write_text("a file, not a directory", encoding="utf-8")
    entry = SourceEntry(PurePosixPath("posts/hello.md"), SourceKind.MARKDOWN, config.source)

    with pytest.raises(OutputError) as info:
        OutputWriter(config).write([Artifact(entry, PurePosixPath("posts/hello.html"), "x")])

    assert info.value.source_path == config.source / "posts" / "hello.md"
    assert "cannot write" in info.value.message
    assert "hello.html" in info.value.message
    assert isinstance(info.value.original_error, OSError)


def test_build_site_end_to_end(site):
    config, write = site
    create_site(write)
    (config.source / "files" / "data.bin").write_bytes(b"\x89PNG\r\n\x00")

    result = build_site(config)

    assert isinstance(result, BuildResult)
    out = config.output
    hello = (out / "posts" / "hello.html").read_text()
    assert "<h2>Hi</h2>" in hello
    assert "<h1>Hi</h1>" in hello
    assert (out / "index.html").read_text() == "<html><body><p>home</p></body></html>"
    assert "<em>text</em>" in (out / "notes" / "plain.html").read_text()
    assert (out / "css" / "site.css").read_text() == CSS
    assert (out / "files" / "data.bin").read_bytes() == b"\x89PNG\r\n\x00"
    assert not (out / "_base.html").exists()
    assert not (out / "posts" / "_template.html").exists()
    assert not (out / ".hidden").exists()
    assert sorted(p.relative_to(out).as_posix() for p in result.written) == [
        "css/site.css",
        "files/data.bin",
        "index.html",
        "notes/plain.html",
        "posts/hello.html",
    ]


def test_build_is_idempotent(site):
    config, write = site
    create_site(write)

    build_site(config)
    first = {p: p.read_bytes() for p in config.output.rglob("*") if p.is_file()}
    build_site(config)
    second = {p: p.read_bytes() for p in config.output.rglob("*") if p.is_file()}

    assert first == second


def test_build_with_workers_matches_serial(site, tmp_path):
    config, write = site
    create_site(write)
    for i in range(10):
        write(f"posts/p{i}.md", f"---\ntitle: Post {i}\n---\nbody {i}\n")

    serial = build_site(config)
    parallel = build_site(replace(config, output=tmp_path / "dist-parallel"), workers=4)

    assert [a.data for a in serial.artifacts] == [a.data for a in parallel.artifacts]


def test_build_minifies_css_when_configured(site):
    config, write = site
    write("site.css", CSS)

    build_site(replace(config, minify=True))

    assert (config.output / "site.css").read_text() == transform_css(CSS, minify=True)


def test_collision_fails_before_writing(site):
    config, write = site
    write("a.md", "# A")
    write("a.html", "<p>A</p>")
    write("b.css", "b{}")

    with pytest.raises(CollisionError) as info:
        build_site(config)

    assert info.value.output_path == Path("a.html")
    assert not config.output.exists()


@pytest.mark.parametrize(
    "rel, text, error",
    [
        ("bad.md", "---\ntitle: x\n", FrontmatterError),
        ("bad.html", "{{ undefined_thing }}", RenderError),
        ("bad.css", "a {", AssetError),
    ],
)
def test_build_aborts_on_fatal_file_errors(site, rel, text, error):
    config, write = site
    write(rel, text)
    with pytest.raises(error) as info:
        build_site(config)
    assert info.value.source_path == config.source / rel


def test_unreadable_file_is_skipped(site, monkeypatch, caplog):
    config, write = site
    write("ok.md", "# ok")
    write("secret.txt", "x")
    original = Path.read_bytes

    def fake_read_bytes(self):
        if self.name == "secret.txt":
            raise PermissionError("denied")
        return original(self)

    monkeypatch.setattr(Path, "read_bytes", fake_read_bytes)
    result = build_site(config)

    assert result.skipped == [PurePosixPath("secret.txt")]
    assert (config.output / "ok.html").exists()
    assert not (config.output / "secret.txt").exists()
    assert "secret.txt" in caplog.text


def test_build_accepts_custom_engines(site):
    config, write = site
    write("a.md", "hello")

    class Upper:
        def convert(self, text):
            return text.upper()

    class Echo:
        def render(self, name, context):
            return f"{name}:{context['content']}"

        def render_string(self, template, context):
            return f"fallback:{context['content']}"

    result = build_site(config, engine=Echo(), markdown=Upper())

    assert result.artifacts[0].data == "fallback:HELLO"

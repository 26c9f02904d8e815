"""Integration tests converting a Next.js project on disk."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from framework_migrator import convert_directory, convert_sources
from framework_migrator.errors import MigrationError
from framework_migrator.syntax import parse_module, syntax_for

PROJECT = {
    "package.json": json.dumps(
        {
            "name": "blog",
            "private": True,
            "scripts": {"dev": "next dev", "build": "next build", "start": "next start"},
            "dependencies": {"next": "14.1.0", "react": "18.2.0", "react-dom": "18.2.0"},
            "devDependencies": {"typescript": "5.4.0", "eslint-config-next": "14.1.0"},
        },
        indent=2,
    ),
    "pages/_app.tsx": """\
import '../styles/globals.css';

export default function MyApp({ Component, pageProps }) {
  return <Component {...pageProps} />;
}
""",
    "pages/_document.tsx": """\
import { Html, Head, Main, NextScript } from 'next/document';

export default function Document() {
  return (
    <Html>
      <Head />
      <body>
        <Main />
        <NextScript />
      </body>
    </Html>
  );
}
""",
    "pages/index.tsx": """\
import Head from 'next/head';
import Link from 'next/link';
import Image from 'next/image';

export default function Home() {
  return (
    <main>
      <Head>
        <title>Blog</title>
      </Head>
      <Image src="/hero.png" alt="Hero" width={800} height={400} priority />
      <Link href="/posts/hello">Hello</Link>
    </main>
  );
}
""",
    "pages/posts/[slug].tsx": """\
import { useRouter } from 'next/router';

type Post = { title: string };

export default function PostPage({ post }: { post: Post }) {
  const router = useRouter();
  return (
    <article>
      <h1>{post.title}</h1>
      <p>{router.query.slug}</p>
      <button onClick={() => router.back()}>Back</button>
    </article>
  );
}

export async function getStaticProps() {
  return { props: { post: { title: 'Hello' } } };
}
""",
    "pages/api/posts.ts": """\
export default function handler(req: unknown, res: { json: (v: unknown) => void }) {
  res.json([]);
}
""",
    "components/Header.tsx": """\
import Link from 'next/link';

export function Header() {
  return <Link href="/">Home</Link>;
}
""",
    "lib/format.ts": "export const upper = (value: string): string => value.toUpperCase();\n",
    "styles/globals.css": "body { margin: 0; }\n",
    "public/hero.png": None,
    "node_modules/next/index.js": "module.exports = {};\n",
}


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "next-app"
    for relative, content in PROJECT.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if content is None:
            path.write_bytes(b"\x89PNG\r\n\x1a\n\x00\xff")
        else:
            path.write_text(content, encoding="utf-8")
    return root


def test_convert_directory_writes_react_project(project: Path, tmp_path: Path) -> None:
    """Convert a small pages-router project into a React layout."""
    output = tmp_path / "react-app"

    result = convert_directory(project, output)

    assert result.total_files == 10
    codes = sorted(error.code for error in result.errors)
    assert codes == ["FILE_SKIPPED", "FILE_SKIPPED"]

    app = (output / "src/App.tsx").read_text(encoding="utf-8")
    assert "export default function App() {" in app
    assert '<Route path="/posts/:slug" element={<PostsSlug />} />' in app
    assert '<Route path="/" element={<Home />} />' in app

    home = (output / "src/pages/Home.tsx").read_text(encoding="utf-8")
    assert "<Helmet>" in home
    assert '<Img src="/hero.png" alt="Hero" width={800} height={400} />' in home
    assert '<Link to="/posts/hello">Hello</Link>' in home

    post = (output / "src/pages/PostsSlug.tsx").read_text(encoding="utf-8")
    assert "navigate(-1)" in post
    assert "{params.slug}" in post
    assert "export function useStaticData(context = {})" in post

    manifest = json.loads((output / "package.json").read_text(encoding="utf-8"))
    assert "next" not in manifest["dependencies"]
    assert "eslint-config-next" not in manifest["devDependencies"]
    for package in ("react-router-dom", "@tanstack/react-query", "react-helmet-async", "react-image"):
        assert package in manifest["dependencies"]
    assert manifest["scripts"]["dev"] == "vite"

    assert (output / "src/styles/globals.css").exists()
    assert not (output / "public/hero.png").exists()
    assert not (output / "src/pages/api").exists()
    assert not (output / "src/node_modules").exists()

    for written in ("src/App.tsx", "src/pages/Home.tsx", "src/pages/PostsSlug.tsx"):
        code = (output / written).read_text(encoding="utf-8")
        parse_module(code, written, syntax_for(written))


def test_convert_directory_strip_types(project: Path, tmp_path: Path) -> None:
    """Stripping types emits JavaScript files."""
    output = tmp_path / "react-js"

    result = convert_directory(project, output, preserve_type_annotations=False)

    assert (output / "src/App.jsx").exists()
    assert (output / "src/lib/format.js").read_text(encoding="utf-8") == (
        "export const upper = (value) => value.toUpperCase();\n"
    )
    header = (output / "src/components/Header.jsx").read_text(encoding="utf-8")
    assert '<Link to="/">Home</Link>' in header
    assert all(not path.endswith((".ts", ".tsx")) for path in result.transformed_files)


def test_convert_directory_without_output_writes_nothing(project: Path) -> None:
    """Omitting the output directory only reports the result."""
    result = convert_directory(project, update_dependencies=False)

    manifest = next(output for output in result.outputs if output.kind == "manifest")
    assert manifest.content == PROJECT["package.json"]
    assert not manifest.modified


def test_convert_directory_missing_source(tmp_path: Path) -> None:
    """A missing project root fails before any batch runs."""
    with pytest.raises(MigrationError):
        convert_directory(tmp_path / "nope")


def test_convert_sources_in_memory() -> None:
    """In-memory sources go through the same pipeline."""
    result = convert_sources({"components/Header.tsx": PROJECT["components/Header.tsx"]})

    assert result.transformed_files == ("src/components/Header.tsx",)
    assert result.outputs[0].changes

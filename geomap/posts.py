"""Blog post loading for the tutorial posts (Markdown and R Markdown)."""

from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from loguru import logger

POST_SUFFIXES = (".md", ".markdown", ".rmd")
FILENAME_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})-(.+)$")
FENCE_OPEN_RE = re.compile(r"^```+\s*(?:\{(?P<header>[^}]*)\}|(?P<lang>[\w+-]+))?\s*$")
FENCE_CLOSE_RE = re.compile(r"^```+\s*$")
FRONT_MATTER_RE = re.compile(
    r"\A---[ \t]*\n(?:(?P<meta>.*?)\n)?(?:---|\.\.\.)[ \t]*(?:\n|\Z)", re.DOTALL
)
SLUG_SEPARATOR_RE = re.compile(r"[\W_]+")


@dataclass
class BlogPost:
    """One blog post.

    Parameters
    ----------
    title : str
        Post title from front matter or first heading.
    author : str
        Author name, empty when not given.
    date : datetime.date
        Publication date.
    tags : list[str]
        Lowercased, deduplicated tags.
    body : str
        Post text without front matter.
    path : Path, optional
        Source file.
    slug : str
        URL-safe name derived from the file name.
    """

    title: str
    author: str
    date: dt.date
    tags: list[str] = field(default_factory=list)
    body: str = ""
    path: Path | None = None
    slug: str = ""


@dataclass
class CodeChunk:
    """Fenced code block of a post."""

    language: str
    label: str | None
    options: dict[str, str]
    code: str


def slugify(text: str) -> str:
    """Turn a file stem or title into a URL-safe slug.

    Examples
    --------
    >>> slugify("Geologic Map: California!")
    'geologic-map-california'
    """
    slug = SLUG_SEPARATOR_RE.sub("-", text.lower()).strip("-")
    return slug or "post"


def parse_front_matter(text: str) -> tuple[dict, str]:
    """Split leading YAML front matter from the body.

    Parameters
    ----------
    text : str
        Whole post file content.

    Returns
    -------
    tuple[dict, str]
        Metadata mapping and remaining body. ``({}, text)`` when the text has
        no front matter block.
    """
    clean_text = text.lstrip("\ufeff").replace("\r\n", "\n")
    block = FRONT_MATTER_RE.match(clean_text)
    if block is None:
        return {}, clean_text

    try:
        meta = yaml.safe_load(block.group("meta") or "") or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid front matter: {exc}") from exc
    if not isinstance(meta, dict):
        raise ValueError("Front matter must be a mapping")
    return meta, clean_text[block.end() :].lstrip("\n")


def _parse_tags(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items = value.strip().strip("[]").split(",")
    else:
        items = [str(v) for v in value]
    tags = []
    for item in items:
        tag = item.strip().strip("'\"").lower()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def _parse_date(value, stem: str) -> dt.date:
    """Resolve post date from front matter or ``YYYY-MM-DD-`` file prefix."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if value:
        text = str(value).strip()
        try:
            return dt.date.fromisoformat(text[:10])
        except ValueError as exc:
            raise ValueError(f"Invalid post date: {value!r}") from exc
    found = FILENAME_DATE_RE.match(stem)
    if found:
        return dt.date.fromisoformat(found.group(1))
    raise ValueError(f"Post has no date: {stem}")


def _extract_title(meta: dict, body: str, stem: str) -> str:
    """Front matter title, else the first level-one heading outside code chunks."""
    if meta.get("title"):
        return str(meta["title"]).strip()
    in_chunk = False
    for line in body.splitlines():
        stripped = line.strip()
        if in_chunk:
            in_chunk = not FENCE_CLOSE_RE.match(stripped)
        elif FENCE_OPEN_RE.match(stripped):
            in_chunk = True
        elif stripped.startswith("# "):
            return stripped[2:].strip() or stem
    return stem


def load_post(path: str | Path) -> BlogPost:
    """Load one Markdown or R Markdown post.

    Parameters
    ----------
    path : str | Path
        ``.md``, ``.markdown`` or ``.Rmd`` file.

    Returns
    -------
    BlogPost
        Parsed post.
    """
    post_path = Path(path)
    if post_path.suffix.lower() not in POST_SUFFIXES:
        raise ValueError(f"Unsupported post file: {post_path.name}")
    text = post_path.read_text(encoding="utf-8")
    meta, body = parse_front_matter(text)

    stem = post_path.stem
    found = FILENAME_DATE_RE.match(stem)
    slug_source = found.group(2) if found else stem
    author = meta.get("author") or ""
    if isinstance(author, list):
        author = ", ".join(str(a) for a in author)

    return BlogPost(
        title=_extract_title(meta, body, stem),
        author=str(author),
        date=_parse_date(meta.get("date"), stem),
        tags=_parse_tags(meta.get("tags")),
        body=body,
        path=post_path,
        slug=slugify(slug_source),
    )


def load_posts(folder: str | Path, tag: str | None = None) -> list[BlogPost]:
    """Load every post in a folder, newest first.

    Parameters
    ----------
    folder : str | Path
        Folder searched recursively for post files.
    tag : str, optional
        Keep only posts carrying this tag.
    """
    folder_path = Path(folder)
    if not folder_path.is_dir():
        raise FileNotFoundError(f"Posts folder not found: {folder_path}")

    posts = []
    for file_path in sorted(folder_path.rglob("*")):
        if not file_path.is_file() or file_path.suffix.lower() not in POST_SUFFIXES:
            continue
        posts.append(load_post(file_path))
    logger.debug(f"Loaded {len(posts)} posts from {folder_path}")

    if tag is not None:
        wanted = tag.strip().lower()
        posts = [post for post in posts if wanted in post.tags]
    posts.sort(key=lambda post: (post.date, post.slug), reverse=True)
    return posts


def _parse_chunk_header(header: str) -> tuple[str, str | None, dict[str, str]]:
    """Parse an R Markdown chunk header such as ``r label, echo=FALSE``."""
    header = header.strip()
    language, _, rest = header.partition(" ")
    if "," in language:
        language, _, more = language.partition(",")
        rest = f"{more} {rest}"
    label = None
    options: dict[str, str] = {}
    for item in rest.split(","):
        item = item.strip()
        if not item:
            continue
        if "=" in item:
            key, value = item.split("=", 1)
            options[key.strip()] = value.strip().strip("'\"")
        elif label is None:
            label = item
    return language.strip() or "text", label, options


def extract_code_chunks(post: BlogPost | str) -> list[CodeChunk]:
    """Return fenced code chunks of a post body in order.

    Handles R Markdown headers (```` ```{r label, echo=FALSE} ````) and plain
    fences with or without a language.

    Raises
    ------
    ValueError
        Raised when a fence is opened but never closed.
    """
    body = post.body if isinstance(post, BlogPost) else post
    chunks: list[CodeChunk] = []
    current: tuple[str, str | None, dict[str, str]] | None = None
    code_lines: list[str] = []
    open_line = 0

    for line_no, line in enumerate(body.splitlines(), start=1):
        if current is None:
            found = FENCE_OPEN_RE.match(line.strip())
            if not found:
                continue
            if found.group("header") is not None:
                current = _parse_chunk_header(found.group("header"))
            else:
                current = (found.group("lang") or "text", None, {})
            code_lines = []
            open_line = line_no
            continue
        if FENCE_CLOSE_RE.match(line.strip()):
            language, label, options = current
            chunks.append(CodeChunk(language, label, options, "\n".join(code_lines)))
            current = None
            continue
        code_lines.append(line)

    if current is not None:
        raise ValueError(f"Unclosed code fence opened at line {open_line}")
    return chunks

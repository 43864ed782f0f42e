"""Image inlining for article bodies.

Image tags that carry the Omnivore original-source marker are rewritten so
their ``src`` holds a base64 data URI. Only the ``src`` value of a rewritten
tag changes; every other byte of the fragment is preserved.
"""

import re
from dataclasses import dataclass
from html.parser import HTMLParser

from omnisync.clients.images import ImageFetcher
from omnisync.models import ProgressCallback
from omnisync.utils.logging import get_logger

logger = get_logger(__name__)

ORIGINAL_SRC_ATTRIBUTE = "data-omnivore-original-src"

# One attribute inside a raw start tag: name, then an optional value.
ATTRIBUTE_PATTERN = re.compile(
    r"""(?P<name>[^\s"'>/=]+)"""
    r"""(?:\s*=\s*(?P<value>"[^"]*"|'[^']*'|[^\s>]+))?"""
)


@dataclass(frozen=True)
class ImageTag:
    """An image start tag located in the source fragment."""

    start: int
    end: int
    raw: str
    original_src: str


@dataclass
class InlineResult:
    """Rewritten fragment plus per-pass counts."""

    html: str
    embedded: int = 0
    failed: int = 0


class _ImageTagScanner(HTMLParser):
    """Collects ``<img>`` tags carrying the original-source marker."""

    def __init__(self, source: str, marker: str) -> None:
        super().__init__(convert_charrefs=True)
        self._marker = marker
        self._line_offsets = [0]
        for index, char in enumerate(source):
            if char == "\n":
                self._line_offsets.append(index + 1)
        self.tags: list[ImageTag] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag != "img":
            return
        original_src = next(
            (value for name, value in attrs if name == self._marker and value),
            None,
        )
        raw = self.get_starttag_text()
        if original_src is None or raw is None:
            return
        line, column = self.getpos()
        start = self._line_offsets[line - 1] + column
        self.tags.append(
            ImageTag(start=start, end=start + len(raw), raw=raw, original_src=original_src)
        )


def find_image_tags(html: str, marker: str = ORIGINAL_SRC_ATTRIBUTE) -> list[ImageTag]:
    """Locate every embeddable image tag in document order."""
    scanner = _ImageTagScanner(html, marker)
    scanner.feed(html)
    scanner.close()
    return scanner.tags


def replace_src(raw_tag: str, value: str) -> str:
    """Return ``raw_tag`` with its ``src`` attribute set to ``value``.

    The first ``src`` attribute is rewritten in place. When the tag has none,
    one is added just before the closing bracket.
    """
    name_end = re.match(r"<\s*[^\s/>]+", raw_tag)
    position = name_end.end() if name_end else 1
    for match in ATTRIBUTE_PATTERN.finditer(raw_tag, position):
        if match.group("name").lower() != "src":
            continue
        if match.group("value") is None:
            return f'{raw_tag[: match.end()]}="{value}"{raw_tag[match.end():]}'
        value_start, value_end = match.span("value")
        quoted = raw_tag[value_start]
        if quoted in "\"'":
            return f"{raw_tag[: value_start + 1]}{value}{raw_tag[value_end - 1:]}"
        return f'{raw_tag[:value_start]}"{value}"{raw_tag[value_end:]}'

    close = len(raw_tag) - 2 if raw_tag.endswith("/>") else len(raw_tag) - 1
    head = raw_tag[:close]
    if head[-1:].isspace():
        return f'{head}src="{value}" {raw_tag[close:]}'
    return f'{head} src="{value}"{raw_tag[close:]}'


def _noop(message: str) -> None:
    pass


class ImageInliner:
    """Embeds remote images into an HTML fragment as data URIs."""

    def __init__(self, fetcher: ImageFetcher, marker: str = ORIGINAL_SRC_ATTRIBUTE) -> None:
        self._fetcher = fetcher
        self._marker = marker

    async def inline_images(
        self, html: str, on_progress: ProgressCallback | None = None
    ) -> str:
        """Rewrite marked image tags to embed their images.

        Never raises for an individual image: a tag whose image cannot be
        fetched is left exactly as it was.
        """
        result = await self.inline_images_with_stats(html, on_progress)
        return result.html

    async def inline_images_with_stats(
        self, html: str, on_progress: ProgressCallback | None = None
    ) -> InlineResult:
        """Like inline_images, also reporting how many images were embedded."""
        notify = on_progress or _noop
        tags = find_image_tags(html, self._marker)
        if not tags:
            return InlineResult(html=html)

        notify("Fetching images...")
        logger.info("Inlining images", count=len(tags))

        # Repeated sources are fetched once per pass.
        cache: dict[str, str | None] = {}
        parts: list[str] = []
        position = 0
        embedded = 0
        failed = 0

        for tag in tags:
            if tag.original_src not in cache:
                cache[tag.original_src] = await self._fetcher.fetch_data_uri(tag.original_src)
            data_uri = cache[tag.original_src]

            parts.append(html[position : tag.start])
            if data_uri is None:
                parts.append(tag.raw)
                failed += 1
            else:
                parts.append(replace_src(tag.raw, data_uri))
                embedded += 1
            position = tag.end

        parts.append(html[position:])
        logger.info("Images inlined", embedded=embedded, failed=failed)
        return InlineResult(html="".join(parts), embedded=embedded, failed=failed)

# ABOUTME: Generators for the fixed-structure parts of an EPUB.
# ABOUTME: Container, package document, navigation, cover, title page, NCX, stylesheet, chapters.

from collections.abc import Sequence
from dataclasses import dataclass
from urllib.parse import quote

from md2epub.core.types import BuildIdentifiers, Chapter, Image, manifest_id
from md2epub.formats.markup import Element, Raw, serialize
from md2epub.metadata.types import BookMetadata

CONTAINER_PATH = "META-INF/container.xml"
PACKAGE_HREF = "content.opf"
NAV_HREF = "nav.xhtml"
COVER_HREF = "cover.xhtml"
TITLE_PAGE_HREF = "title_page.xhtml"
NCX_HREF = "toc.ncx"
STYLESHEET_HREF = "stylesheet.css"

XHTML_MEDIA_TYPE = "application/xhtml+xml"

CONTAINER_NS = "urn:oasis:names:tc:opendocument:xmlns:container"
OPF_NS = "http://www.idpf.org/2007/opf"
DC_NS = "http://purl.org/dc/elements/1.1/"
XHTML_NS = "http://www.w3.org/1999/xhtml"
OPS_NS = "http://www.idpf.org/2007/ops"
NCX_NS = "http://www.daisy.org/z3986/2005/ncx/"
IBOOKS_PREFIX = "ibooks: http://vocabulary.itunes.apple.com/rdf/ibooks/vocabulary-extensions-1.0/"

HTML_DOCTYPE = "<!DOCTYPE html>"
GENERATOR = "md2epub"

COVER_WIDTH = "400"
COVER_HEIGHT = "600"

STYLESHEET = """\
body { font-family: yuesong, serif; font-size: 2em; }
h1 { font-size: 1.4em; }
h2 { font-size: 1.2em; }
h3 { font-size: 1em; }
h4 { font-size: 0.9em; }
h5 { font-size: 0.8em; }
h6 { font-size: 0.7em; }
"""


@dataclass(frozen=True)
class ManifestItem:
    """One entry of the package manifest."""

    id: str
    href: str
    media_type: str
    properties: str | None = None


STRUCTURAL_ITEMS: tuple[ManifestItem, ...] = (
    ManifestItem("ncx", NCX_HREF, "application/x-dtbncx+xml"),
    ManifestItem("nav", NAV_HREF, XHTML_MEDIA_TYPE, "nav"),
    ManifestItem("stylesheet", STYLESHEET_HREF, "text/css"),
    ManifestItem("cover_xhtml", COVER_HREF, XHTML_MEDIA_TYPE),
    ManifestItem("title_page_xhtml", TITLE_PAGE_HREF, XHTML_MEDIA_TYPE),
)

# Reading order of the structural documents ahead of the chapters
_SPINE_PREFIX = ("cover_xhtml", "title_page_xhtml", "nav")


def manifest_items(
    metadata: BookMetadata,
    chapters: Sequence[Chapter],
    images: Sequence[Image],
) -> list[ManifestItem]:
    """List every manifest entry: structural documents, chapters, then images.

    Ids are derived from file names. When two names map to the same id, the
    later one gets a numeric suffix, so the result depends only on the
    inputs and their order.
    """
    items = list(STRUCTURAL_ITEMS)
    used = {item.id for item in items}

    def allocate(name: str) -> str:
        base = manifest_id(name)
        candidate = base
        counter = 2
        while candidate in used:
            candidate = f"{base}_{counter}"
            counter += 1
        used.add(candidate)
        return candidate

    for chapter in chapters:
        items.append(ManifestItem(allocate(chapter.file_name), chapter.href, XHTML_MEDIA_TYPE))
    for image in images:
        properties = "cover-image" if image.name == metadata.cover_image else None
        items.append(ManifestItem(allocate(image.name), image.href, image.media_type, properties))
    return items


def _cover_item_id(items: Sequence[ManifestItem]) -> str | None:
    for item in items:
        if item.properties == "cover-image":
            return item.id
    return None


def _xhtml_page(
    title: str, language: str, body_attrs: dict[str, str | None] | None = None
) -> tuple[Element, Element]:
    """Build the shared XHTML skeleton. Returns (html, body)."""
    root = Element(
        "html",
        {"xmlns": XHTML_NS, "xmlns:epub": OPS_NS, "xml:lang": language, "lang": language},
    )
    head = root.sub("head")
    head.sub("meta", {"charset": "utf-8"})
    head.sub("meta", {"name": "generator", "content": GENERATOR})
    head.sub("title", text=title)
    head.sub("link", {"rel": "stylesheet", "type": "text/css", "href": STYLESHEET_HREF})
    body = root.sub("body", body_attrs)
    return root, body


def container_document() -> str:
    """META-INF/container.xml pointing at the package document."""
    root = Element("container", {"version": "1.0", "xmlns": CONTAINER_NS})
    rootfiles = root.sub("rootfiles")
    rootfiles.sub(
        "rootfile",
        {
            "full-path": f"EPUB/{PACKAGE_HREF}",
            "media-type": "application/oebps-package+xml",
        },
    )
    return serialize(root)


def package_document(
    metadata: BookMetadata,
    chapters: Sequence[Chapter],
    images: Sequence[Image],
    identifiers: BuildIdentifiers,
) -> str:
    """The OPF package document: metadata, manifest, spine, and guide."""
    items = manifest_items(metadata, chapters, images)
    ids_by_href = {item.href: item.id for item in items}

    root = Element(
        "package",
        {
            "version": "3.0",
            "xmlns": OPF_NS,
            "unique-identifier": "epub-id",
            "prefix": IBOOKS_PREFIX,
        },
    )

    meta = root.sub("metadata", {"xmlns:dc": DC_NS, "xmlns:opf": OPF_NS})
    meta.sub("dc:title", {"id": "epub-title-1"}, metadata.title)
    if metadata.author:
        meta.sub("dc:creator", {"id": "epub-creator-1"}, metadata.author)
    meta.sub("dc:identifier", {"id": "epub-id"}, identifiers.urn)
    meta.sub("dc:language", text=metadata.language_tag)
    meta.sub("dc:date", text=identifiers.date)
    if metadata.description:
        meta.sub("dc:description", text=metadata.description)
    for tag in metadata.tags:
        meta.sub("dc:subject", text=tag)
    meta.sub("meta", {"property": "dcterms:modified"}, identifiers.date)
    cover_id = _cover_item_id(items)
    if cover_id is not None:
        meta.sub("meta", {"name": "cover", "content": cover_id})

    manifest = root.sub("manifest")
    for item in items:
        manifest.sub(
            "item",
            {
                "id": item.id,
                "href": item.href,
                "media-type": item.media_type,
                "properties": item.properties,
            },
        )

    spine = root.sub("spine", {"toc": "ncx"})
    for idref in _SPINE_PREFIX:
        spine.sub("itemref", {"idref": idref})
    for chapter in chapters:
        spine.sub("itemref", {"idref": ids_by_href[chapter.href]})

    guide = root.sub("guide")
    guide.sub("reference", {"type": "toc", "title": metadata.title, "href": NAV_HREF})
    guide.sub("reference", {"type": "cover", "title": "Cover", "href": COVER_HREF})

    return serialize(root)


def nav_document(metadata: BookMetadata, chapters: Sequence[Chapter]) -> str:
    """The EPUB 3 navigation document with table of contents and landmarks."""
    root, body = _xhtml_page(metadata.title, metadata.language_tag)

    toc = body.sub("nav", {"epub:type": "toc", "id": "toc"})
    toc.sub("h1", {"id": "toc-title"}, "Table of Contents")
    toc.sub("p", {"id": "toc-book-title"}, f"Title: {metadata.title}")
    entries = toc.sub("ol", {"class": "toc"})
    entries.sub("li", {"id": "toc-li-cover"}).sub("a", {"href": COVER_HREF}, "Cover")
    entries.sub("li", {"id": "toc-li-title"}).sub("a", {"href": TITLE_PAGE_HREF}, "Title")
    entries.sub("li", {"id": "toc-li-nav"}).sub("a", {"href": NAV_HREF}, "TOC")
    for index, chapter in enumerate(chapters):
        entries.sub("li", {"id": f"toc-li-{index}"}).sub(
            "a", {"href": chapter.href}, chapter.nav_label
        )

    landmarks = body.sub(
        "nav", {"epub:type": "landmarks", "id": "landmarks", "hidden": "hidden"}
    )
    marks = landmarks.sub("ol")
    marks.sub("li").sub("a", {"href": COVER_HREF, "epub:type": "cover"}, "Cover")
    marks.sub("li").sub("a", {"href": "#toc", "epub:type": "toc"}, "Table of Contents")

    return serialize(root, doctype=HTML_DOCTYPE)


def cover_document(metadata: BookMetadata) -> str:
    """A page showing the cover image at a fixed size."""
    root, body = _xhtml_page(metadata.title, metadata.language_tag, {"id": "cover"})
    body.sub("div", {"id": "cover-image"}).sub(
        "img",
        {
            "width": COVER_WIDTH,
            "height": COVER_HEIGHT,
            "src": quote(metadata.cover_image),
            "alt": "Cover",
        },
    )
    return serialize(root, doctype=HTML_DOCTYPE)


def title_page_document(
    metadata: BookMetadata, identifiers: BuildIdentifiers, location: str
) -> str:
    """Title page with title, author, source location, and generation time."""
    root, body = _xhtml_page(
        metadata.title, metadata.language_tag, {"epub:type": "frontmatter"}
    )
    section = body.sub("section", {"epub:type": "titlepage", "class": "titlepage"})
    section.sub("h1", {"class": "title"}, metadata.title)
    table = section.sub("table")
    for label, value in (
        ("Title:", metadata.title),
        ("Author:", metadata.author or ""),
        ("Loc:", location),
        ("Gen:", identifiers.date),
    ):
        row = table.sub("tr")
        row.sub("td", text=label)
        row.sub("td", text=value)
    return serialize(root, doctype=HTML_DOCTYPE)


def ncx_document(
    metadata: BookMetadata,
    chapters: Sequence[Chapter],
    images: Sequence[Image],
    identifiers: BuildIdentifiers,
) -> str:
    """Legacy NCX table of contents, one navPoint per chapter."""
    root = Element("ncx", {"version": "2005-1", "xmlns": NCX_NS})
    head = root.sub("head")
    head.sub("meta", {"name": "dtb:uid", "content": identifiers.urn})
    head.sub("meta", {"name": "dtb:depth", "content": "1"})
    head.sub("meta", {"name": "dtb:totalPageCount", "content": "0"})
    head.sub("meta", {"name": "dtb:maxPageNumber", "content": "0"})
    cover_id = _cover_item_id(manifest_items(metadata, chapters, images))
    if cover_id is not None:
        head.sub("meta", {"name": "cover", "content": cover_id})

    root.sub("docTitle").sub("text", text=metadata.title)

    nav_map = root.sub("navMap")
    for index, chapter in enumerate(chapters):
        point = nav_map.sub(
            "navPoint", {"id": f"navPoint-{index}", "playOrder": str(index + 1)}
        )
        point.sub("navLabel").sub("text", text=chapter.nav_label)
        point.sub("content", {"src": chapter.href})

    return serialize(root)


def stylesheet_document() -> str:
    return STYLESHEET


def chapter_document(chapter: Chapter, body_html: str, metadata: BookMetadata) -> str:
    """Wrap a rendered chapter fragment in an XHTML page."""
    root, body = _xhtml_page(
        chapter.title or chapter.source_path.name,
        metadata.language_tag,
        {"epub:type": "bodymatter"},
    )
    body.append(Raw(body_html))
    return serialize(root, doctype=HTML_DOCTYPE)

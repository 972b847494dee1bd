# ABOUTME: Markdown to XHTML rendering built on Python-Markdown.
# ABOUTME: Adds a soft-break inline processor implementing the CJK line-break policy.

import xml.etree.ElementTree as etree

import markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor

from md2epub.core.cjk import is_chinese, joins_without_break

# A newline left inside paragraph text, with the blanks around it: trailing
# spaces and continuation-line indentation. Hard breaks ("  \n") are consumed
# earlier by the built-in linebreak pattern.
SOFT_BREAK_RE = r"[ \t]*\n[ \t]*"

_MARKDOWN_EXTENSIONS = ["tables", "fenced_code"]


class SoftBreakInlineProcessor(InlineProcessor):
    """Render soft line breaks.

    With `cjk` set, a break whose neighbouring characters are both CJK is
    dropped. Otherwise the break becomes `<br />` when `breaks` is set, or
    stays a literal newline.
    """

    def __init__(self, pattern: str, md: markdown.Markdown, *, cjk: bool, breaks: bool) -> None:
        super().__init__(pattern, md)
        self.cjk = cjk
        self.breaks = breaks

    def handleMatch(self, m, data):
        start, end = m.start(0), m.end(0)
        if self.cjk and joins_without_break(data[:start], data[end:]):
            return "", start, end
        if self.breaks:
            return etree.Element("br"), start, end
        # Returned as a stashed string so the processor does not revisit it.
        return "\n", start, end


class SoftBreakExtension(Extension):
    """Python-Markdown extension registering SoftBreakInlineProcessor."""

    def __init__(self, **kwargs) -> None:
        self.config = {
            "cjk": [False, "Join soft breaks between CJK characters"],
            "breaks": [False, "Render soft breaks as <br />"],
        }
        super().__init__(**kwargs)

    def extendMarkdown(self, md: markdown.Markdown) -> None:
        processor = SoftBreakInlineProcessor(
            SOFT_BREAK_RE,
            md,
            cjk=self.getConfig("cjk"),
            breaks=self.getConfig("breaks"),
        )
        # Lowest priority: runs after emphasis, links and images are stashed.
        md.inlinePatterns.register(processor, "softbreak", 5)


def render_markdown(text: str, language: str | None = None, *, breaks: bool = False) -> str:
    """Render a Markdown document to an XHTML fragment.

    Args:
        text: Markdown source.
        language: The book's language tag. Chinese tags enable the CJK
            soft-break policy.
        breaks: Render soft breaks as `<br />` instead of newlines.

    Returns:
        XHTML markup with self-closing void elements.
    """
    md = markdown.Markdown(
        output_format="xhtml",
        extensions=[
            *_MARKDOWN_EXTENSIONS,
            SoftBreakExtension(cjk=is_chinese(language), breaks=breaks),
        ],
    )
    return md.convert(text)

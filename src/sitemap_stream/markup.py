"""Sitemap and sitemap index text fragments."""

from xml.sax.saxutils import escape

from .entry import SitemapEntry

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
MOBILE_NS = "http://www.google.com/schemas/sitemap-mobile/1.0"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

URLSET_TRAILER = "</urlset>"
INDEX_HEADER = f'{XML_DECLARATION}\n<sitemapindex xmlns="{SITEMAP_NS}">\n'
INDEX_TRAILER = "</sitemapindex>"


def urlset_header(mobile: bool = False) -> str:
    """Single-line header opening the urlset element."""
    mobile_ns = f' xmlns:mobile="{MOBILE_NS}"' if mobile else ""
    return f'{XML_DECLARATION}<urlset xmlns="{SITEMAP_NS}"{mobile_ns}>'


def format_priority(priority: float) -> str:
    """Plain decimal with trailing zeros dropped: 0.9 -> '0.9', 1.0 -> '1'.

    Never uses exponent notation, which sitemap readers reject.
    """
    return f"{priority:.6f}".rstrip("0").rstrip(".") or "0"


def format_entry(entry: SitemapEntry, timestamp: str, mobile: bool = False) -> str:
    """Render one <url> block.

    Lines appear in fixed order: loc, lastmod, changefreq, priority,
    mobile marker. Optional lines are omitted entirely when absent.
    """
    lines = [
        "<url>",
        f"<loc>{escape(entry.url)}</loc>",
        f"<lastmod>{escape(timestamp)}</lastmod>",
    ]
    if entry.change_freq is not None:
        lines.append(f"<changefreq>{escape(entry.change_freq)}</changefreq>")
    if entry.priority is not None:
        lines.append(f"<priority>{format_priority(entry.priority)}</priority>")
    if mobile:
        lines.append("<mobile:mobile/>")
    lines.append("</url>")
    return "\n".join(lines) + "\n"


def format_index_entry(location: str, timestamp: str) -> str:
    """Render one <sitemap> block of the index document."""
    return (
        "<sitemap>\n"
        f"<loc>{escape(location)}</loc>\n"
        f"<lastmod>{escape(timestamp)}</lastmod>\n"
        "</sitemap>\n"
    )


INDEX_FILENAME = "sitemapindex.xml"


def segment_filename(ordinal: int) -> str:
    """Raw filename of the segment with the given ordinal."""
    return f"sitemap-{ordinal}.xml"

"""Feed rendering: an ordered asset set to RSS 2.0 XML or JSON Feed 1.1.

Pure functions. The caller resolves items, the channel context and the
settings row; nothing here touches the database or the clock except as a
fallback when no ``now`` is supplied.
"""

import html
from dataclasses import dataclass
from datetime import datetime
from email.utils import format_datetime
from typing import Any, Dict, List, Optional, Sequence

from .classifier import MEDIA_TYPES, PODCAST_TYPES
from .content_utils import as_utc, utcnow

GENERATOR = "AssetFeed RSS Generator"
JSON_FEED_VERSION = "https://jsonfeed.org/version/1.1"
NO_DESCRIPTION = "No description provided"
FEED_TTL_MINUTES = 60
DEFAULT_CATEGORY = "Technology"
LOGO_PATH = "/logo.png"

RSS_NAMESPACES = (
    ('content', "http://purl.org/rss/1.0/modules/content/"),
    ('media', "http://search.yahoo.com/mrss/"),
    ('atom', "http://www.w3.org/2005/Atom"),
    ('itunes', "http://www.itunes.com/dtds/podcast-1.0.dtd"),
    ('googleplay', "http://www.google.com/schemas/play-podcasts/1.0"),
)


@dataclass
class FeedContext:
    """Channel-level metadata after the fallback chain has been applied."""
    title: str
    description: str
    link: str
    self_url: str
    feed_url: str


def escape(value: Any) -> str:
    """Entity-escape ``& < > " '`` for XML text and attribute values."""
    if value is None:
        return ""
    return html.escape(str(value), quote=True)


def cdata(value: str) -> str:
    """Wrap *value* in CDATA, splitting any embedded terminator."""
    return "<![CDATA[" + value.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def rfc822(value: datetime) -> str:
    return format_datetime(as_utc(value), usegmt=True)


def item_url(site_url: str, node_id: str) -> str:
    return f"{site_url}/api/assets/file/{node_id}"


def item_description(node) -> str:
    """Feed description, else node description, else ``"<kind> file: <name>"``."""
    return node.feed_description or node.description or f"{node.primary_type} file: {node.name}"


def _author_name(settings) -> str:
    return settings.author_name or settings.site_title


def _owner_name(settings) -> str:
    return settings.owner_name or settings.author_name or settings.site_title


def _owner_email(settings) -> str:
    return settings.owner_email or settings.author_email or settings.site_url


def _build_date(items: Sequence, now: Optional[datetime]) -> datetime:
    if items:
        return as_utc(items[0].effective_publish_date)
    return as_utc(now) if now else utcnow()


def _rounded(value: Optional[float]) -> Optional[int]:
    return int(round(value)) if value else None


# ----------------------------------------------------------------------
# RSS 2.0
# ----------------------------------------------------------------------

def render_xml(items: Sequence, context: FeedContext, settings, now: Optional[datetime] = None) -> str:
    """Render *items* (already ordered and truncated) as an RSS 2.0 document."""
    site_url = settings.site_url
    title = escape(context.title)
    description = escape(context.description or NO_DESCRIPTION)
    build_date = rfc822(_build_date(items, now))

    namespaces = "".join(f'\n     xmlns:{prefix}="{uri}"' for prefix, uri in RSS_NAMESPACES)
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<rss version="2.0"{namespaces}>',
        "  <channel>",
        f"    <title>{title}</title>",
        f"    <link>{escape(context.link)}</link>",
        f"    <description>{description}</description>",
        f"    <language>{escape(settings.language)}</language>",
        f"    <lastBuildDate>{build_date}</lastBuildDate>",
        f"    <pubDate>{build_date}</pubDate>",
        f"    <generator>{GENERATOR}</generator>",
        f"    <managingEditor>{escape(settings.author_email or site_url)} ({escape(_author_name(settings))})</managingEditor>",
        f"    <webMaster>{escape(settings.owner_email or site_url)} ({escape(settings.owner_name or settings.site_title)})</webMaster>",
        f"    <category>{DEFAULT_CATEGORY}</category>",
        f"    <ttl>{FEED_TTL_MINUTES}</ttl>",
        "    <image>",
        f"      <url>{escape(site_url)}{LOGO_PATH}</url>",
        f"      <title>{title}</title>",
        f"      <link>{escape(site_url)}</link>",
        "    </image>",
        f'    <atom:link href="{escape(context.self_url)}" rel="self" type="application/rss+xml" />',
    ]

    if any(node.primary_type in PODCAST_TYPES for node in items):
        author = escape(_author_name(settings))
        owner_email = escape(_owner_email(settings))
        lines.extend([
            f"    <itunes:summary>{description}</itunes:summary>",
            f"    <itunes:author>{author}</itunes:author>",
            "    <itunes:owner>",
            f"      <itunes:name>{escape(_owner_name(settings))}</itunes:name>",
            f"      <itunes:email>{owner_email}</itunes:email>",
            "    </itunes:owner>",
            f'    <itunes:category text="{DEFAULT_CATEGORY}" />',
            f"    <googleplay:description>{description}</googleplay:description>",
            f"    <googleplay:author>{author}</googleplay:author>",
            f"    <googleplay:owner>{owner_email}</googleplay:owner>",
            f'    <googleplay:category text="{DEFAULT_CATEGORY}" />',
        ])

    for node in items:
        lines.extend(_xml_item(node, settings))

    lines.extend(["  </channel>", "</rss>"])
    return "\n".join(lines) + "\n"


def _xml_item(node, settings) -> List[str]:
    url = escape(item_url(settings.site_url, node.id))
    text = item_description(node)
    lines = [
        "    <item>",
        f"      <title>{escape(node.feed_title or node.name)}</title>",
        f"      <link>{url}</link>",
        f"      <description>{cdata(text)}</description>",
        f"      <pubDate>{rfc822(node.effective_publish_date)}</pubDate>",
        f'      <guid isPermaLink="false">{escape(node.feed_guid or node.id)}</guid>',
    ]
    if node.feed_category:
        lines.append(f"      <category>{escape(node.feed_category)}</category>")

    if node.primary_type in MEDIA_TYPES:
        mime = escape(node.mime_type)
        size = node.size_bytes or 0
        lines.append(f'      <enclosure url="{url}" length="{size}" type="{mime}" />')
        media = f'      <media:content url="{url}" fileSize="{size}" type="{mime}"'
        duration = _rounded(node.duration_seconds)
        if duration:
            media += f' duration="{duration}"'
        if node.width and node.height:
            media += f' width="{node.width}" height="{node.height}"'
        lines.append(media + " />")

    if node.primary_type in PODCAST_TYPES:
        lines.extend([
            f"      <itunes:duration>{_rounded(node.duration_seconds) or 0}</itunes:duration>",
            f"      <itunes:summary>{escape(text)}</itunes:summary>",
            f"      <itunes:author>{escape(_author_name(settings))}</itunes:author>",
        ])

    lines.append("    </item>")
    return lines


# ----------------------------------------------------------------------
# JSON Feed 1.1
# ----------------------------------------------------------------------

def render_json(items: Sequence, context: FeedContext, settings, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Render *items* as a JSON Feed 1.1 document (a plain dict)."""
    authors = [{"name": _author_name(settings), "email": settings.author_email or ""}]
    return {
        "version": JSON_FEED_VERSION,
        "title": context.title,
        "description": context.description or NO_DESCRIPTION,
        "home_page_url": context.link,
        "feed_url": context.feed_url,
        "icon": f"{settings.site_url}{LOGO_PATH}",
        "language": settings.language,
        "authors": authors,
        "_meta": {
            "build_date": _build_date(items, now).isoformat(),
            "generator": GENERATOR,
            "ttl": FEED_TTL_MINUTES,
            "category": DEFAULT_CATEGORY,
            "owner": {"name": _owner_name(settings), "email": _owner_email(settings)},
        },
        "items": [_json_item(node, settings, authors) for node in items],
    }


def _json_item(node, settings, authors: List[Dict[str, str]]) -> Dict[str, Any]:
    url = item_url(settings.site_url, node.id)
    item: Dict[str, Any] = {
        "id": node.id,
        "title": node.feed_title or node.name,
        "content_text": item_description(node),
        "url": url,
        "date_published": as_utc(node.effective_publish_date).isoformat(),
        "tags": list(node.tags or []),
        "_guid": node.feed_guid or node.id,
        "authors": authors,
    }
    if node.feed_category:
        item["_category"] = node.feed_category

    if node.primary_type in MEDIA_TYPES:
        attachment: Dict[str, Any] = {
            "url": url,
            "mime_type": node.mime_type,
            "size_in_bytes": node.size_bytes or 0,
        }
        duration = _rounded(node.duration_seconds)
        if duration:
            attachment["duration_in_seconds"] = duration
        if node.width and node.height:
            attachment["_width"] = node.width
            attachment["_height"] = node.height
        item["attachments"] = [attachment]
    return item

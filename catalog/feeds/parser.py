"""
Product Feed Parser.

Decodes an XML product feed export into a flat list of FeedItem records.

Supported dialects:
- luigisbox: <item> records keyed by <product_code_2>, primary category in
  <category primary="true">A | B</category>
- google_merchant: RSS <item> records with g: namespaced fields, category
  in <g:product_type>A > B</g:product_type>

Items without an identity key or a name are dropped and counted. A document
that is not well-formed XML is rejected as a whole.
"""

import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Set, Tuple
from xml.etree import ElementTree as ET

from catalog.exceptions import FeedParseError

logger = logging.getLogger(__name__)


GOOGLE_NS = {"g": "http://base.google.com/ns/1.0"}

TAG_RE = re.compile(r"<[^>]*>")
WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class FeedDialect:
    """
    Field naming scheme of one feed vendor.

    Each attribute holds an ElementTree path relative to the item element.
    """

    name: str
    identity_key: str
    title: str
    description: str
    image: str
    product_url: str
    price: str
    availability: str
    brand: str
    gtin: str
    category: str
    category_delimiter: str
    item_tag: str = "item"
    namespaces: Dict[str, str] = field(default_factory=dict)


LUIGISBOX = FeedDialect(
    name="luigisbox",
    identity_key="product_code_2",
    title="title",
    description="description",
    # Large image variant
    image="image_link_l",
    product_url="url",
    # Retail price level
    price="price_level_1",
    availability="availability_rank_text",
    brand="brand",
    gtin="ean",
    category="category[@primary='true']",
    category_delimiter="|",
)

GOOGLE_MERCHANT = FeedDialect(
    name="google_merchant",
    identity_key="g:id",
    title="title",
    description="description",
    image="g:image_link",
    product_url="link",
    price="g:price",
    availability="g:availability",
    brand="g:brand",
    gtin="g:gtin",
    category="g:product_type",
    category_delimiter=">",
    namespaces=GOOGLE_NS,
)

DIALECTS = {
    LUIGISBOX.name: LUIGISBOX,
    GOOGLE_MERCHANT.name: GOOGLE_MERCHANT,
}


def get_dialect(name: Optional[str]) -> FeedDialect:
    """Look up a feed dialect by name (default: luigisbox)."""
    if not name:
        return LUIGISBOX
    try:
        return DIALECTS[name]
    except KeyError:
        raise FeedParseError(
            f"Unknown feed dialect '{name}'. Supported: {sorted(DIALECTS)}"
        )


@dataclass
class FeedItem:
    """
    One product record from a feed pull.

    Attributes:
        external_id: Identity key (SKU) used to match catalog products
        name: Display name
        price: Retail price, None when missing or unparseable
        product_type: Raw primary category string
        feed_category: Main category (part before the delimiter)
        feed_subcategory: Subcategory (part after the delimiter)
    """

    external_id: str
    name: str
    description: str = ""
    image: str = ""
    price: Optional[Decimal] = None
    product_url: str = ""
    availability: str = ""
    brand: str = ""
    gtin: str = ""
    product_type: str = ""
    feed_category: str = ""
    feed_subcategory: str = ""


@dataclass
class FeedParseResult:
    """
    Result of parsing a feed document.

    Attributes:
        items: Valid items in feed order (duplicates kept)
        skipped: Number of items dropped for missing identity key or name
        duplicate_keys: Number of items whose key already appeared earlier
        source_url: URL the document was fetched from
        parse_errors: Non-fatal problems encountered while parsing
    """

    items: List[FeedItem]
    skipped: int = 0
    duplicate_keys: int = 0
    source_url: str = ""
    parse_errors: List[str] = field(default_factory=list)

    @property
    def identity_keys(self) -> Set[str]:
        return {item.external_id for item in self.items}

    @property
    def total_items(self) -> int:
        return len(self.items)


def split_category(
    category_text: Optional[str], delimiter: str
) -> Tuple[str, str]:
    """
    Split a primary category string into (main, sub).

    "Teas | Loose teas" -> ("Teas", "Loose teas"); a string without the
    delimiter yields only a main category.
    """
    if not category_text:
        return "", ""

    parts = [part.strip() for part in category_text.split(delimiter)]
    main = parts[0] if parts else ""
    sub = parts[1] if len(parts) > 1 else ""
    return main, sub


def parse_price(price_text: Optional[str]) -> Optional[Decimal]:
    """
    Parse a price string such as "1 299,00 Kč" or "12.50 CZK".
    """
    if not price_text:
        return None

    cleaned = re.sub(r"[^\d.,]", "", price_text)
    # The right-most separator is the decimal separator
    if cleaned.rfind(",") > cleaned.rfind("."):
        cleaned = cleaned.replace(".", "").replace(",", ".")
    else:
        cleaned = cleaned.replace(",", "")

    if not cleaned:
        return None

    try:
        return Decimal(cleaned).quantize(Decimal("0.01"))
    except InvalidOperation:
        return None


def strip_markup(text: Optional[str]) -> str:
    """Remove HTML tags and collapse whitespace."""
    if not text:
        return ""
    return WHITESPACE_RE.sub(" ", TAG_RE.sub("", text)).strip()


class FeedParser:
    """
    Parser for XML product feeds.
    """

    def __init__(self, dialect: Optional[str] = None):
        """
        Initialize the parser.

        Args:
            dialect: Name of the feed dialect (see DIALECTS)
        """
        self.dialect = get_dialect(dialect)

    def parse(self, content, source_url: str = "") -> FeedParseResult:
        """
        Parse a feed document.

        Args:
            content: XML document as bytes or str
            source_url: URL of the feed (for logging and tracking)

        Returns:
            FeedParseResult with items in feed order

        Raises:
            FeedParseError: If the document is not well-formed XML
        """
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise FeedParseError(f"Invalid feed XML: {e}", feed_url=source_url)

        items = []
        parse_errors = []
        skipped = 0
        duplicate_keys = 0
        seen_keys = set()

        for item_elem in root.iter(self.dialect.item_tag):
            item = self._parse_item(item_elem, parse_errors)
            if item is None:
                skipped += 1
                continue

            if item.external_id in seen_keys:
                duplicate_keys += 1
            seen_keys.add(item.external_id)
            items.append(item)

        if skipped:
            logger.warning(
                f"Dropped {skipped} feed items without identity key or name ({source_url})"
            )
        if duplicate_keys:
            logger.warning(
                f"Feed contains {duplicate_keys} duplicate identity keys; "
                f"last occurrence wins ({source_url})"
            )

        logger.info(
            f"Parsed {len(items)} items from {self.dialect.name} feed {source_url}"
        )

        return FeedParseResult(
            items=items,
            skipped=skipped,
            duplicate_keys=duplicate_keys,
            source_url=source_url,
            parse_errors=parse_errors,
        )

    def _parse_item(
        self, item_elem: ET.Element, parse_errors: List[str]
    ) -> Optional[FeedItem]:
        """Parse a single item element, returning None if it must be dropped."""
        dialect = self.dialect

        external_id = self._text(item_elem, dialect.identity_key)
        name = self._text(item_elem, dialect.title)
        if not external_id or not name:
            return None

        price_text = self._text(item_elem, dialect.price)
        price = parse_price(price_text)
        if price_text and price is None:
            parse_errors.append(f"Invalid price for {external_id}: {price_text}")

        category_text = self._text(item_elem, dialect.category)
        feed_category, feed_subcategory = split_category(
            category_text, dialect.category_delimiter
        )

        return FeedItem(
            external_id=external_id,
            name=name,
            description=self._text(item_elem, dialect.description),
            image=self._text(item_elem, dialect.image),
            price=price,
            product_url=self._text(item_elem, dialect.product_url),
            availability=strip_markup(self._text(item_elem, dialect.availability)),
            brand=self._text(item_elem, dialect.brand),
            gtin=self._text(item_elem, dialect.gtin),
            product_type=category_text,
            feed_category=feed_category,
            feed_subcategory=feed_subcategory,
        )

    def _text(self, item_elem: ET.Element, path: str) -> str:
        """Return the stripped text content of the first element at path."""
        elem = item_elem.find(path, self.dialect.namespaces)
        if elem is None:
            return ""
        return "".join(elem.itertext()).strip()

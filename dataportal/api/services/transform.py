"""
Result Transformer
Applies the result stylesheet to the XML document of each search hit.
"""

import logging
import re
import threading
from pathlib import Path
from typing import Union

from lxml import etree
from markupsafe import Markup

from ..errors import TransformError
from ..models.search import SearchResponseItem

logger = logging.getLogger(__name__)

XML_HEADER = '<?xml version="1.0" encoding="UTF-8" ?>'
_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")


class ResultTransformer:
    """
    Renders search hits to HTML fragments through an XSLT stylesheet.

    The stylesheet receives the hit's relevance score as the ``score``
    parameter. Compiled stylesheets are kept per thread.
    """

    def __init__(self, stylesheet_path: Union[str, Path]):
        """
        Load and compile the stylesheet.

        Args:
            stylesheet_path: Path to the XSLT file

        Raises:
            TransformError: If the stylesheet cannot be read or compiled
        """
        self.stylesheet_path = Path(stylesheet_path)
        self._local = threading.local()
        try:
            self._stylesheet = etree.parse(str(self.stylesheet_path))
            self._local.xslt = etree.XSLT(self._stylesheet)
        except (OSError, etree.XMLSyntaxError, etree.XSLTParseError) as e:
            raise TransformError(
                message=f"Failed to load stylesheet: {e}",
                details={"stylesheet": str(self.stylesheet_path)},
            ) from e
        logger.info(f"Loaded result stylesheet: {self.stylesheet_path}")

    @property
    def _xslt(self) -> etree.XSLT:
        xslt = getattr(self._local, "xslt", None)
        if xslt is None:
            xslt = self._local.xslt = etree.XSLT(self._stylesheet)
        return xslt

    @staticmethod
    def parse(xml: str) -> etree._Element:
        """
        Parse a hit's XML text.

        The text is given a UTF-8 XML header (replacing any declaration it
        carries) so its encoding is known to the parser.
        """
        body = _XML_DECLARATION.sub("", xml, count=1)
        data = (XML_HEADER + body).encode("utf-8")
        parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)
        return etree.fromstring(data, parser)

    def transform(self, xml: str, score: float) -> Markup:
        """
        Transform an XML document to an HTML fragment.

        Raises:
            etree.XMLSyntaxError: If the document is not well-formed
            TransformError: If the stylesheet fails on the document
        """
        doc = self.parse(xml)
        try:
            result = self._xslt(doc, score=etree.XSLT.strparam(str(score)))
        except etree.XSLTApplyError as e:
            raise TransformError(
                message=f"Stylesheet failed: {e}",
                details={"stylesheet": str(self.stylesheet_path)},
            ) from e
        return Markup(str(result))

    def render_item(self, item: SearchResponseItem) -> Markup:
        """Render a hit, falling back to an escaped placeholder for unusable XML."""
        if not item.xml:
            return Markup('<li class="missing">No document available {}</li>').format(
                item.identifier or ""
            )
        try:
            return self.transform(item.xml, item.score)
        except etree.XMLSyntaxError as e:
            logger.warning(
                f"Unparseable result document: {e}",
                extra={"identifier": item.identifier},
            )
            return Markup('<li class="unparseable">Unparseable result document {}</li>').format(
                item.identifier or ""
            )

"""Generic node tree construction for JUnit report ingestion.

This module turns a token stream into a tree of GenericNode objects. Report
documents frequently have no single root element (several ``<testsuite>``
elements concatenated, or nothing at all), which the XML grammar forbids. The
parser therefore wraps the document in a synthetic root element and returns
that root's children.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from junit_ingest.character.encoding import decode_document
from junit_ingest.shared.errors import ParseError
from junit_ingest.shared.logging import get_logger
from junit_ingest.tokenization import (
    Token,
    TokenizationResult,
    TokenType,
    XMLTokenizer,
)

SYNTHETIC_ROOT_TAG = "junit-ingest-synthetic-root"
_SYNTHETIC_OPEN = f"<{SYNTHETIC_ROOT_TAG}>"
_SYNTHETIC_CLOSE = f"</{SYNTHETIC_ROOT_TAG}>"

# Tokens that contribute to an element's raw content
_CONTENT_TOKENS = (TokenType.TEXT, TokenType.CDATA)


def local_name(name: str) -> str:
    """Strip a namespace prefix from a qualified name."""
    return name.rsplit(":", 1)[-1]


def _is_namespace_declaration(name: str) -> bool:
    return name == "xmlns" or name.startswith("xmlns:")


@dataclass
class GenericNode:
    """A decoded element: tag, attributes, children and raw content.

    ``content`` holds the text and CDATA source exactly as written, encoded as
    UTF-8. It is only populated for elements without element children.
    """

    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["GenericNode"] = field(default_factory=list)
    content: bytes = b""

    @property
    def has_children(self) -> bool:
        """Check if this node has element children."""
        return bool(self.children)

    def find_child(self, tag: str) -> Optional["GenericNode"]:
        """Find first direct child with matching tag name."""
        for child in self.children:
            if child.tag == tag:
                return child
        return None

    def find_children(self, tag: str) -> List["GenericNode"]:
        """Find all direct children with matching tag name."""
        return [child for child in self.children if child.tag == tag]


@dataclass
class _OpenElement:
    """Bookkeeping for an element whose close tag has not been seen yet."""

    node: GenericNode
    token: Token
    content_parts: List[str] = field(default_factory=list)


class NodeTreeBuilder:
    """Builds a GenericNode tree from a token stream.

    The token stream must start with the synthetic root's start tag and end
    with its close tag, as produced by tokenizing :func:`reparent` output.
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        """Initialize tree builder.

        Args:
            correlation_id: Optional correlation ID for request tracking
        """
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "node_tree_builder")

        self._element_stack: List[_OpenElement] = []
        self._root: Optional[GenericNode] = None
        self._elements_created = 0

    def _reset_state(self) -> None:
        self._element_stack.clear()
        self._root = None
        self._elements_created = 0

    @property
    def elements_created(self) -> int:
        """Number of elements created by the last build, synthetic root included."""
        return self._elements_created

    def build(self, tokens: Union[TokenizationResult, List[Token]]) -> GenericNode:
        """Build the node tree.

        Args:
            tokens: Either TokenizationResult or list of tokens to process

        Returns:
            The synthetic root node

        Raises:
            ParseError: On mismatched, unexpected or unclosed tags
        """
        token_list = tokens.tokens if isinstance(tokens, TokenizationResult) else tokens
        self._reset_state()

        for token in token_list:
            self._process_token(token)

        if self._element_stack:
            unclosed = self._element_stack[-1]
            raise self._error(f"element <{unclosed.token.value}> is not closed", unclosed.token)
        if self._root is None:
            raise ParseError("document has no root element")

        self.logger.debug(
            "Tree building completed",
            extra={"element_count": self._elements_created}
        )
        return self._root

    def _process_token(self, token: Token) -> None:
        if token.type == TokenType.START_TAG:
            self._open_element(token)
        elif token.type == TokenType.EMPTY_TAG:
            self._open_element(token)
            self._close_element(token)
        elif token.type == TokenType.END_TAG:
            self._close_element(token)
        elif token.type in _CONTENT_TOKENS:
            self._add_content(token)
        # Comments, processing instructions and DOCTYPE carry no report data

    def _open_element(self, token: Token) -> None:
        if self._root is not None and not self._element_stack:
            raise self._error(f"unexpected element <{token.value}> after document end", token)

        node = GenericNode(
            tag=local_name(token.value),
            attributes={
                local_name(name): value
                for name, value in token.attributes.items()
                if not _is_namespace_declaration(name)
            },
        )
        self._elements_created += 1

        if self._element_stack:
            self._element_stack[-1].node.children.append(node)
        else:
            self._root = node
        self._element_stack.append(_OpenElement(node=node, token=token))

    def _close_element(self, token: Token) -> None:
        if not self._element_stack:
            raise self._error(f"unexpected close tag </{token.value}>", token)

        current = self._element_stack[-1]
        if current.token.value != token.value:
            if current.token.value == SYNTHETIC_ROOT_TAG:
                raise self._error(f"unexpected close tag </{token.value}>", token)
            if token.value == SYNTHETIC_ROOT_TAG:
                raise self._error(
                    f"element <{current.token.value}> is not closed", current.token
                )
            raise self._error(
                f"mismatched close tag: expected </{current.token.value}>, "
                f"found </{token.value}>",
                token,
            )

        self._element_stack.pop()
        if not current.node.children:
            current.node.content = "".join(current.content_parts).encode("utf-8")

    def _add_content(self, token: Token) -> None:
        if not self._element_stack:
            if token.type != TokenType.TEXT or token.value.strip():
                raise self._error("content after document end", token)
            return

        current = self._element_stack[-1]
        if current.token.value == SYNTHETIC_ROOT_TAG:
            # Text between top-level elements is not part of any node
            if token.value.strip():
                self.logger.warning(
                    "Discarding top-level text",
                    extra={"offset": token.position.offset}
                )
            return

        current.content_parts.append(token.raw)

    @staticmethod
    def _error(message: str, token: Token) -> ParseError:
        return ParseError(
            message,
            line=token.position.line,
            column=token.position.column,
            offset=token.position.offset,
        )


def reparent(text: str) -> str:
    """Wrap document text in the synthetic root element."""
    return f"{_SYNTHETIC_OPEN}{text}{_SYNTHETIC_CLOSE}"


def parse(
    raw: Optional[bytes],
    correlation_id: Optional[str] = None,
    encoding: Optional[str] = None,
) -> List[GenericNode]:
    """Decode raw report bytes into the list of top-level nodes.

    Blank input, input without any element markup and input with several
    top-level elements are all accepted.

    Args:
        raw: Raw document bytes
        correlation_id: Optional correlation ID for request tracking
        encoding: Known encoding of ``raw``, overriding the XML declaration

    Returns:
        Top-level nodes in document order

    Raises:
        ParseError: If the bytes are not well-formed markup

    Examples:
        >>> [node.tag for node in parse(b"<testsuite/><testsuite/>")]
        ['testsuite', 'testsuite']
        >>> parse(b"not xml at all")
        []
    """
    start_time = time.time()
    logger = get_logger(__name__, correlation_id, "parse")

    if not raw:
        return []

    document = decode_document(bytes(raw), encoding)
    wrapped = reparent(document.text)
    tokenizer = XMLTokenizer(correlation_id=correlation_id)
    tokens = tokenizer.tokenize(
        wrapped,
        origin=len(_SYNTHETIC_OPEN),
        end=len(wrapped) - len(_SYNTHETIC_CLOSE),
    )
    root = NodeTreeBuilder(correlation_id=correlation_id).build(tokens)

    logger.debug(
        "Parsed document",
        extra={
            "encoding": document.encoding,
            "top_level_nodes": len(root.children),
            "processing_time_ms": (time.time() - start_time) * 1000,
        }
    )
    return root.children

"""Graphviz DOT reader.

Reads the subset of the DOT language used for hand-authored state and
transition graphs into a :class:`~tracegen.core.graph.DirectedGraph`.

Each ``A -> B`` relation becomes one edge. The edge label is the edge
statement's ``label`` attribute when present, otherwise the destination
vertex's identifier. Chains (``A -> B -> C``) produce one edge per
consecutive pair, and a subgraph used as an endpoint stands for every
vertex it declares.

Everything else the language allows (graph/node/edge attribute statements,
ports, ``id = id`` assignments) is accepted and ignored.

Example:
    >>> graph = parse_dot('digraph { idle -> busy [label="start"]; busy -> idle }')
    >>> list(graph.edges())
    [('idle', 'busy', 'start'), ('busy', 'idle', 'idle')]
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

from tracegen.core.graph import DirectedGraph
from tracegen.errors import DotSyntaxError, ErrorContext, SourceFileError

logger = logging.getLogger(__name__)

KEYWORDS = frozenset({"strict", "graph", "digraph", "node", "edge", "subgraph"})

_TOKEN_PATTERNS = [
    ("NEWLINE", r"\n"),
    ("SKIP", r"[ \t\r\f\v]+"),
    ("LINE_COMMENT", r"//[^\n]*"),
    ("BLOCK_COMMENT", r"/\*.*?\*/"),
    ("EDGE_OP", r"->|--"),
    ("NUMERAL", r"-?(?:\.[0-9]+|[0-9]+(?:\.[0-9]*)?)"),
    ("ID", r"[A-Za-z_\u0080-\uffff][A-Za-z0-9_\u0080-\uffff]*"),
    ("STRING", r'"(?:\\.|[^"\\])*"'),
    ("HTML_OPEN", r"<"),
    ("PUNCT", r"[{}\[\];,=:+]"),
    ("MISMATCH", r"."),
]
_TOKEN_RE = re.compile(
    "|".join(f"(?P<{name}>{pattern})" for name, pattern in _TOKEN_PATTERNS),
    re.DOTALL,
)


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    line: int
    column: int

    def is_keyword(self, keyword: str) -> bool:
        return self.kind == "ID" and self.value.lower() == keyword

    def is_punct(self, value: str) -> bool:
        return self.kind in ("PUNCT", "EDGE_OP") and self.value == value


def _unquote(literal: str) -> str:
    return literal[1:-1].replace('\\"', '"').replace("\\\n", "")


def tokenize(text: str) -> list[Token]:
    """Split DOT source into tokens, dropping whitespace and comments.

    Raises:
        DotSyntaxError: On characters outside the DOT lexicon or an
            unterminated HTML string.
    """
    tokens: list[Token] = []
    line = 1
    line_start = 0
    pos = 0
    at_line_start = True

    while pos < len(text):
        # '#' lines are C preprocessor output and are skipped
        if at_line_start and text.startswith("#", pos):
            end = text.find("\n", pos)
            pos = len(text) if end == -1 else end
            continue

        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise DotSyntaxError("Unreadable input", line=line, column=pos - line_start + 1)
        kind = match.lastgroup or "MISMATCH"
        value = match.group()
        column = pos - line_start + 1

        if kind == "NEWLINE":
            line += 1
            line_start = match.end()
            at_line_start = True
            pos = match.end()
            continue
        if kind == "SKIP":
            pos = match.end()
            continue
        at_line_start = False

        if kind in ("LINE_COMMENT", "BLOCK_COMMENT"):
            line += value.count("\n")
            if "\n" in value:
                line_start = pos + value.rfind("\n") + 1
            pos = match.end()
            continue

        if kind == "HTML_OPEN":
            end = _match_html(text, pos)
            if end is None:
                raise DotSyntaxError("Unterminated HTML string", line=line, column=column)
            value = text[pos:end]
            tokens.append(Token("HTML", value[1:-1], line, column))
            line += value.count("\n")
            if "\n" in value:
                line_start = pos + value.rfind("\n") + 1
            pos = end
            continue

        if kind == "MISMATCH":
            if value == '"':
                raise DotSyntaxError("Unterminated string", line=line, column=column)
            raise DotSyntaxError(f"Unexpected character {value!r}", line=line, column=column)

        if kind == "STRING":
            tokens.append(Token("STRING", _unquote(value), line, column))
            line += value.count("\n")
            if "\n" in value:
                line_start = pos + value.rfind("\n") + 1
        else:
            tokens.append(Token(kind, value, line, column))
        pos = match.end()

    return tokens


def _match_html(text: str, start: int) -> int | None:
    depth = 0
    for index in range(start, len(text)):
        char = text[index]
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
            if depth == 0:
                return index + 1
    return None


class DotReader:
    """Recursive-descent reader that fills a DirectedGraph from DOT tokens.

    `graph` and `digraph` are read alike: an undirected `a -- b` edge is
    added in the `a` to `b` direction only.

    Usage:
        graph = DotReader(text).read()
    """

    def __init__(self, text: str, source: str | None = None) -> None:
        self.source = source
        self.tokens = tokenize(text)
        self.pos = 0
        self.graph: DirectedGraph[str, str] = DirectedGraph()
        self.graph_id: str | None = None

    # -- token helpers ----------------------------------------------------

    def _peek(self, offset: int = 0) -> Token | None:
        index = self.pos + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def _advance(self) -> Token:
        token = self._peek()
        if token is None:
            self._fail("Unexpected end of input")
        self.pos += 1
        return token

    def _fail(self, message: str, token: Token | None = None) -> NoReturn:
        token = token or self._peek()
        if token is None and self.tokens:
            last = self.tokens[-1]
            line, column = last.line, last.column + len(last.value)
        elif token is not None:
            line, column = token.line, token.column
        else:
            line, column = 1, 1
        raise DotSyntaxError(
            message,
            line=line,
            column=column,
            context=ErrorContext(source_path=self.source),
        )

    def _accept_punct(self, value: str) -> bool:
        token = self._peek()
        if token is not None and token.is_punct(value):
            self.pos += 1
            return True
        return False

    def _expect_punct(self, value: str) -> None:
        if not self._accept_punct(value):
            token = self._peek()
            found = repr(token.value) if token else "end of input"
            self._fail(f"Expected {value!r}, found {found}")

    def _at_identifier(self) -> bool:
        token = self._peek()
        if token is None:
            return False
        if token.kind == "ID":
            return token.value.lower() not in KEYWORDS
        return token.kind in ("NUMERAL", "STRING", "HTML")

    def _identifier(self) -> str:
        if not self._at_identifier():
            token = self._peek()
            found = repr(token.value) if token else "end of input"
            self._fail(f"Expected an identifier, found {found}")
        token = self._advance()
        value = token.value
        # "a" + "b" concatenation applies to double-quoted strings only
        while token.kind == "STRING" and self._peek() is not None and self._peek().is_punct("+"):  # type: ignore[union-attr]
            self.pos += 1
            token = self._advance()
            if token.kind != "STRING":
                self._fail("Only quoted strings can be concatenated with '+'", token)
            value += token.value
        return value

    # -- grammar ----------------------------------------------------------

    def read(self) -> DirectedGraph[str, str]:
        """Read one graph and return it.

        Raises:
            DotSyntaxError: If the input is not a well-formed DOT graph.
        """
        token = self._peek()
        if token is not None and token.is_keyword("strict"):
            self.pos += 1
            token = self._peek()

        if token is None or not (token.is_keyword("graph") or token.is_keyword("digraph")):
            self._fail("Expected 'graph' or 'digraph'")
        self.pos += 1

        if self._at_identifier():
            self.graph_id = self._identifier()

        self._expect_punct("{")
        self._statement_list()
        self._expect_punct("}")

        if self._peek() is not None:
            self._fail("Unexpected content after graph body")

        logger.debug(
            "Read graph %s: %d vertices, %d edges",
            self.graph_id or "<anonymous>",
            len(self.graph),
            self.graph.edge_count,
        )
        return self.graph

    def _statement_list(self) -> list[str]:
        """Read statements up to the closing brace; return declared vertices."""
        declared: list[str] = []
        while True:
            token = self._peek()
            if token is None or token.is_punct("}"):
                return declared
            for vertex in self._statement():
                if vertex not in declared:
                    declared.append(vertex)
            while self._accept_punct(";") or self._accept_punct(","):
                pass

    def _statement(self) -> list[str]:
        token = self._peek()
        if token is None:
            self._fail("Unexpected end of input")

        if token.is_keyword("graph") or token.is_keyword("node") or token.is_keyword("edge"):
            self.pos += 1
            self._attribute_lists(required=True)
            return []

        if token.is_keyword("subgraph") or token.is_punct("{"):
            vertices = self._subgraph()
            if self._at_edge_operator():
                return self._edge_statement(vertices)
            return vertices

        if self._at_identifier():
            next_token = self._peek(1)
            if next_token is not None and next_token.is_punct("="):
                self._identifier()
                self.pos += 1
                self._identifier()
                return []

            vertex = self._vertex_id()
            if self._at_edge_operator():
                return self._edge_statement([vertex])

            self._attribute_lists(required=False)
            self.graph.add_vertex(vertex)
            return [vertex]

        self._fail(f"Unexpected token {token.value!r}", token)

    def _vertex_id(self) -> str:
        vertex = self._identifier()
        # ports (":port" and ":port:compass") do not change the identity
        while self._accept_punct(":"):
            self._identifier()
        return vertex

    def _subgraph(self) -> list[str]:
        if self._peek() is not None and self._peek().is_keyword("subgraph"):  # type: ignore[union-attr]
            self.pos += 1
            if self._at_identifier():
                self._identifier()
        self._expect_punct("{")
        vertices = self._statement_list()
        self._expect_punct("}")
        return vertices

    def _at_edge_operator(self) -> bool:
        token = self._peek()
        return token is not None and token.kind == "EDGE_OP"

    def _edge_statement(self, first: list[str]) -> list[str]:
        groups = [first]
        while self._at_edge_operator():
            self.pos += 1
            token = self._peek()
            if token is not None and (token.is_keyword("subgraph") or token.is_punct("{")):
                groups.append(self._subgraph())
            else:
                groups.append([self._vertex_id()])

        attributes = self._attribute_lists(required=False)
        label = attributes.get("label")

        declared: list[str] = []
        for sources, targets in zip(groups, groups[1:]):
            for source in sources:
                for target in targets:
                    self.graph.add_edge(source, target, label if label is not None else target)
        for group in groups:
            for vertex in group:
                if vertex not in declared:
                    declared.append(vertex)
        return declared

    def _attribute_lists(self, required: bool) -> dict[str, str]:
        """Read ``[k=v, ...]`` lists; the first value seen for a key wins."""
        attributes: dict[str, str] = {}
        token = self._peek()
        if required and (token is None or not token.is_punct("[")):
            self._fail("Expected '['")

        while self._accept_punct("["):
            while not self._accept_punct("]"):
                key = self._identifier()
                if self._accept_punct("="):
                    value = self._identifier()
                else:
                    value = "true"
                attributes.setdefault(key, value)
                while self._accept_punct(";") or self._accept_punct(","):
                    pass
        return attributes


def parse_dot(text: str, source: str | None = None) -> DirectedGraph[str, str]:
    """Parse DOT source text into a DirectedGraph.

    Args:
        text: The DOT source.
        source: Optional path used in error messages.

    Raises:
        DotSyntaxError: If the text is not a well-formed DOT graph.
    """
    try:
        return DotReader(text, source=source).read()
    except DotSyntaxError as e:
        if source and not e.context.source_path:
            e.context.source_path = source
        raise


def load_dot(path: str | Path) -> DirectedGraph[str, str]:
    """Read and parse a DOT file.

    Raises:
        SourceFileError: If the file cannot be read.
        DotSyntaxError: If the file is not a well-formed DOT graph.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SourceFileError(
            f"Cannot read graph file: {path}",
            context=ErrorContext(source_path=str(path)),
            cause=e,
        ) from e
    return parse_dot(text, source=str(path))

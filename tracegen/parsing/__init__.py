"""Readers that turn graph descriptions into DirectedGraphs."""

from tracegen.parsing.dot import DotReader, Token, load_dot, parse_dot, tokenize

__all__ = ["DotReader", "Token", "load_dot", "parse_dot", "tokenize"]

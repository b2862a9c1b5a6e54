"""Tokenization engine for JUnit report ingestion.

This module converts decoded document text into markup tokens using a strict
scanner that rejects malformed markup with positioned diagnostics.

Key Components:
    XMLTokenizer: Main tokenization class
    Token: Represents individual XML tokens with position and raw source
    TokenType: Enumeration of all supported XML token types
    TokenPosition: Position tracking for error reporting
"""

from .tokenizer import (
    Token,
    TokenizationResult,
    TokenPosition,
    TokenType,
    XMLTokenizer,
)

__all__ = [
    "Token",
    "TokenPosition",
    "TokenType",
    "TokenizationResult",
    "XMLTokenizer",
]

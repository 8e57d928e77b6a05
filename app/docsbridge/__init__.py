"""docsbridge -- relays chat questions to DocsBot and posts the answers back."""

__version__ = "1.2.0"

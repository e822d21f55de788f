"""Streaming CommerceML parser.

Reads arbitrarily large XML documents in a single pass and delivers the
subtrees selected by path-based collection rules as soon as each one closes.

Progressive API Disclosure:
- Level 1: Simple functions - parse_file(), parse_string(), parse_events()
- Level 2: Rule engine - StreamingRuleParser with Rule definitions
- Level 3: Typed CommerceML parsers - OffersParser, OrdersParser
"""

__version__ = "0.1.0"
__author__ = "CommerceML Stream Team"

# Level 1: Simple functions
from .api import parse_events, parse_file, parse_string, records_as_dicts

# Level 3: Typed document parsers
from .commerceml import OffersParser, OrdersParser

# Configuration classes for advanced usage
from .shared.config import CollectorConfig, ParserConfig, StreamingConfig

# Level 2: Rule engine and record structure
from .streaming import ElementNode, Many, Rule, Single, StreamingRuleParser, TextNode

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse_events",
    "parse_file",
    "parse_string",
    "records_as_dicts",

    # Level 2: Rule engine
    "Rule",
    "StreamingRuleParser",

    # Record structure
    "ElementNode",
    "TextNode",
    "Single",
    "Many",

    # Level 3: CommerceML parsers
    "OffersParser",
    "OrdersParser",

    # Configuration classes for advanced usage
    "CollectorConfig",
    "ParserConfig",
    "StreamingConfig",
]

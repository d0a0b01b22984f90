"""Social Recipe Extractor.

Extracts structured recipes from short-form social media posts using
provider failover, confidence-gated AI extraction and a visual fallback.
"""

__version__ = "0.1.0"

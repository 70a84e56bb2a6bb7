"""basic-retrieval - exact semantic retrieval for grounding assistant answers"""

__version__ = "0.1.0"

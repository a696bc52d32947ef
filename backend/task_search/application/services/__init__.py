from .fuzzy_matcher import FuzzyMatcher, TaskDocument
from .lexicon import Lexicon, LexiconRegistry, LexiconSnapshot, SynonymTable
from .llm_semantic_search import LLMSemanticSearchProvider
from .query_expander import QueryExpander
from .search_service import SearchService
from .text_normalizer import TextNormalizer, normalize

__all__ = [
    "FuzzyMatcher",
    "TaskDocument",
    "Lexicon",
    "LexiconRegistry",
    "LexiconSnapshot",
    "SynonymTable",
    "LLMSemanticSearchProvider",
    "QueryExpander",
    "SearchService",
    "TextNormalizer",
    "normalize",
]

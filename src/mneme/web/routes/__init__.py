"""Web routes for Mneme."""

from mneme.web.routes.languages import router as languages_router
from mneme.web.routes.reviews import router as reviews_router
from mneme.web.routes.stats import router as stats_router
from mneme.web.routes.vocabulary import router as vocabulary_router

__all__ = ["languages_router", "reviews_router", "stats_router", "vocabulary_router"]

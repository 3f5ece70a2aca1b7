from .answers import router as answers_router
from .questions import router as questions_router
from .search import router as search_router
from .stats import router as stats_router
from .upload import router as upload_router

__all__ = [
    "answers_router",
    "questions_router",
    "search_router",
    "stats_router",
    "upload_router",
]

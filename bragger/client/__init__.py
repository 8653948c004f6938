from bragger.client.api import ApiError, BraggerClient, build_query
from bragger.client.cache import QueryCache
from bragger.client.forms import AchievementForm
from bragger.client.queries import AchievementQueries, CategoryQueries, TagQueries

__all__ = [
    "ApiError",
    "BraggerClient",
    "build_query",
    "QueryCache",
    "AchievementForm",
    "AchievementQueries",
    "CategoryQueries",
    "TagQueries",
]

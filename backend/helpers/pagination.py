"""
Standardized pagination parameters for forum list endpoints.
"""

from typing import Annotated

from fastapi import Query

# Topics, posts, reports
PaginationSkip = Annotated[int, Query(ge=0, description="Number of records to skip")]
PaginationLimit = Annotated[
    int, Query(ge=1, le=100, description="Maximum number of records to return")
]

# Admin panel lists (users, reports)
PaginationLimitLarge = Annotated[
    int, Query(ge=1, le=200, description="Maximum number of records to return")
]

# cinedb/api/schemas.py

from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainValidator

from cinedb.core.models.movie import INT32_MAX, INT32_MIN, Runtime

# "<n> mins" string or bare integer
RuntimeField = Annotated[int, PlainValidator(Runtime.parse)]
YearField = Annotated[int, Field(ge=INT32_MIN, le=INT32_MAX)]


class MovieCreate(BaseModel):
    """Body of POST /v1/movies. Missing fields are left for validate_movie to report."""
    model_config = ConfigDict(extra="forbid", strict=True)

    title:   str = ""
    year:    YearField = 0
    runtime: RuntimeField = Runtime(0)
    genres:  Optional[List[str]] = None


class MoviePatch(BaseModel):
    """Body of PATCH /v1/movies/{id}. Absent or null keys leave the field unchanged."""
    model_config = ConfigDict(extra="forbid", strict=True)

    title:   Optional[str] = None
    year:    Optional[YearField] = None
    runtime: Optional[RuntimeField] = None
    genres:  Optional[List[str]] = None

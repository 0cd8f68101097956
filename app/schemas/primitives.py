from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints


# --- Scalar primitives ---
Meters = Annotated[float, Field(gt=0, description="meters")]
KenyanPhone = Annotated[
    str,
    StringConstraints(strip_whitespace=True, pattern=r"^\+?254\d{9}$"),
]
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class Measurement(BaseModel):
    width: Meters
    height: Meters

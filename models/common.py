# models/common.py

from typing import Optional

from pydantic import BaseModel


class MutationResult(BaseModel):
    """
    Returned by every write. ``warning`` is set when the entity change was
    saved but its history entry was not.
    """

    id: str
    history_id: Optional[str] = None
    warning: Optional[str] = None

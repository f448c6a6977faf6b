from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, ConfigDict


# Store name -> original client filename, in the order parts were processed.
NameMap = Dict[str, str]


# =========================
# Store
# =========================
class StoreEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    # False when identical content was already stored under this name
    created: bool


# =========================
# Health
# =========================
class HealthOut(BaseModel):
    ok: bool = True
    store_dir: str
    tmp_dir: str

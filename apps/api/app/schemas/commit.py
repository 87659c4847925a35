from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel

class CommitOut(BaseModel):
    commit_hash: str
    commit_message: str
    commit_author_name: str
    commit_author_avatar: str
    commit_date: Optional[datetime] = None
    summary: str = ""

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "CommitOut":
        return cls(
            commit_hash=doc["commit_hash"],
            commit_message=doc.get("commit_message", ""),
            commit_author_name=doc.get("commit_author_name", ""),
            commit_author_avatar=doc.get("commit_author_avatar", ""),
            commit_date=doc.get("commit_date"),
            summary=doc.get("summary") or "",
        )

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument

PROJECTS = "projects"
SOURCE_CODE_EMBEDDINGS = "source_code_embeddings"
COMMITS = "commits"


def to_object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if value is None:
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


class MongoEmbeddingStore:
    """
    Persistence for projects, file summaries/vectors and commit rows.

    File records are written in two steps (create_file_record, then
    set_vector) with no transaction between them; readers must accept a
    row that has a summary but no ``summary_embedding`` yet.
    """

    def __init__(self, db) -> None:
        self.db = db

    async def ensure_indexes(self) -> None:
        await self.db[PROJECTS].create_index("status")
        await self.db[PROJECTS].create_index("created_at")
        await self.db[SOURCE_CODE_EMBEDDINGS].create_index("project_id")
        # not unique: commit hashes are deduplicated before insert
        await self.db[COMMITS].create_index([("project_id", 1), ("commit_hash", 1)])

    # projects

    async def create_project(self, name: str, repo_url: str) -> Dict[str, Any]:
        now = datetime.utcnow()
        doc = {
            "name": name,
            "repo_url": repo_url,
            "status": "PENDING",
            "error": None,
            "deleted_at": None,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.db[PROJECTS].insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    async def get_project(self, project_id) -> Optional[Dict[str, Any]]:
        oid = to_object_id(project_id)
        if oid is None:
            return None
        return await self.db[PROJECTS].find_one({"_id": oid})

    async def archive_project(self, project_id) -> Optional[Dict[str, Any]]:
        oid = to_object_id(project_id)
        if oid is None:
            return None
        now = datetime.utcnow()
        return await self.db[PROJECTS].find_one_and_update(
            {"_id": oid},
            {"$set": {"deleted_at": now, "updated_at": now}},
            return_document=ReturnDocument.AFTER,
        )

    async def get_project_status(self, project_id) -> Optional[str]:
        oid = to_object_id(project_id)
        if oid is None:
            return None
        doc = await self.db[PROJECTS].find_one({"_id": oid}, projection={"status": 1})
        return doc.get("status") if doc else None

    async def set_project_status(
        self, project_id, status: str, expected: Sequence[str], error: Optional[str] = None
    ) -> bool:
        """Write ``status`` only if the stored status is one of ``expected``."""
        oid = to_object_id(project_id)
        if oid is None:
            return False
        result = await self.db[PROJECTS].update_one(
            {"_id": oid, "status": {"$in": list(expected)}},
            {"$set": {"status": status, "error": error, "updated_at": datetime.utcnow()}},
        )
        return result.modified_count == 1

    # file embeddings

    async def create_file_record(self, summary: str, source_code: str, file_name: str, project_id) -> ObjectId:
        result = await self.db[SOURCE_CODE_EMBEDDINGS].insert_one({
            "project_id": to_object_id(project_id),
            "file_name": file_name,
            "source_code": source_code,
            "summary": summary,
            "created_at": datetime.utcnow(),
        })
        return result.inserted_id

    async def set_vector(self, record_id, vector: List[float]) -> None:
        await self.db[SOURCE_CODE_EMBEDDINGS].update_one(
            {"_id": to_object_id(record_id)},
            {"$set": {"summary_embedding": list(vector)}},
        )

    # commits

    async def list_commits(self, project_id) -> List[Dict[str, Any]]:
        oid = to_object_id(project_id)
        if oid is None:
            return []
        cursor = self.db[COMMITS].find({"project_id": oid}).sort("commit_date", -1)
        return await cursor.to_list(length=None)

    async def insert_commits(self, rows: Iterable[Dict[str, Any]]) -> int:
        now = datetime.utcnow()
        docs = [
            {**row, "project_id": to_object_id(row["project_id"]), "created_at": now}
            for row in rows
        ]
        if not docs:
            return 0
        result = await self.db[COMMITS].insert_many(docs, ordered=True)
        return len(result.inserted_ids)

    async def ping(self) -> bool:
        await self.db.command("ping")
        return True

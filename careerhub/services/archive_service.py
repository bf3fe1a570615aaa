"""
Interview Analysis Archive - MongoDB document store for raw AI output.

The relational database keeps only the validated scores. Every analysis
run is also archived here with the full transcript and the model output,
so a prompt or model change can be compared against earlier runs.

Collection:
- interview_analyses
"""

from datetime import datetime
from typing import List, Optional

from pymongo.collection import Collection

from careerhub.db.mongodb import get_collection, COLLECTIONS


def serialize_doc(doc: dict) -> Optional[dict]:
    """Convert MongoDB document to JSON-serializable dict."""
    if doc is None:
        return None
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


class InterviewAnalysisArchive:
    """
    Handles archived analysis documents.
    One document per analysis run; nothing is updated in place.
    """

    def __init__(self, collection: Collection = None):
        self.collection: Collection = collection if collection is not None else get_collection(
            COLLECTIONS["interview_analyses"]
        )

    def save(self, interview_id: int, transcript: str, analysis: dict, model: str) -> str:
        """
        Archive one analysis run.

        Args:
            interview_id: relational interview ID (foreign reference)
            transcript: full transcript text sent to the model
            analysis: validated model output
            model: model name used for the run

        Returns:
            MongoDB ObjectId as string
        """
        doc = {
            "interview_id": interview_id,
            "transcript": transcript,
            "analysis": analysis,
            "model": model,
            "created_at": datetime.utcnow(),
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def get_by_interview(self, interview_id: int) -> List[dict]:
        """All archived runs for an interview, newest first."""
        cursor = self.collection.find({"interview_id": interview_id}).sort("created_at", -1)
        return [serialize_doc(doc) for doc in cursor]


_archive: InterviewAnalysisArchive = None


def get_analysis_archive() -> InterviewAnalysisArchive:
    global _archive
    if _archive is None:
        _archive = InterviewAnalysisArchive()
    return _archive

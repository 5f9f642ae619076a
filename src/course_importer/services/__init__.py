"""
Services Module - Clients for the course platform's collaborators.
==================================================================

- commit_client: Course creation (one request per import)
- enhancer: AI enhancement of optional fields
- documents: Bulk document upload and topic matching
"""

from course_importer.services.commit_client import CommitClient
from course_importer.services.documents import DocumentUploader, attach_documents, check_document
from course_importer.services.enhancer import EnhancementClient, merge_enhancement

__all__ = [
    "CommitClient",
    "EnhancementClient",
    "merge_enhancement",
    "DocumentUploader",
    "attach_documents",
    "check_document",
]

from datetime import datetime, timedelta, timezone


NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


def file_record(file_id, name=None, *, parent_id=None, is_folder=False, size=100,
                mime_type="text/plain", path=None, uploaded=NOW):
    """저장 형식(camelCase) 그대로의 File 레코드"""
    name = name or f"file-{file_id}.txt"
    return {
        "id": file_id,
        "name": name,
        "originalName": name,
        "path": "" if is_folder else (path or f"/nowhere/{name}"),
        "size": 0 if is_folder else size,
        "mimeType": "application/folder" if is_folder else mime_type,
        "isFolder": is_folder,
        "parentId": parent_id,
        "metadata": None,
        "uploadDate": uploaded.isoformat(),
        "lastModified": uploaded.isoformat(),
    }


def note_record(note_id, title="note", *, content="body", tags=None, pinned=False,
                updated=NOW):
    return {
        "id": note_id,
        "title": title,
        "content": content,
        "color": "default",
        "isPinned": pinned,
        "tags": tags or [],
        "createdAt": (updated - timedelta(days=1)).isoformat(),
        "updatedAt": updated.isoformat(),
    }



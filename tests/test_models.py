import pytest
from pydantic import ValidationError

from src.resources.service.business.utils.normalizer import (
    MAX_TAGS,
    add_tags,
    is_normalized_tag,
    normalize_tag,
    normalize_tag_list,
    split_tag_input,
)
from src.schemas.models.file import FileCreate, FileUpdate
from src.schemas.models.note import Note, NoteColor, NoteCreate, NoteUpdate


# --- Tags ---

@pytest.mark.parametrize("raw, expected", [
    ("Work", "#work"),
    ("  #Travel  ", "#travel"),
    ("machine learning", "#machineLearning"),
    ("Deep  NEURAL nets", "#deepNeuralNets"),
    ("#", ""),
    ("   ", ""),
])
def test_normalize_tag(raw, expected):
    assert normalize_tag(raw) == expected


def test_split_tag_input():
    assert split_tag_input("#work #home") == ["#work", "#home"]
    assert split_tag_input("road trip") == ["#roadTrip"]
    assert split_tag_input("##") == []
    assert split_tag_input("") == []


def test_add_tags_drops_duplicates_and_respects_cap():
    assert add_tags(["#work"], "Work #home") == ["#work", "#home"]

    full = [f"#t{i}" for i in range(MAX_TAGS)]
    assert add_tags(full, "#extra") == full

    almost = full[:-1]
    assert add_tags(almost, "#a #b #c") == almost + ["#a"]


def test_normalize_tag_list_keeps_normalized_tags_verbatim():
    assert normalize_tag_list(["#camelCase", "plain", "two words", "#camelCase"]) == [
        "#camelCase", "#plain", "#twoWords",
    ]
    assert is_normalized_tag("#ok")
    assert not is_normalized_tag("#not ok")
    assert not is_normalized_tag("missing")


def test_normalize_tag_list_rejects_too_many():
    with pytest.raises(ValueError):
        normalize_tag_list([f"tag{i}" for i in range(MAX_TAGS + 1)])


# --- Notes ---

def test_note_create_defaults_and_tag_normalization():
    note = NoteCreate(title="  Plan ", content="body", tags=["Work", "side project"])

    assert note.title == "Plan"
    assert note.color is NoteColor.default
    assert note.is_pinned is False
    assert note.tags == ["#work", "#sideProject"]


@pytest.mark.parametrize("payload", [
    {"title": "", "content": "body"},
    {"title": "   ", "content": "body"},
    {"title": "ok", "content": ""},
    {"title": "ok", "content": "body", "color": "orange"},
    {"title": "ok", "content": "body", "tags": [f"t{i}" for i in range(9)]},
])
def test_note_create_rejects_invalid_input(payload):
    with pytest.raises(ValidationError):
        NoteCreate.model_validate(payload)


def test_note_update_rejects_explicit_null():
    with pytest.raises(ValidationError):
        NoteUpdate.model_validate({"title": None})
    with pytest.raises(ValidationError):
        NoteUpdate.model_validate({"tags": None})

    update = NoteUpdate.model_validate({"isPinned": True})
    assert update.model_fields_set == {"is_pinned"}


def test_stored_note_requires_normalized_tags():
    base = {
        "id": 1, "title": "t", "content": "c",
        "createdAt": "2024-01-01T00:00:00Z", "updatedAt": "2024-01-01T00:00:00Z",
    }

    assert Note.model_validate({**base, "tags": ["#ok"]}).tags == ["#ok"]
    with pytest.raises(ValidationError):
        Note.model_validate({**base, "tags": ["not normalized"]})
    with pytest.raises(ValidationError):
        Note.model_validate({**base, "tags": ["#dup", "#dup"]})


# --- Files ---

def test_folder_entries_have_no_path_or_size():
    with pytest.raises(ValidationError):
        FileCreate(
            name="docs", original_name="docs", path="/tmp/docs", size=0,
            mime_type="application/folder", is_folder=True,
        )
    with pytest.raises(ValidationError):
        FileCreate(
            name="docs", original_name="docs", path="", size=10,
            mime_type="application/folder", is_folder=True,
        )


def test_file_create_rejects_bad_values():
    with pytest.raises(ValidationError):
        FileCreate(name="a", original_name="a", path="/tmp/a", size=-1, mime_type="text/plain")
    with pytest.raises(ValidationError):
        FileCreate(name="", original_name="a", path="/tmp/a", size=1, mime_type="text/plain")
    with pytest.raises(ValidationError):
        FileCreate(name="a", original_name="a", path="/tmp/a", size=1, mime_type="text/plain", parent_id=0)


def test_file_metadata_keeps_unknown_keys():
    created = FileCreate.model_validate({
        "name": "a.pdf", "originalName": "a.pdf", "path": "/tmp/a.pdf", "size": 3,
        "mimeType": "application/pdf",
        "metadata": {"pages": 4, "wordCount": 120, "language": "ko"},
    })

    record = created.to_record()

    assert record["metadata"]["pages"] == 4
    assert record["metadata"]["wordCount"] == 120
    assert record["metadata"]["language"] == "ko"


def test_file_update_tracks_only_sent_fields():
    update = FileUpdate.model_validate({"parentId": None})

    assert update.model_fields_set == {"parent_id"}
    assert update.model_dump(by_alias=True, exclude_unset=True) == {"parentId": None}


@pytest.mark.parametrize("payload", [
    {"path": "/etc/passwd"},
    {"name": "x.txt"},
    {"size": 10},
])
def test_file_update_rejects_storage_fields(payload):
    with pytest.raises(ValidationError):
        FileUpdate.model_validate(payload)

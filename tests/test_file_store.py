import os

import pytest

from app.core.exceptions import ValidationError
from app.services.file_store import LocalFileStore, event_subdir

from .conftest import PDF_BYTES, pdf_stream


def test_save_returns_relative_reference(file_store):
    reference = file_store.save(pdf_stream(), "paper.PDF", event_subdir(4, "submissions"), stored_name="draft.pdf")
    assert reference == "events/4/submissions/draft.pdf"
    with open(file_store.path_for(reference), "rb") as stored:
        assert stored.read() == PDF_BYTES


def test_save_generates_unique_names(file_store):
    first = file_store.save(pdf_stream(), "a.pdf", "events/1/submissions")
    second = file_store.save(pdf_stream(), "a.pdf", "events/1/submissions")
    assert first != second
    assert first.endswith(".pdf")


@pytest.mark.parametrize(
    "content, filename",
    [
        (PDF_BYTES, "paper.txt"),
        (b"", "paper.pdf"),
        (b"PK\x03\x04 not a pdf", "paper.pdf"),
    ],
)
def test_invalid_files_are_rejected(file_store, content, filename):
    with pytest.raises(ValidationError):
        file_store.save(pdf_stream(content), filename, "events/1/submissions")


def test_size_limit(tmp_path):
    store = LocalFileStore(base_dir=str(tmp_path), max_bytes=16)
    with pytest.raises(ValidationError) as excinfo:
        store.save(pdf_stream(PDF_BYTES), "big.pdf", "events/1/final")
    assert excinfo.value.fields == {"file": "too large"}


def test_references_cannot_escape_root(file_store):
    with pytest.raises(ValidationError):
        file_store.path_for("../../etc/passwd")


def test_delete(file_store):
    reference = file_store.save(pdf_stream(), "a.pdf", "events/2/final", stored_name="final_a.pdf")
    file_store.delete(reference)
    assert not os.path.exists(file_store.path_for(reference))
    file_store.delete(reference)
    file_store.delete(None)

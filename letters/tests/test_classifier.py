import pytest

from letters.classifier import PartAction, classify
from letters.config import ProcessingMode
from letters.errors import MissingBoundaryError, UnknownContentTypeError
from letters.models import ContentInfo


def test_skip_list_wins_over_everything():
    ci = ContentInfo(type="multipart/mixed", disposition="attachment")
    decision = classify(ci, skip_content_types=["multipart/mixed"])
    assert decision.action == PartAction.SKIP
    assert not decision.diagnostic


def test_attachment_disposition_before_text():
    ci = ContentInfo(type="text/plain", disposition="attachment")
    assert classify(ci).action == PartAction.ATTACHMENT_FILE
    assert classify(ci, ProcessingMode.NO_ATTACHMENTS).action == PartAction.SKIP


@pytest.mark.parametrize("ctype", ["text/plain", "text/enriched", "text/html"])
def test_text_types(ctype):
    ci = ContentInfo(type=ctype, disposition="inline")
    assert classify(ci, ProcessingMode.NO_ATTACHMENTS).action == PartAction.TEXT


def test_multipart_recurse_and_missing_boundary():
    decision = classify(ContentInfo(type="multipart/alternative", type_params={"boundary": "b1"}))
    assert decision.action == PartAction.RECURSE
    assert decision.reason == "b1"

    decision = classify(ContentInfo(type="multipart/alternative"))
    assert decision.action == PartAction.ERROR
    assert isinstance(decision.error, MissingBoundaryError)


def test_inline_and_attached_files_are_mode_gated():
    inline = ContentInfo(type="image/png", disposition="inline")
    attached = ContentInfo(type="application/pdf")
    assert classify(inline).action == PartAction.INLINE_FILE
    assert classify(attached).action == PartAction.ATTACHMENT_FILE
    for mode in (ProcessingMode.NO_ATTACHMENTS, ProcessingMode.HEADERS_ONLY):
        assert classify(inline, mode).action == PartAction.SKIP
        assert classify(attached, mode).action == PartAction.SKIP


def test_ignorable_types_skip_with_diagnostic():
    decision = classify(ContentInfo(type="text/calendar"))
    assert decision.action == PartAction.SKIP
    assert decision.diagnostic


def test_unknown_type_is_an_error():
    decision = classify(ContentInfo(type="text/x-unknown"))
    assert decision.action == PartAction.ERROR
    assert isinstance(decision.error, UnknownContentTypeError)
    assert decision.error.content_type == "text/x-unknown"
